import datetime as dt

from conftest import auth, register


def _future(days=7):
    return (dt.date.today() + dt.timedelta(days=days)).isoformat()


def _ride(client, token, **fields):
    payload = {"title": "Coast run", "date": _future(), "time": "09:30", **fields}
    res = client.post("/api/rides", json=payload, headers=auth(token))
    assert res.status_code == 201, res.text
    return res.json()["ride"]


def test_creator_is_going_to_their_own_ride(client):
    token, user = register(client, "lead@example.com", name="Lead")
    ride = _ride(client, token)

    detail = client.get(f"/api/rides/{ride['id']}", headers=auth(token)).json()["ride"]
    assert detail["rsvp_count"] == 1
    assert detail["user_rsvp"] is True
    assert detail["creator_name"] == "Lead"
    assert [u["id"] for u in detail["rsvp_users"]] == [user["id"]]


def test_create_ride_requires_title_and_date(client):
    token, _ = register(client, "lead@example.com")
    res = client.post("/api/rides", json={"title": "No date"}, headers=auth(token))
    assert res.status_code == 400
    assert res.json()["error"] == "Title and date are required"


def test_list_shows_only_upcoming_rides(client):
    token, _ = register(client, "lead@example.com")
    _ride(client, token, title="Past", date=(dt.date.today() - dt.timedelta(days=3)).isoformat())
    _ride(client, token, title="Later", date=_future(10))
    _ride(client, token, title="Sooner", date=_future(2))

    rides = client.get("/api/rides", headers=auth(token)).json()["rides"]
    assert [r["title"] for r in rides] == ["Sooner", "Later"]


def test_rsvp_is_idempotent_per_rider(client):
    lead, _ = register(client, "lead@example.com")
    rider, _ = register(client, "rider@example.com")
    ride = _ride(client, lead)

    first = client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(rider))
    second = client.post(f"/api/rides/{ride['id']}/rsvp", json={"status": "going"}, headers=auth(rider))
    assert first.status_code == 200
    assert second.json()["rsvp_count"] == 2
    assert first.json()["rsvp"]["id"] == second.json()["rsvp"]["id"]


def test_rsvp_not_going_keeps_row_but_drops_count(client):
    lead, _ = register(client, "lead@example.com")
    rider, _ = register(client, "rider@example.com")
    ride = _ride(client, lead)

    client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(rider))
    res = client.post(f"/api/rides/{ride['id']}/rsvp", json={"status": "not_going"}, headers=auth(rider))
    assert res.json()["rsvp"]["status"] == "not_going"
    assert res.json()["rsvp_count"] == 1


def test_rsvp_rejects_unknown_status(client):
    lead, _ = register(client, "lead@example.com")
    ride = _ride(client, lead)
    res = client.post(f"/api/rides/{ride['id']}/rsvp", json={"status": "maybe"}, headers=auth(lead))
    assert res.status_code == 400


def test_full_ride_rejects_new_riders_but_not_existing_ones(client):
    lead, _ = register(client, "lead@example.com")
    rider, _ = register(client, "rider@example.com")
    late, _ = register(client, "late@example.com")
    ride = _ride(client, lead, max_riders=2)

    assert client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(rider)).status_code == 200

    full = client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(late))
    assert full.status_code == 400
    assert full.json() == {"error": "Ride is full"}

    again = client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(rider))
    assert again.status_code == 200
    assert again.json()["rsvp_count"] == 2


def test_cancel_rsvp_frees_a_slot(client):
    lead, _ = register(client, "lead@example.com")
    rider, _ = register(client, "rider@example.com")
    late, _ = register(client, "late@example.com")
    ride = _ride(client, lead, max_riders=2)
    client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(rider))

    res = client.delete(f"/api/rides/{ride['id']}/rsvp", headers=auth(rider))
    assert res.status_code == 200
    assert res.json()["rsvp_count"] == 1
    assert client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(late)).status_code == 200


def test_rsvp_to_missing_ride(client):
    token, _ = register(client, "rider@example.com")
    assert client.post("/api/rides/999/rsvp", headers=auth(token)).status_code == 404
    assert client.delete("/api/rides/999/rsvp", headers=auth(token)).status_code == 404


def test_my_and_attending_rides(client):
    lead, _ = register(client, "lead@example.com")
    rider, _ = register(client, "rider@example.com")
    ride = _ride(client, lead)
    client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(rider))

    assert [r["id"] for r in client.get("/api/rides/my", headers=auth(lead)).json()["rides"]] == [ride["id"]]
    assert client.get("/api/rides/my", headers=auth(rider)).json()["rides"] == []
    attending = client.get("/api/rides/attending", headers=auth(rider)).json()["rides"]
    assert [r["id"] for r in attending] == [ride["id"]]


def test_only_creator_can_delete_ride(client):
    lead, _ = register(client, "lead@example.com")
    rider, _ = register(client, "rider@example.com")
    ride = _ride(client, lead)

    assert client.delete(f"/api/rides/{ride['id']}", headers=auth(rider)).status_code == 404
    assert client.delete(f"/api/rides/{ride['id']}", headers=auth(lead)).status_code == 200
    assert client.get(f"/api/rides/{ride['id']}", headers=auth(lead)).status_code == 404


def test_ride_is_not_saved_when_creator_rsvp_fails(client, session_factory, monkeypatch):
    from fastapi.testclient import TestClient
    from sqlalchemy import func, select

    from motoclub.main import app
    from motoclub.models import Ride, RideRSVP
    from motoclub.policies import rides as ride_rules

    token, _ = register(client, "lead@example.com")

    def broken_rsvp(**kwargs):
        raise RuntimeError("rsvp insert failed")

    monkeypatch.setattr(ride_rules, "RideRSVP", broken_rsvp)
    res = TestClient(app, raise_server_exceptions=False).post(
        "/api/rides", json={"title": "Coast run", "date": _future()}, headers=auth(token)
    )
    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error"}

    with session_factory() as db:
        assert db.execute(select(func.count(Ride.id))).scalar_one() == 0
        assert db.execute(select(func.count(RideRSVP.id))).scalar_one() == 0
