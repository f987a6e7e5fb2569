import datetime as dt

import pytest
from sqlalchemy import func, select

from conftest import auth, register
from motoclub.models import (
    Appointment,
    Bike,
    BikePhoto,
    Follow,
    MaintenanceRecord,
    MediaUpload,
    Post,
    PostComment,
    Ride,
    RideRSVP,
    ShopProfile,
    Story,
    StoreItem,
    User,
)
from motoclub.policies import media


@pytest.fixture
def fake_media(monkeypatch):
    destroyed = []
    counter = iter(range(1, 1000))

    def fake_upload(*, raw, resource_type, folder, filename=""):
        n = next(counter)
        return f"https://cdn.example.com/{n}.jpg", f"em-motorcycle/{n}"

    def fake_destroy(*, public_id, resource_type="image"):
        destroyed.append(public_id)

    monkeypatch.setattr(media, "upload_bytes", fake_upload)
    monkeypatch.setattr(media, "destroy", fake_destroy)
    return destroyed


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_delete_account_removes_everything_it_owns(client, session_factory, fake_media):
    token, user = register(client, "leaving@example.com")
    friend, friend_user = register(client, "friend@example.com")

    bike = client.post("/api/bikes", json={"make": "KTM", "model": "Duke"}, headers=auth(token)).json()["bike"]
    client.post(f"/api/bikes/{bike['id']}/photos", json={"photo_url": "https://img/1.jpg"}, headers=auth(token))
    day = (dt.date.today() + dt.timedelta(days=3)).isoformat()
    ride = client.post("/api/rides", json={"title": "Hills", "date": day}, headers=auth(token)).json()["ride"]
    client.post(f"/api/rides/{ride['id']}/rsvp", headers=auth(friend))
    post = client.post("/api/posts", json={"content": "bye"}, headers=auth(token)).json()["post"]
    client.post(f"/api/posts/{post['id']}/comments", json={"content": "see ya"}, headers=auth(friend))
    client.post("/api/stories", json={"media_url": "https://img/s.jpg"}, headers=auth(token))
    client.post(f"/api/users/{friend_user['id']}/follow", headers=auth(token))
    client.post(f"/api/users/{user['id']}/follow", headers=auth(friend))
    client.post("/api/upload", files={"image": ("a.jpg", b"\xff\xd8data", "image/jpeg")}, headers=auth(token))

    res = client.delete("/api/auth/me", headers=auth(token))
    assert res.status_code == 200
    assert fake_media == ["em-motorcycle/1"]

    with session_factory() as db:
        assert db.get(User, user["id"]) is None
        for model in (Bike, BikePhoto, MaintenanceRecord, Ride, RideRSVP, Post, PostComment, Story, Follow, MediaUpload):
            assert _count(db, model) == 0, model.__tablename__

    # The old token no longer resolves to an account.
    assert client.get("/api/auth/me", headers=auth(token)).status_code == 401
    assert client.get("/api/auth/me", headers=auth(friend)).status_code == 200


def test_delete_dealer_removes_shop_and_keeps_bookings_elsewhere(client, session_factory):
    dealer, _ = register(client, "dealer@example.com", role="dealer", name="Shop")
    other_dealer, _ = register(client, "other@example.com", role="dealer", name="Other")
    client.post("/api/shop/items", json={"name": "Oil", "price": "9.99"}, headers=auth(dealer))

    other_shop = client.get("/api/shop/profile", headers=auth(other_dealer)).json()["shop"]["id"]
    rider, _ = register(client, "rider@example.com")
    booking = {"shop_id": other_shop, "service_type": "Tyres", "date": dt.date.today().isoformat(), "time": "10:00"}
    appt = client.post("/api/shop/appointments", json=booking, headers=auth(rider)).json()["appointment"]

    assert client.delete("/api/auth/me", headers=auth(dealer)).status_code == 200
    assert client.delete("/api/auth/me", headers=auth(rider)).status_code == 200

    with session_factory() as db:
        assert _count(db, ShopProfile) == 1
        assert _count(db, StoreItem) == 0
        kept = db.get(Appointment, appt["id"])
        assert kept is not None
        assert kept.customer_id is None
