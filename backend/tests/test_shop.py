import datetime as dt
from decimal import Decimal

from conftest import auth, register


def _dealer(client, email="dealer@example.com", name="Throttle Works"):
    token, user = register(client, email, role="dealer", name=name)
    return token, user


def _shop_id(client, token):
    return client.get("/api/shop/profile", headers=auth(token)).json()["shop"]["id"]


def test_riders_are_forbidden_from_dealer_routes(client):
    rider, _ = register(client, "rider@example.com")
    res = client.get("/api/shop/promotions", headers=auth(rider))
    assert res.status_code == 403
    assert res.json() == {"error": "User role rider is not authorized to access this route"}


def test_update_profile(client):
    token, _ = _dealer(client)
    res = client.put("/api/shop/profile", json={"hours": "9-5", "visible": False}, headers=auth(token))
    assert res.status_code == 200
    shop = res.json()["shop"]
    assert shop["hours"] == "9-5"
    assert shop["visible"] is False
    assert shop["business_name"] == "Throttle Works"


def test_profile_business_name_cannot_be_blanked(client):
    token, _ = _dealer(client)
    res = client.put("/api/shop/profile", json={"business_name": "  "}, headers=auth(token))
    assert res.status_code == 400


def test_promotion_crud(client):
    token, _ = _dealer(client)
    res = client.post("/api/shop/promotions", json={"title": "Spring service", "discount": "15%"}, headers=auth(token))
    assert res.status_code == 201
    promo = res.json()["promotion"]
    assert promo["active"] is True

    res = client.put(f"/api/shop/promotions/{promo['id']}", json={"active": False}, headers=auth(token))
    assert res.json()["promotion"]["active"] is False
    assert res.json()["promotion"]["discount"] == "15%"

    listed = client.get("/api/shop/promotions", headers=auth(token)).json()["promotions"]
    assert [p["id"] for p in listed] == [promo["id"]]

    assert client.delete(f"/api/shop/promotions/{promo['id']}", headers=auth(token)).status_code == 200
    assert client.get("/api/shop/promotions", headers=auth(token)).json()["promotions"] == []


def test_promotion_requires_title(client):
    token, _ = _dealer(client)
    res = client.post("/api/shop/promotions", json={}, headers=auth(token))
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required fields: title"


def test_items_require_name_and_price(client):
    token, _ = _dealer(client)
    res = client.post("/api/shop/items", json={"name": "Chain lube"}, headers=auth(token))
    assert res.status_code == 400

    res = client.post("/api/shop/items", json={"name": "Chain lube", "price": "12.50", "stock": 4}, headers=auth(token))
    assert res.status_code == 201
    item = res.json()["item"]
    assert Decimal(str(item["price"])) == Decimal("12.50")
    assert item["stock"] == 4


def test_dealer_cannot_touch_another_shops_rows(client):
    token_a, _ = _dealer(client, "a@example.com", "Shop A")
    token_b, _ = _dealer(client, "b@example.com", "Shop B")
    item = client.post(
        "/api/shop/items", json={"name": "Gloves", "price": "30"}, headers=auth(token_a)
    ).json()["item"]
    bike = client.post(
        "/api/shop/inventory", json={"make": "BMW", "model": "R1250GS"}, headers=auth(token_a)
    ).json()["bike"]

    assert client.put(f"/api/shop/items/{item['id']}", json={"stock": 0}, headers=auth(token_b)).status_code == 404
    assert client.delete(f"/api/shop/items/{item['id']}", headers=auth(token_b)).status_code == 404
    assert client.delete(f"/api/shop/inventory/{bike['id']}", headers=auth(token_b)).status_code == 404
    assert client.get("/api/shop/items", headers=auth(token_b)).json()["items"] == []


def test_inventory_crud(client):
    token, _ = _dealer(client)
    res = client.post(
        "/api/shop/inventory",
        json={"make": "Triumph", "model": "Bonneville", "year": 2019, "price": "8999.00"},
        headers=auth(token),
    )
    assert res.status_code == 201
    bike = res.json()["bike"]
    assert bike["status"] == "Available"

    res = client.put(f"/api/shop/inventory/{bike['id']}", json={"status": "Sold"}, headers=auth(token))
    assert res.json()["bike"]["status"] == "Sold"
    assert res.json()["bike"]["model"] == "Bonneville"


def test_dealer_books_walk_in_and_filters_by_date(client):
    token, _ = _dealer(client)
    day = (dt.date.today() + dt.timedelta(days=1)).isoformat()
    other_day = (dt.date.today() + dt.timedelta(days=2)).isoformat()
    for when, at in ((day, "14:00"), (day, "09:00"), (other_day, "10:00")):
        res = client.post(
            "/api/shop/appointments",
            json={"service_type": "Oil change", "date": when, "time": at, "customer_name": "Walk in"},
            headers=auth(token),
        )
        assert res.status_code == 201
        assert res.json()["appointment"]["customer_id"] is None

    all_rows = client.get("/api/shop/appointments", headers=auth(token)).json()["appointments"]
    assert len(all_rows) == 3

    same_day = client.get(f"/api/shop/appointments?date={day}", headers=auth(token)).json()["appointments"]
    assert [a["time"][:5] for a in same_day] == ["09:00", "14:00"]


def test_rider_books_into_visible_shop(client):
    dealer, _ = _dealer(client)
    rider, rider_user = register(client, "rider@example.com")
    shop_id = _shop_id(client, dealer)
    payload = {"shop_id": shop_id, "service_type": "Tyres", "date": dt.date.today().isoformat(), "time": "11:00"}

    res = client.post("/api/shop/appointments", json=payload, headers=auth(rider))
    assert res.status_code == 201
    appt = res.json()["appointment"]
    assert appt["customer_id"] == rider_user["id"]
    assert appt["shop_id"] == shop_id

    mine = client.get("/api/shop/appointments/mine", headers=auth(rider)).json()["appointments"]
    assert [a["id"] for a in mine] == [appt["id"]]

    res = client.put(f"/api/shop/appointments/{appt['id']}", json={"status": "confirmed"}, headers=auth(dealer))
    assert res.json()["appointment"]["status"] == "confirmed"


def test_rider_booking_rules(client):
    dealer, _ = _dealer(client)
    rider, _ = register(client, "rider@example.com")
    shop_id = _shop_id(client, dealer)
    base = {"service_type": "Tyres", "date": dt.date.today().isoformat(), "time": "11:00"}

    assert client.post("/api/shop/appointments", json=base, headers=auth(rider)).status_code == 400
    assert client.post("/api/shop/appointments", json={**base, "shop_id": 999}, headers=auth(rider)).status_code == 404

    client.put("/api/shop/profile", json={"accepting_appointments": False}, headers=auth(dealer))
    res = client.post("/api/shop/appointments", json={**base, "shop_id": shop_id}, headers=auth(rider))
    assert res.status_code == 400
    assert res.json()["error"] == "Shop is not accepting appointments"

    client.put("/api/shop/profile", json={"visible": False}, headers=auth(dealer))
    res = client.post("/api/shop/appointments", json={**base, "shop_id": shop_id}, headers=auth(rider))
    assert res.status_code == 404


def test_directory_lists_visible_shops_only(client):
    dealer_a, _ = _dealer(client, "a@example.com", "Alpha Moto")
    dealer_b, _ = _dealer(client, "b@example.com", "Beta Bikes")
    rider, _ = register(client, "rider@example.com")
    client.put("/api/shop/profile", json={"visible": False}, headers=auth(dealer_b))

    shops = client.get("/api/shop/directory", headers=auth(rider)).json()["shops"]
    assert [s["business_name"] for s in shops] == ["Alpha Moto"]
    assert "user_id" not in shops[0]
