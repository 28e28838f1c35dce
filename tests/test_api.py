"""HTTP tests for the storefront and staff controller endpoints."""

import pytest
from conftest import make_failing
from fastapi.testclient import TestClient

from bloom.config import Settings
from bloom.main import create_app


@pytest.fixture
def local_app(tmp_path, local_store):
    settings = Settings(store_backend="local", local_store_dir=str(tmp_path / "storage"))
    return create_app(settings, store=local_store)


@pytest.fixture
def client(local_app):
    with TestClient(local_app) as test_client:
        yield test_client


@pytest.fixture
def staff(local_app, client):
    # shares the app started by ``client``, with its own cookie jar
    return TestClient(local_app)


def _fill_cart(client):
    client.post("/cart/items", json={"name": "Latte"})
    client.post("/cart/items", json={"name": "Latte"})
    return client.post("/cart/items", json={"name": "Water"})


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_storefront_reads_table_once(client):
    first = client.get("/", params={"table": "7"}).json()
    assert first["view"] == "storefront"
    assert first["table_id"] == "7"
    assert client.get("/", params={"table": "9"}).json()["table_id"] == "7"


def test_menu_groups(client):
    groups = client.get("/menu").json()["groups"]
    latte = next(item for item in groups["Drinks"]["Hot Drinks"] if item["name"] == "Latte")
    assert latte["price"] == "6.99"


def test_cart_flow(client):
    response = _fill_cart(client)
    cart = response.json()
    assert cart["subtotal"] == "16.48"
    assert cart["tax"] == "2.14"
    assert cart["total"] == "18.62"
    assert cart["item_count"] == 3

    cart = client.patch("/cart/items/Latte", json={"delta": -1}).json()
    assert [(line["name"], line["quantity"]) for line in cart["lines"]] == [("Latte", 1), ("Water", 1)]
    cart = client.delete("/cart/items/Water").json()
    assert [line["name"] for line in cart["lines"]] == ["Latte"]
    cart = client.delete("/cart").json()
    assert cart["lines"] == []


def test_unknown_item_is_404(client):
    assert client.post("/cart/items", json={"name": "Pumpkin Spice"}).status_code == 404


def test_checkout_places_order_and_clears_cart(client, local_store):
    client.get("/", params={"table": "7"})
    _fill_cart(client)
    response = client.post("/cart/checkout")
    assert response.status_code == 201
    body = response.json()
    assert body["order"]["table_id"] == "7"
    assert body["order"]["subtotal"] == "16.48"
    assert body["order"]["status"] == "pending"
    assert body["total"] == "18.62"
    assert client.get("/cart").json()["lines"] == []
    assert client.get("/notices").json()["order_placed"]["title"] == "Order placed!"


def test_checkout_without_table_is_walk_in(client):
    client.post("/cart/items", json={"name": "Tea"})
    assert client.post("/cart/checkout").json()["order"]["table_id"] == "Walk-in"


def test_empty_checkout_is_no_content(client, local_store):
    assert client.post("/cart/checkout").status_code == 204


def test_failed_checkout_keeps_cart(client, local_store, monkeypatch):
    _fill_cart(client)
    make_failing(monkeypatch, local_store, "create")
    response = client.post("/cart/checkout", json={"table_id": "4"})
    assert response.status_code == 503
    assert client.get("/cart").json()["subtotal"] == "16.48"
    titles = [notice["title"] for notice in client.get("/notices").json()["notices"]]
    assert titles == ["Order not placed"]


def test_reservation_and_contact_validation(client):
    bad = client.post(
        "/reservations",
        json={"name": "", "email": "nope", "guests": 0, "date": "2026-10-31", "time": "19:00"},
    )
    assert bad.status_code == 422
    assert client.post("/contact", json={"name": "Sam", "email": "sam@example.com", "message": "  "}).status_code == 422


def test_reservation_and_message_reach_dashboard(client, staff):
    reservation = client.post(
        "/reservations",
        json={"name": "Omar", "email": "omar@example.com", "guests": 4, "date": "2026-10-31", "time": "19:00"},
    )
    assert reservation.status_code == 201
    message = client.post("/contact", json={"name": "Sam", "email": "sam@example.com", "message": "Hello"})
    assert message.status_code == 201
    titles = [notice["title"] for notice in client.get("/notices").json()["notices"]]
    assert titles == ["Table booked!", "Message sent!"]

    dashboard = staff.get("/controller").json()
    assert dashboard["reservation_count"] == 1
    assert dashboard["unread_message_count"] == 1

    message_id = message.json()["id"]
    read = staff.post(f"/controller/messages/{message_id}/read")
    assert read.json()["is_read"] is True
    assert staff.post(f"/controller/messages/{message_id}/read").status_code == 200
    assert staff.get("/controller").json()["unread_message_count"] == 0


def test_staff_advances_order(client, staff):
    _fill_cart(client)
    order_id = client.post("/cart/checkout", json={"table_id": "7"}).json()["order"]["id"]

    dashboard = staff.get("/controller").json()
    assert dashboard["active_order_count"] == 1
    assert dashboard["orders"][0]["next_action"] == "Start Prep"
    assert dashboard["orders"][0]["total"] == "18.62"

    advanced = staff.post(f"/controller/orders/{order_id}/advance", json={"seen_status": "pending"})
    assert advanced.json()["status"] == "preparing"
    # a second click on the same stale action changes nothing
    again = staff.post(f"/controller/orders/{order_id}/advance", json={"seen_status": "pending"})
    assert again.json()["status"] == "preparing"

    served = staff.post(f"/controller/orders/{order_id}/advance")
    assert served.json()["status"] == "served"
    assert served.json()["next_action"] is None
    assert staff.post(f"/controller/orders/{order_id}/advance").status_code == 409
    assert staff.get("/controller").json()["active_order_count"] == 0


def test_advance_unknown_order_is_404(staff):
    assert staff.post("/controller/orders/missing/advance").status_code == 404


def test_failed_advance_is_reported(client, staff, local_store, monkeypatch):
    client.post("/cart/items", json={"name": "Tea"})
    order_id = client.post("/cart/checkout").json()["order"]["id"]
    staff.get("/controller")
    make_failing(monkeypatch, local_store, "update")
    assert staff.post(f"/controller/orders/{order_id}/advance").status_code == 503
    dashboard = staff.get("/controller").json()
    assert dashboard["orders"][0]["status"] == "pending"
    assert [notice["title"] for notice in dashboard["notices"]] == ["Order update failed"]


def test_destructive_actions_need_confirmation(client, staff, local_store):
    client.post(
        "/reservations",
        json={"name": "Omar", "email": "omar@example.com", "guests": 2, "date": "2026-11-01", "time": "18:00"},
    )
    reservation_id = staff.get("/controller").json()["reservations"][0]["id"]
    assert staff.delete(f"/controller/reservations/{reservation_id}").status_code == 400
    assert staff.delete(f"/controller/reservations/{reservation_id}", params={"confirm": "true"}).status_code == 204
    assert staff.get("/controller").json()["reservation_count"] == 0

    client.post("/cart/items", json={"name": "Tea"})
    client.post("/cart/checkout")
    assert staff.delete("/controller/orders").status_code == 400
    cleared = staff.delete("/controller/orders", params={"confirm": "true"})
    assert cleared.json() == {"collection": "orders", "deleted": 1}
    assert staff.get("/controller").json()["orders"] == []
    assert staff.delete("/controller/widgets", params={"confirm": "true"}).status_code == 422


def test_session_cookie_keeps_carts_apart(local_app):
    with TestClient(local_app) as alice:
        bob = TestClient(local_app)
        alice.post("/cart/items", json={"name": "Latte"})
        assert bob.get("/cart").json()["lines"] == []
        assert alice.get("/cart").json()["item_count"] == 1
