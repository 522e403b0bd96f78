import pytest
from fastapi import HTTPException

import main

ADDRESS = {
    "first_name": "Jane",
    "last_name": "Doe",
    "address": "D Ground",
    "apartment": "Apt 123",
    "city": "Faisalabad",
    "state": "Punjab",
    "zip": "38000",
    "country": "Pakistan",
}


def test_cart_rows_bulk_replace_and_delete(client, signup):
    _, headers = signup("jane@example.com")
    assert client.get("/cart", headers=headers).json() == []
    items = [
        {"id": "p1", "name": "Watch", "price": 250.0, "quantity": 1},
        {"id": "p2", "name": "Mouse", "price": 40.0, "quantity": 2},
        {"id": "p1", "name": "Watch", "price": 250.0, "quantity": 2},
    ]
    cart = client.put("/cart", json={"items": items}, headers=headers).json()
    assert [(i["id"], i["quantity"]) for i in cart] == [("p1", 3), ("p2", 2)]
    assert cart[0]["name"] == "Watch"

    client.delete("/cart/p1", headers=headers)
    assert [i["id"] for i in client.get("/cart", headers=headers).json()] == ["p2"]


def test_cart_rejects_zero_quantity(client, signup):
    _, headers = signup("jane@example.com")
    resp = client.put("/cart", json={"items": [{"id": "p1", "price": 1.0, "quantity": 0}]}, headers=headers)
    assert resp.status_code == 422


def test_cart_rows_are_per_user(client, signup):
    _, jane = signup("jane@example.com")
    _, bob = signup("bob@example.com")
    client.put("/cart", json={"items": [{"id": "p1", "price": 1.0, "quantity": 1}]}, headers=jane)
    assert client.get("/cart", headers=bob).json() == []


def test_wishlist_rows_keep_first_occurrence(client, signup):
    _, headers = signup("jane@example.com")
    items = [{"id": "p7", "name": "Lamp"}, {"id": "p7", "name": "Lamp (dupe)"}, {"id": "p8", "name": "Bag"}]
    wishlist = client.put("/wishlist", json={"items": items}, headers=headers).json()
    assert [(i["id"], i["name"]) for i in wishlist] == [("p7", "Lamp"), ("p8", "Bag")]
    assert "quantity" not in wishlist[0]
    client.delete("/wishlist/p7", headers=headers)
    assert [i["id"] for i in client.get("/wishlist", headers=headers).json()] == ["p8"]


def test_only_one_default_address(client, signup):
    _, headers = signup("jane@example.com")
    first = client.post("/addresses", json={**ADDRESS, "is_default": True}, headers=headers).json()
    second = client.post("/addresses", json={**ADDRESS, "city": "Lahore", "is_default": True}, headers=headers).json()
    addresses = client.get("/addresses", headers=headers).json()
    assert [a["id"] for a in addresses if a["is_default"]] == [second["id"]]

    client.post(f"/addresses/{first['id']}/default", headers=headers)
    addresses = client.get("/addresses", headers=headers).json()
    assert addresses[0]["id"] == first["id"]
    assert [a["is_default"] for a in addresses] == [True, False]


def test_address_update_and_delete(client, signup):
    _, headers = signup("jane@example.com")
    created = client.post("/addresses", json=ADDRESS, headers=headers).json()
    updated = client.put(f"/addresses/{created['id']}", json={**ADDRESS, "city": "Karachi"}, headers=headers).json()
    assert updated["city"] == "Karachi"
    assert client.delete(f"/addresses/{created['id']}", headers=headers).json() == {"ok": True}
    assert client.get("/addresses", headers=headers).json() == []


def test_addresses_are_private(client, signup):
    _, jane = signup("jane@example.com")
    _, bob = signup("bob@example.com")
    created = client.post("/addresses", json=ADDRESS, headers=jane).json()
    assert client.delete(f"/addresses/{created['id']}", headers=bob).status_code == 404
    assert client.post(f"/addresses/{created['id']}/default", headers=bob).status_code == 404


def test_order_lifecycle(client, signup, admin, product):
    user_id, headers = signup("jane@example.com")
    _, admin_headers = admin
    mouse = client.post("/products", json={"name": "Mouse", "price": 40.0, "category": "Accessories"}, headers=admin_headers).json()
    resp = client.post("/orders", json={
        "items": [
            {"id": product["id"], "name": "Watch", "price": 250.0, "quantity": 1},
            {"id": mouse["id"], "name": "Mouse", "price": 40.0, "quantity": 2},
        ],
        "shipping_address": {k: v for k, v in ADDRESS.items()},
    }, headers=headers)
    assert resp.status_code == 200
    order = resp.json()
    assert order["status"] == "Processing"
    assert order["total"] == 330.0
    assert order["user_id"] == user_id
    assert order["order_number"].startswith("MX") and len(order["order_number"]) == 7

    assert [o["id"] for o in client.get("/orders", headers=headers).json()] == [order["id"]]
    assert client.get(f"/orders/{order['id']}", headers=headers).json()["order_number"] == order["order_number"]

    _, bob = signup("bob@example.com")
    assert client.get(f"/orders/{order['id']}", headers=bob).status_code == 403
    assert client.patch(f"/admin/orders/{order['id']}/status", json={"status": "Shipped"}, headers=headers).status_code == 403

    shipped = client.patch(f"/admin/orders/{order['id']}/status", json={"status": "Shipped"}, headers=admin_headers)
    assert shipped.json()["status"] == "Shipped"
    assert client.patch(f"/admin/orders/{order['id']}/status", json={"status": "Lost"}, headers=admin_headers).status_code == 422
    assert len(client.get("/admin/orders", headers=admin_headers).json()) == 1
    assert client.get("/admin/orders", params={"status": "Delivered"}, headers=admin_headers).json() == []
    assert client.get("/admin/stats", headers=admin_headers).json()["revenue"] == 330.0


def test_order_needs_items(client, signup):
    _, headers = signup("jane@example.com")
    resp = client.post("/orders", json={"items": [], "shipping_address": ADDRESS}, headers=headers)
    assert resp.status_code == 422


def test_order_prices_come_from_the_catalog(client, signup, product):
    _, headers = signup("jane@example.com")
    resp = client.post("/orders", json={
        "items": [{"id": product["id"], "name": "Cheap Watch", "price": 1.0, "quantity": 2}],
        "shipping_address": ADDRESS,
    }, headers=headers)
    assert resp.status_code == 200
    order = resp.json()
    assert order["total"] == 500.0
    assert (order["items"][0]["name"], order["items"][0]["price"]) == ("Classic Leather Watch", 250.0)


def test_order_rejects_unknown_products(client, signup):
    _, headers = signup("jane@example.com")
    for product_id in ("p1", "0123456789abcdef01234567"):
        resp = client.post("/orders", json={
            "items": [{"id": product_id, "name": "Ghost", "price": 10.0, "quantity": 1}],
            "shipping_address": ADDRESS,
        }, headers=headers)
        assert resp.status_code == 400
        assert "no longer available" in resp.json()["detail"]


def test_order_number_skips_numbers_in_use(mongo, monkeypatch):
    mongo["order"].insert_one({"order_number": "MX12345"})
    picks = iter([12345, 12345, 54321])
    monkeypatch.setattr(main.random, "randint", lambda a, b: next(picks))
    assert main.generate_order_number() == "MX54321"


def test_order_number_gives_up_when_exhausted(mongo, monkeypatch):
    mongo["order"].insert_one({"order_number": "MX12345"})
    monkeypatch.setattr(main.random, "randint", lambda a, b: 12345)
    with pytest.raises(HTTPException) as exc:
        main.generate_order_number()
    assert exc.value.status_code == 503
