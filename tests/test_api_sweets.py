# tests/test_api_sweets.py
import pytest
from fastapi.testclient import TestClient

from sweetshop.database import InMemoryInventoryStore, InMemoryUserStore
from sweetshop.errors import StoreUnavailable
from sweetshop.main import create_app


def test_list_empty_without_auth(client):
    r = client.get("/api/sweets")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["count"] == 0
    assert body["data"] == []


def test_list_newest_first_and_filters(client, make_sweet):
    make_sweet(name="Dark Chocolate", category="Chocolate", quantity=5)
    make_sweet(name="Gummy Worms", category="Gummy", quantity=0)
    make_sweet(name="Sour Gummies", category="Gummy", quantity=7)

    names = [s["name"] for s in client.get("/api/sweets").json()["data"]]
    assert names == ["Sour Gummies", "Gummy Worms", "Dark Chocolate"]

    gummies = client.get("/api/sweets", params={"category": "Gummy"}).json()["data"]
    assert {s["name"] for s in gummies} == {"Gummy Worms", "Sour Gummies"}

    in_stock = client.get("/api/sweets", params={"inStock": "true"}).json()["data"]
    assert {s["name"] for s in in_stock} == {"Dark Chocolate", "Sour Gummies"}

    sold_out = client.get("/api/sweets", params={"inStock": "false"}).json()["data"]
    assert [s["name"] for s in sold_out] == ["Gummy Worms"]


def test_unknown_category_filter_is_rejected(client):
    r = client.get("/api/sweets", params={"category": "Vegetables"})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_search_is_case_insensitive(client, make_sweet):
    make_sweet(name="Milk Chocolate")
    make_sweet(name="Fruit Gums", category="Gummy")
    r = client.get("/api/sweets/search", params={"name": "CHOC"})
    assert r.status_code == 200
    assert [s["name"] for s in r.json()["data"]] == ["Milk Chocolate"]
    assert client.get("/api/sweets/search", params={"name": "licorice"}).json()["data"] == []


def test_get_sweet_by_id(client, make_sweet):
    sweet = make_sweet()
    r = client.get(f"/api/sweets/{sweet['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Chocolate Bar"
    assert client.get("/api/sweets/nope").status_code == 404


def test_admin_can_create_sweet(client, admin_headers):
    r = client.post("/api/sweets", json={
        "name": "  Lollipop  ", "category": "Lollipop", "price": 2, "quantity": 200,
        "description": "Sweet lollipop",
    }, headers=admin_headers)
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["name"] == "Lollipop"
    assert data["inStock"] is True
    assert data["id"]
    assert data["createdAt"]


def test_created_with_zero_quantity_is_out_of_stock(make_sweet):
    assert make_sweet(quantity=0)["inStock"] is False


def test_normal_user_cannot_create(client, user_headers):
    r = client.post("/api/sweets", json={
        "name": "Toffee", "category": "Candy", "price": 2, "quantity": 5,
    }, headers=user_headers)
    assert r.status_code == 403
    assert "Admin access required" in r.json()["message"]


def test_create_requires_token(client):
    payload = {"name": "Toffee", "category": "Candy", "price": 2, "quantity": 5}
    assert client.post("/api/sweets", json=payload).status_code == 401
    r = client.post("/api/sweets", json=payload, headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    assert r.json()["message"] == "Not authorized. Invalid token."


def test_create_validation(client, admin_headers):
    cases = [
        {"name": "Toffee"},
        {"name": "Toffee", "category": "Candy", "price": 0, "quantity": 5},
        {"name": "Toffee", "category": "Candy", "price": -1, "quantity": 5},
        {"name": "Toffee", "category": "Candy", "price": 1, "quantity": -5},
        {"name": "T", "category": "Candy", "price": 1, "quantity": 5},
        {"name": "Toffee", "category": "Vegetable", "price": 1, "quantity": 5},
        {"name": "Toffee", "category": "Candy", "price": 1, "quantity": 5, "description": "x" * 501},
    ]
    for payload in cases:
        r = client.post("/api/sweets", json=payload, headers=admin_headers)
        assert r.status_code == 400, payload
        assert r.json()["success"] is False


def test_admin_update_recomputes_in_stock(client, admin_headers, make_sweet):
    sweet = make_sweet(quantity=3)
    r = client.put(f"/api/sweets/{sweet['id']}", json={"quantity": 0, "price": 7.5}, headers=admin_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert (data["quantity"], data["inStock"], data["price"]) == (0, False, 7.5)
    assert data["name"] == sweet["name"]

    r = client.put(f"/api/sweets/{sweet['id']}", json={"quantity": 4}, headers=admin_headers)
    assert r.json()["data"]["inStock"] is True


def test_update_errors(client, admin_headers, user_headers, make_sweet):
    sweet = make_sweet()
    assert client.put("/api/sweets/missing", json={"quantity": 1}, headers=admin_headers).status_code == 404
    assert client.put(f"/api/sweets/{sweet['id']}", json={"price": 0}, headers=admin_headers).status_code == 400
    assert client.put(f"/api/sweets/{sweet['id']}", json={"quantity": -1}, headers=admin_headers).status_code == 400
    assert client.put(f"/api/sweets/{sweet['id']}", json={"quantity": 1}, headers=user_headers).status_code == 403


def test_delete(client, admin_headers, user_headers, make_sweet):
    sweet = make_sweet()
    assert client.delete(f"/api/sweets/{sweet['id']}", headers=user_headers).status_code == 403
    r = client.delete(f"/api/sweets/{sweet['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Sweet deleted successfully"
    assert client.get(f"/api/sweets/{sweet['id']}").status_code == 404
    assert client.delete(f"/api/sweets/{sweet['id']}", headers=admin_headers).status_code == 404


# ---------------------------
# Purchase
# ---------------------------
def test_purchase_defaults_to_one_without_auth(client, make_sweet):
    sweet = make_sweet(quantity=10)
    r = client.post(f"/api/sweets/{sweet['id']}/purchase")
    assert r.status_code == 200
    assert r.json()["data"]["quantity"] == 9
    r = client.post(f"/api/sweets/{sweet['id']}/purchase", json={})
    assert r.json()["data"]["quantity"] == 8


def test_purchase_specified_amount(client, make_sweet):
    sweet = make_sweet(quantity=10)
    r = client.post(f"/api/sweets/{sweet['id']}/purchase", json={"quantity": 3})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Purchase successful"
    assert (body["data"]["quantity"], body["data"]["inStock"]) == (7, True)


def test_purchase_last_unit_marks_out_of_stock(client, make_sweet):
    sweet = make_sweet(quantity=1)
    r = client.post(f"/api/sweets/{sweet['id']}/purchase", json={"quantity": 1})
    assert (r.json()["data"]["quantity"], r.json()["data"]["inStock"]) == (0, False)
    again = client.post(f"/api/sweets/{sweet['id']}/purchase")
    assert again.status_code == 400
    assert again.json()["available"] == 0


def test_purchase_more_than_available(client, make_sweet):
    sweet = make_sweet(quantity=5)
    r = client.post(f"/api/sweets/{sweet['id']}/purchase", json={"quantity": 10})
    assert r.status_code == 400
    assert r.json() == {
        "success": False,
        "message": "Insufficient quantity. Only 5 available.",
        "available": 5,
    }
    assert client.get(f"/api/sweets/{sweet['id']}").json()["data"]["quantity"] == 5


def test_purchase_unknown_sweet(client):
    r = client.post("/api/sweets/ffffffffffffffffffffffff/purchase", json={"quantity": 1})
    assert r.status_code == 404
    assert r.json()["message"] == "Sweet not found"


def test_purchase_invalid_quantity(client, make_sweet):
    sweet = make_sweet(quantity=10)
    for q in (0, -1, 1.5, "many", True, "3", 2.0):
        r = client.post(f"/api/sweets/{sweet['id']}/purchase", json={"quantity": q})
        assert r.status_code == 400, q
        assert r.json()["success"] is False
    assert client.get(f"/api/sweets/{sweet['id']}").json()["data"]["quantity"] == 10


def test_purchase_null_quantity_means_one(client, make_sweet):
    sweet = make_sweet(quantity=10)
    r = client.post(f"/api/sweets/{sweet['id']}/purchase", json={"quantity": None})
    assert r.status_code == 200
    assert r.json()["data"]["quantity"] == 9


class UnreachableInventory(InMemoryInventoryStore):
    def conditional_decrement(self, item_id, amount):
        raise StoreUnavailable()


def test_purchase_store_down_is_503():
    client = TestClient(create_app(UnreachableInventory(), InMemoryUserStore()))
    r = client.post("/api/sweets/anything/purchase", json={"quantity": 1})
    assert r.status_code == 503
    assert r.json() == {"success": False, "message": "Inventory store unavailable"}


def test_create_app_needs_both_stores_or_neither():
    with pytest.raises(ValueError):
        create_app(InMemoryInventoryStore(), None)
    with pytest.raises(ValueError):
        create_app(None, InMemoryUserStore())


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
