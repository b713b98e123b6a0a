import pytest
from fastapi.testclient import TestClient

from sweetshop.database import InMemoryInventoryStore, InMemoryUserStore
from sweetshop.main import create_app
from sweetshop.models import Role


@pytest.fixture
def inventory_store():
    return InMemoryInventoryStore()


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def app(inventory_store, user_store):
    return create_app(inventory_store, user_store)


@pytest.fixture
def client(app):
    return TestClient(app)


def _register(client, name, email, password):
    r = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()["token"]


@pytest.fixture
def admin_token(client, user_store):
    token = _register(client, "Admin User", "admin@sweetshop.com", "admin123")
    user_store.set_role("admin@sweetshop.com", Role.ADMIN)
    return token


@pytest.fixture
def user_token(client):
    return _register(client, "Normal User", "user@sweetshop.com", "user123")


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def user_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def make_sweet(client, admin_headers):
    def _make(**overrides):
        payload = {
            "name": "Chocolate Bar",
            "category": "Chocolate",
            "price": 5,
            "quantity": 100,
            "description": "Delicious chocolate bar",
        }
        payload.update(overrides)
        r = client.post("/api/sweets", json=payload, headers=admin_headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make
