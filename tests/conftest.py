"""Pytest configuration: in-memory MongoDB and an API client."""

import os

os.environ["PAYMENT_DELAY_SECONDS"] = "0"
os.environ.pop("DATABASE_URL", None)
os.environ.pop("DATABASE_NAME", None)

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import app

PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def mongo(monkeypatch):
    """Swap the configured database for a fresh mongomock one."""
    db = mongomock.MongoClient()["eyecare_test"]
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seeded(client):
    response = client.post("/seed")
    assert response.status_code == 200
    return response.json()


def register(client, name, email, password=PASSWORD):
    response = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["session_id"]


def add_address(client, session_id, **overrides):
    body = {
        "name": "Asha Rao",
        "phone": "+91 98765 43210",
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "KA",
        "zip_code": "560001",
        "country": "India",
    }
    body.update(overrides)
    response = client.post("/me/addresses", params={"session_id": session_id}, json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def alice(client):
    """Session id of a registered, logged-in customer."""
    return register(client, "Alice Shopper", "alice@example.com")


@pytest.fixture
def bob(client):
    return register(client, "Bob Buyer", "bob@example.com")


@pytest.fixture
def admin_session(client):
    response = client.post("/admin/login", json={"username": "admin", "password": "admin"})
    assert response.status_code == 200
    return response.json()["session_id"]


def place_order(client, session_id, items=(("2", 1),), payment_method="razorpay"):
    """Fill the cart, pick a new address and pay; returns the order."""
    for product_id, qty in items:
        r = client.post("/cart/add", json={"session_id": session_id, "product_id": product_id, "quantity": qty})
        assert r.status_code == 200, r.text
    address = add_address(client, session_id)
    r = client.post("/checkout/address", json={"session_id": session_id, "address_id": address["id"]})
    assert r.status_code == 200, r.text
    r = client.post("/checkout/pay", json={"session_id": session_id, "payment_method": payment_method})
    assert r.status_code == 201, r.text
    return r.json()["order"]
