import asyncio
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_dummy")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import httpx
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from marketplace.db import mongo
from marketplace.main import app
from marketplace.services import payment_service, upload_service
from marketplace.services.upload_service import CloudinaryService

API = "/api/v1"


@pytest.fixture(autouse=True)
def db(monkeypatch):
    """Fresh in-memory database per test."""
    client = AsyncMongoMockClient()
    database = client["marketplace_test"]
    monkeypatch.setattr(mongo, "_client", client)
    monkeypatch.setattr(mongo, "_database", database)
    monkeypatch.setattr(upload_service, "_upload_service", None)
    monkeypatch.setattr(payment_service, "_payment_service", None)
    return database


@pytest.fixture
def run():
    return lambda coro: asyncio.run(coro)


@pytest.fixture
def client():
    # no context manager: the lifespan (real Mongo connect) must not run
    return TestClient(app)


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """
    Registers a user and returns (headers, body). Cookies are dropped so the
    Bearer header decides who is calling.
    """
    counter = {"n": 0}

    def _register(role="customer", email=None, password="secret123", name="Test User"):
        counter["n"] += 1
        email = email or f"{role}{counter['n']}@example.com"
        response = client.post(f"{API}/auth/register", json={
            "name": name, "email": email, "password": password, "role": role,
        })
        assert response.status_code == 201, response.text
        client.cookies.clear()
        body = response.json()
        return auth_headers(body["accessToken"]), body

    return _register


@pytest.fixture
def customer(register):
    return register("customer")


@pytest.fixture
def vendor(register):
    return register("vendor")


@pytest.fixture
def admin(register, db, run):
    headers, body = register("customer", email="admin@example.com", name="Admin")
    run(db.users.update_one({"email": "admin@example.com"}, {"$set": {"role": "admin"}}))
    return headers, body


SELLER_PAYLOAD = {
    "name": "Corner Store",
    "email": "store@example.com",
    "phone": "+919876543210",
    "password": "secret123",
    "storeName": "Corner Store",
    "address": {"street": "1 Main St", "city": "Pune", "state": "MH", "pincode": "411001"},
    "geo": {"type": "Point", "coordinates": [73.8567, 18.5204]},
}


@pytest.fixture
def seller(client):
    response = client.post(f"{API}/sellers/register", json=SELLER_PAYLOAD)
    assert response.status_code == 201, response.text
    client.cookies.clear()
    body = response.json()
    return auth_headers(body["accessToken"]), body


def product_payload(**overrides):
    payload = {
        "name": "Desk Lamp",
        "description": "A warm LED desk lamp",
        "price": 25.0,
        "category": "home",
        "status": "active",
        "inventory": {"quantity": 10},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_product(client, vendor):
    headers, _ = vendor

    def _make(**overrides):
        response = client.post(f"{API}/products", json=product_payload(**overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


SHIPPING = {"name": "Jane", "street": "1 Main St", "city": "Austin", "state": "TX", "zipCode": "78701"}


def place_order(client, headers, product, quantity=2):
    return client.post(f"{API}/orders", headers=headers, json={
        "items": [{"product": product["_id"], "quantity": quantity}],
        "shippingAddress": SHIPPING,
        "payment": {"method": "stripe"},
    })


@pytest.fixture
def cloudinary(monkeypatch):
    """Cloudinary backed by an in-process transport; records uploads and deletions."""
    calls = {"uploads": 0, "destroyed": []}

    def handler(request: httpx.Request):
        if request.url.path.endswith("/image/upload"):
            calls["uploads"] += 1
            n = calls["uploads"]
            return httpx.Response(200, json={
                "public_id": f"ecom/products/img{n}",
                "secure_url": f"https://res.cloudinary.com/demo/img{n}.jpg",
            })
        if request.url.path.endswith("/image/destroy"):
            calls["destroyed"].append(request.content.decode())
            return httpx.Response(200, json={"result": "ok"})
        return httpx.Response(404)

    service = CloudinaryService(cloud_name="demo", api_key="key", api_secret="secret",
                                transport=httpx.MockTransport(handler))
    monkeypatch.setattr(upload_service, "_upload_service", service)
    return calls


def image_files(count, field="images"):
    return [(field, (f"photo{i}.jpg", b"\xff\xd8fake", "image/jpeg")) for i in range(count)]
