from fastapi.testclient import TestClient
from pydantic import BaseModel

from marketplace.main import app
from marketplace.core.exceptions import ResourceNotFoundError

client = TestClient(app, raise_server_exceptions=False)


class Item(BaseModel):
    name: str
    price: int


@app.post("/test-validation")
def create_item(item: Item):
    return item


@app.get("/test-custom-error")
def trigger_custom_error():
    raise ResourceNotFoundError(message="Item not found")


@app.get("/test-unhandled-error")
def trigger_unhandled_error():
    raise RuntimeError("boom")


def test_404_not_found():
    response = client.get("/non-existent-route")
    assert response.status_code == 404
    data = response.json()
    assert data["success"] is False
    assert data["code"] == "HTTP_ERROR"
    assert data["error"] == "Not found - /non-existent-route"


def test_validation_error_structure():
    response = client.post("/test-validation", json={"name": "foo", "price": "invalid"})
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Validation failed"
    assert data["code"] == "VALIDATION_ERROR"
    assert len(data["details"]) > 0


def test_custom_exception():
    response = client.get("/test-custom-error")
    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "NOT_FOUND"
    assert data["error"] == "Item not found"


def test_unhandled_exception_shows_message_outside_production():
    response = client.get("/test-unhandled-error")
    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "boom"


def test_invalid_object_id_is_a_cast_error():
    response = client.get("/api/v1/products/not-an-id")
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "CAST_ERROR"
    assert data["error"] == "Invalid _id: not-an-id"


def test_invalid_token():
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_FAILED"


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["message"] == "Server is running"
    assert data["environment"] == "test"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Process-Time" in response.headers
