import pytest
import stripe
from bson import ObjectId

from conftest import API, place_order


@pytest.fixture
def stripe_calls(monkeypatch):
    calls = {}

    def fake_create(**kwargs):
        calls["create"] = kwargs
        return {"id": "pi_123", "client_secret": "pi_123_secret"}

    def fake_retrieve(intent_id):
        calls["retrieve"] = intent_id
        return {"id": intent_id, "status": calls.get("status", "succeeded"), "amount": 2200}

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    monkeypatch.setattr(stripe.PaymentIntent, "retrieve", fake_retrieve)
    return calls


def test_create_intent_converts_to_cents(client, customer, stripe_calls):
    headers, body = customer
    response = client.post(f"{API}/payments/create-intent", headers=headers, json={"amount": 19.99})
    assert response.status_code == 200
    assert response.json()["data"] == {"clientSecret": "pi_123_secret", "paymentIntentId": "pi_123"}
    assert stripe_calls["create"]["amount"] == 1999
    assert stripe_calls["create"]["currency"] == "usd"
    assert stripe_calls["create"]["metadata"]["userId"] == body["user"]["_id"]


def test_create_intent_rejects_non_positive_amount(client, customer, stripe_calls):
    headers, _ = customer
    response = client.post(f"{API}/payments/create-intent", headers=headers, json={"amount": 0})
    assert response.status_code == 400


def test_confirm_marks_order_paid(client, customer, make_product, stripe_calls, db, run):
    headers, _ = customer
    order = place_order(client, headers, make_product(), quantity=1).json()["data"]

    response = client.post(f"{API}/payments/confirm", headers=headers, json={
        "paymentIntentId": "pi_123", "orderId": order["_id"],
    })
    assert response.status_code == 200
    assert response.json()["data"]["orderId"] == order["_id"]

    stored = run(db.orders.find_one({"_id": ObjectId(order["_id"])}))
    assert stored["payment"]["status"] == "completed"
    assert stored["payment"]["payment_intent_id"] == "pi_123"
    assert stored["payment"]["paid_at"] is not None


def test_confirm_requires_succeeded_intent(client, customer, stripe_calls):
    headers, _ = customer
    stripe_calls["status"] = "requires_payment_method"
    response = client.post(f"{API}/payments/confirm", headers=headers, json={"paymentIntentId": "pi_123"})
    assert response.status_code == 400
    assert response.json()["error"] == "Payment not completed"


def test_confirm_other_users_order(client, customer, register, make_product, stripe_calls):
    headers, _ = customer
    order = place_order(client, headers, make_product(), quantity=1).json()["data"]
    stranger, _ = register("customer")
    response = client.post(f"{API}/payments/confirm", headers=stranger, json={
        "paymentIntentId": "pi_123", "orderId": order["_id"],
    })
    assert response.status_code == 403


def test_webhook_requires_signature(client):
    response = client.post(f"{API}/payments/webhook", content=b"{}")
    assert response.status_code == 400
    assert response.json()["error"] == "Webhook Error: missing Stripe-Signature header"


def test_webhook_bad_signature(client, monkeypatch):
    def reject(payload, signature, secret):
        raise ValueError("Invalid payload")

    monkeypatch.setattr(stripe.Webhook, "construct_event", reject)
    response = client.post(f"{API}/payments/webhook", content=b"{}", headers={"Stripe-Signature": "t=1,v1=x"})
    assert response.status_code == 400
    assert response.json()["error"] == "Webhook Error: Invalid payload"


@pytest.mark.parametrize("event_type,expected", [
    ("payment_intent.succeeded", "completed"),
    ("payment_intent.payment_failed", "failed"),
])
def test_webhook_updates_order(client, customer, make_product, monkeypatch, db, run, event_type, expected):
    headers, _ = customer
    order = place_order(client, headers, make_product(), quantity=1).json()["data"]

    def accept(payload, signature, secret):
        return {
            "type": event_type,
            "data": {"object": {"id": "pi_789", "metadata": {"orderId": order["_id"]}}},
        }

    monkeypatch.setattr(stripe.Webhook, "construct_event", accept)
    response = client.post(f"{API}/payments/webhook", content=b"{}", headers={"Stripe-Signature": "t=1,v1=x"})
    assert response.status_code == 200
    assert response.json() == {"received": True, "type": event_type}

    stored = run(db.orders.find_one({"_id": ObjectId(order["_id"])}))
    assert stored["payment"]["status"] == expected


def test_payment_method_placeholders(client, customer):
    headers, _ = customer
    assert client.get(f"{API}/payments/methods", headers=headers).json()["data"] == []
    response = client.post(f"{API}/payments/methods", headers=headers, json={"paymentMethodId": "pm_1"})
    assert response.status_code == 201
    assert response.json()["data"] == {"id": "pm_1", "isDefault": False}
