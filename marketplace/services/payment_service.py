"""
marketplace/services/payment_service.py

Purpose: Stripe payments

- Payment intents (amount converted to cents)
- Payment confirmation against an order
- Webhook signature verification and order updates
"""

import asyncio
from typing import Any, Dict, Optional

import stripe

from marketplace.core.config import settings
from marketplace.core.exceptions import (
    AuthorizationError,
    BadRequestError,
    ExternalServiceError,
    ResourceNotFoundError,
)
from marketplace.core.logging import get_logger, LogContext
from marketplace.db.mongo import get_orders_collection
from marketplace.utils.constants import ORDER_NOT_FOUND_MESSAGE
from marketplace.utils.serialization import is_valid_object_id, to_object_id
from marketplace.utils.time_utils import utcnow

logger = get_logger(__name__)


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


class PaymentService:
    """
    Stripe payment service. The SDK is synchronous, so calls run in a worker thread.

    Usage:
        payments = get_payment_service()
        intent = await payments.create_payment_intent(49.99, "usd", {"userId": "..."})
    """

    def __init__(self, api_key: Optional[str] = None, webhook_secret: Optional[str] = None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        stripe.api_key = self.api_key

    async def create_payment_intent(self, amount: float, currency: str, metadata: Dict[str, str]) -> Dict[str, Any]:
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=to_cents(amount),
                currency=currency.lower(),
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating payment intent: {e}")
            raise ExternalServiceError("Payment provider error", details={"provider": "stripe"}) from e

        return {"client_secret": intent["client_secret"], "payment_intent_id": intent["id"]}

    async def retrieve_payment_intent(self, payment_intent_id: str):
        try:
            return await asyncio.to_thread(stripe.PaymentIntent.retrieve, payment_intent_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe error retrieving payment intent {payment_intent_id}: {e}")
            raise ExternalServiceError("Payment provider error", details={"provider": "stripe"}) from e

    def construct_event(self, payload: bytes, signature: Optional[str]):
        """
        Raises:
            BadRequestError: Missing or invalid Stripe-Signature
        """
        if not signature:
            raise BadRequestError("Webhook Error: missing Stripe-Signature header")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Invalid Stripe webhook: {e}")
            raise BadRequestError(f"Webhook Error: {e}")


# Global payment service instance
_payment_service: Optional[PaymentService] = None


def get_payment_service() -> PaymentService:
    global _payment_service
    if _payment_service is None:
        _payment_service = PaymentService()
    return _payment_service


async def create_intent(user: Dict[str, Any], amount: float, currency: Optional[str], order_id: Optional[str]) -> Dict[str, Any]:
    metadata = {"userId": str(user["_id"]), "orderId": order_id or ""}
    return await get_payment_service().create_payment_intent(amount, currency or settings.STRIPE_CURRENCY, metadata)


async def mark_order_paid(order_id, payment_intent_id: str):
    now = utcnow()
    await get_orders_collection().update_one(
        {"_id": order_id},
        {"$set": {
            "payment.status": "completed",
            "payment.transaction_id": payment_intent_id,
            "payment.payment_intent_id": payment_intent_id,
            "payment.paid_at": now,
            "updated_at": now,
        }}
    )


async def confirm_payment(user: Dict[str, Any], payment_intent_id: str, order_id: Optional[str]) -> Dict[str, Any]:
    """
    Requires a succeeded intent. With an order id, the caller's order is marked paid.
    """
    intent = await get_payment_service().retrieve_payment_intent(payment_intent_id)
    if intent["status"] != "succeeded":
        raise BadRequestError("Payment not completed")

    if order_id:
        order = await get_orders_collection().find_one({"_id": to_object_id(order_id, "orderId")})
        if not order:
            raise ResourceNotFoundError(ORDER_NOT_FOUND_MESSAGE)
        if order["user"] != user["_id"]:
            raise AuthorizationError("Not authorized to confirm payment for this order")
        await mark_order_paid(order["_id"], intent["id"])
        with LogContext(user_id=str(user["_id"]), order_id=order["order_number"]):
            logger.info("Payment confirmed")

    return {"payment_intent": dict(intent), "order_id": order_id}


async def handle_webhook(payload: bytes, signature: Optional[str]) -> str:
    """
    Verifies the event and applies it. Returns the event type.
    """
    event = get_payment_service().construct_event(payload, signature)
    event_type = event["type"]
    intent = event["data"]["object"]

    if event_type == "payment_intent.succeeded":
        order_id = (intent.get("metadata") or {}).get("orderId")
        if is_valid_object_id(order_id):
            await mark_order_paid(to_object_id(order_id), intent["id"])
            logger.info(f"Webhook marked order {order_id} paid")
    elif event_type == "payment_intent.payment_failed":
        order_id = (intent.get("metadata") or {}).get("orderId")
        if is_valid_object_id(order_id):
            await get_orders_collection().update_one(
                {"_id": to_object_id(order_id)},
                {"$set": {"payment.status": "failed", "updated_at": utcnow()}}
            )
            logger.warning(f"Payment failed for order {order_id}")
    else:
        logger.debug(f"Unhandled Stripe event: {event_type}")
    return event_type
