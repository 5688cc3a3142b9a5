"""
marketplace/api/payments.py

Purpose: Stripe payment endpoints

- Payment intent creation and confirmation
- Stripe webhook
- Saved payment methods (placeholders, nothing is stored)
"""

from fastapi import APIRouter, Depends, Header, Request
from typing import Optional

from marketplace.api.common import ok
from marketplace.core.dependencies import get_current_user
from marketplace.schemas.order import PaymentConfirmRequest, PaymentIntentRequest, PaymentMethodRequest
from marketplace.services import payment_service

router = APIRouter()


@router.post("/create-intent")
async def create_intent(body: PaymentIntentRequest, user: dict = Depends(get_current_user)):
    intent = await payment_service.create_intent(user, body.amount, body.currency, body.order_id)
    return ok({"clientSecret": intent["client_secret"], "paymentIntentId": intent["payment_intent_id"]})


@router.post("/confirm")
async def confirm(body: PaymentConfirmRequest, user: dict = Depends(get_current_user)):
    result = await payment_service.confirm_payment(user, body.payment_intent_id, body.order_id)
    return ok({"paymentIntent": result["payment_intent"], "orderId": result["order_id"]})


@router.post("/webhook")
async def stripe_webhook(request: Request, stripe_signature: Optional[str] = Header(None)):
    """
    Stripe webhook. The raw body is needed for signature verification.
    """
    payload = await request.body()
    event_type = await payment_service.handle_webhook(payload, stripe_signature)
    return {"received": True, "type": event_type}


@router.get("/methods")
async def get_payment_methods(user: dict = Depends(get_current_user)):
    return ok([])


@router.post("/methods", status_code=201)
async def add_payment_method(body: PaymentMethodRequest, user: dict = Depends(get_current_user)):
    return ok({"id": body.payment_method_id, "isDefault": body.is_default})


@router.delete("/methods/{method_id}")
async def remove_payment_method(method_id: str, user: dict = Depends(get_current_user)):
    return ok(message="Payment method removed successfully")


@router.put("/methods/{method_id}/default")
async def set_default_payment_method(method_id: str, user: dict = Depends(get_current_user)):
    return ok(message="Default payment method set successfully")
