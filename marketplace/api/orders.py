"""
marketplace/api/orders.py

Purpose: Customer order endpoints
"""

from typing import Optional, Literal

from fastapi import APIRouter, Depends, Query

from marketplace.api.common import ok, paginated
from marketplace.core.dependencies import get_current_user
from marketplace.schemas.order import OrderCreateRequest, ReturnRequest
from marketplace.services import order_service

router = APIRouter()

OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "refunded"]


@router.post("", status_code=201)
async def create_order(body: OrderCreateRequest, user: dict = Depends(get_current_user)):
    order = await order_service.create_order(
        user,
        items=[item.model_dump() for item in body.items],
        shipping_address=body.shipping_address.model_dump(exclude_none=True),
        billing_address=body.billing_address.model_dump(exclude_none=True) if body.billing_address else None,
        payment=body.payment.model_dump(),
        notes=body.notes,
    )
    return ok(order)


@router.get("")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    user: dict = Depends(get_current_user),
):
    orders, total = await order_service.list_orders(user, page, limit, status)
    return paginated(orders, page, limit, total)


@router.get("/{order_id}")
async def get_order(order_id: str, user: dict = Depends(get_current_user)):
    return ok(await order_service.get_order(user, order_id))


@router.put("/{order_id}/cancel")
async def cancel_order(order_id: str, user: dict = Depends(get_current_user)):
    return ok(await order_service.cancel_order(user, order_id))


@router.post("/{order_id}/return")
async def request_return(order_id: str, body: ReturnRequest, user: dict = Depends(get_current_user)):
    request = await order_service.request_return(user, order_id, body.reason, body.description)
    return ok(request, message="Return request submitted successfully")


@router.get("/{order_id}/track")
async def track_order(order_id: str, user: dict = Depends(get_current_user)):
    return ok(await order_service.track_order(user, order_id))
