"""
marketplace/models/order.py

Purpose: Order document model

- Order number generation
- Pricing (subtotal, tax, total)
- Splitting line items into per-vendor sub-orders
- Status transitions, cancellation and return rules
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId

from marketplace.core.exceptions import BadRequestError
from marketplace.utils.constants import CANCELLABLE_STATUSES
from marketplace.utils.time_utils import utcnow, timestamp_ms


def generate_order_number(existing_count: int, now: Optional[datetime] = None) -> str:
    """
    ORD-<epoch ms>-<sequence padded to 4>, e.g. ORD-1718000000000-0042
    """
    return f"ORD-{timestamp_ms(now)}-{existing_count + 1:04d}"


def calculate_pricing(items: List[Dict[str, Any]], tax_rate: float, shipping: float = 0, discount: float = 0) -> Dict[str, float]:
    subtotal = round(sum(item["total"] for item in items), 2)
    tax = round(subtotal * tax_rate, 2)
    total = round(subtotal + shipping + tax - discount, 2)
    return {
        "subtotal": subtotal,
        "shipping": shipping,
        "tax": tax,
        "discount": discount,
        "total": total,
    }


def build_line_item(product: Dict[str, Any], quantity: int, variant: Optional[str] = None) -> Dict[str, Any]:
    price = float(product["price"])
    return {
        "product": product["_id"],
        "name": product.get("name"),
        "variant": variant,
        "quantity": quantity,
        "price": price,
        "total": round(price * quantity, 2),
    }


def split_vendor_orders(items: List[Dict[str, Any]], products: Dict[ObjectId, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Groups line items by the owning vendor (or seller) of each product.
    Products without an owner are left out.
    """
    grouped: Dict[ObjectId, Dict[str, Any]] = {}
    for item in items:
        product = products.get(item["product"]) or {}
        owner = product.get("vendor") or product.get("seller")
        if owner is None:
            continue
        entry = grouped.setdefault(owner, {
            "vendor": owner,
            "items": [],
            "status": "pending",
            "tracking": {},
        })
        entry["items"].append(dict(item))
    for entry in grouped.values():
        entry["total"] = round(sum(i["total"] for i in entry["items"]), 2)
    return list(grouped.values())


def new_order_document(user_id: ObjectId, order_number: str, items: List[Dict[str, Any]],
                       vendor_orders: List[Dict[str, Any]], shipping_address: Dict[str, Any],
                       billing_address: Optional[Dict[str, Any]], payment_method: str,
                       pricing: Dict[str, float], currency: str, return_window: int,
                       notes: Optional[str] = None) -> Dict[str, Any]:
    now = utcnow()
    return {
        "order_number": order_number,
        "user": user_id,
        "items": items,
        "shipping_address": shipping_address,
        "billing_address": billing_address or shipping_address,
        "payment": {
            "method": payment_method,
            "status": "pending",
            "transaction_id": None,
            "payment_intent_id": None,
            "amount": pricing["total"],
            "currency": currency.upper(),
            "paid_at": None,
            "refunded_at": None,
            "refund_amount": 0,
        },
        "pricing": pricing,
        "status": "pending",
        "status_history": [],
        "tracking": {},
        "notes": notes,
        "vendor_orders": vendor_orders,
        "return_info": {
            "is_returnable": True,
            "return_window": return_window,
            "return_requests": [],
        },
        "created_at": now,
        "updated_at": now,
    }


def status_update(order: Dict[str, Any], new_status: str, notes: str = "", now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Builds the `$set` payload for a status change.
    The previous status is pushed onto the history; shipping, delivery and
    cancellation stamp their timestamps.
    """
    now = now or utcnow()
    history = list(order.get("status_history") or [])
    history.append({"status": order.get("status"), "changed_at": now, "notes": notes})

    changes: Dict[str, Any] = {
        "status": new_status,
        "status_history": history,
        "updated_at": now,
    }
    tracking = order.get("tracking") or {}
    if new_status == "shipped" and not tracking.get("shipped_at"):
        changes["tracking.shipped_at"] = now
    if new_status == "delivered" and not tracking.get("delivered_at"):
        changes["tracking.delivered_at"] = now
    if new_status == "cancelled":
        changes["payment.status"] = "refunded"
        changes["payment.refunded_at"] = now
    return changes


def ensure_cancellable(order: Dict[str, Any]):
    if order.get("status") not in CANCELLABLE_STATUSES:
        raise BadRequestError("Order cannot be cancelled at this stage")


def ensure_returnable(order: Dict[str, Any], now: Optional[datetime] = None):
    """
    Raises:
        BadRequestError: If the order is not delivered, not returnable, or past its window
    """
    if order.get("status") != "delivered":
        raise BadRequestError("Order must be delivered to request a return")
    return_info = order.get("return_info") or {}
    if not return_info.get("is_returnable", True):
        raise BadRequestError("This order is not returnable")
    delivered_at = (order.get("tracking") or {}).get("delivered_at")
    if delivered_at:
        # whole days since delivery, so day 30 is still inside a 30 day window
        days_since = ((now or utcnow()) - delivered_at).days
        if days_since > return_info.get("return_window", 30):
            raise BadRequestError("Return window has expired")


def tracking_view(order: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "order_number": order["order_number"],
        "status": order["status"],
        "tracking": order.get("tracking") or {},
        "items": order.get("items") or [],
        "shipping_address": order.get("shipping_address"),
        "status_history": order.get("status_history") or [],
    }
