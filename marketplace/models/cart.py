"""
marketplace/models/cart.py

Purpose: Cart document model

- One cart per user
- Quantities clamped to tracked stock
"""

from typing import Any, Dict, Optional

from bson import ObjectId

from marketplace.models.product import available_quantity
from marketplace.utils.time_utils import utcnow


def clamp_quantity(requested: Any, product: Dict[str, Any]) -> int:
    """
    At least 1, and no more than the available stock when inventory is tracked.
    """
    try:
        quantity = int(requested)
    except (TypeError, ValueError):
        quantity = 1
    quantity = max(1, quantity)
    available = available_quantity(product)
    if available is not None:
        quantity = min(quantity, available)
    return quantity


def new_cart_item(product_id: ObjectId, quantity: int) -> Dict[str, Any]:
    return {"product": product_id, "quantity": quantity, "added_at": utcnow()}


def empty_cart(user_id: ObjectId) -> Dict[str, Any]:
    now = utcnow()
    return {"user": user_id, "items": [], "created_at": now, "updated_at": now}


def find_item(cart: Optional[Dict[str, Any]], product_id: ObjectId) -> Optional[Dict[str, Any]]:
    for item in (cart or {}).get("items", []):
        if item["product"] == product_id:
            return item
    return None
