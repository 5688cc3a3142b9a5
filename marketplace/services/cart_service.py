"""
marketplace/services/cart_service.py

Purpose: Server-side shopping cart

- One cart document per user (upserted)
- Quantities clamped to available stock
- Products populated on read
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from marketplace.core.exceptions import BadRequestError, ResourceNotFoundError
from marketplace.core.logging import get_logger
from marketplace.db.mongo import get_carts_collection, get_products_collection
from marketplace.models.cart import clamp_quantity, empty_cart, find_item, new_cart_item
from marketplace.models.product import available_quantity, with_stock_flags
from marketplace.utils.constants import PRODUCT_NOT_FOUND_MESSAGE
from marketplace.utils.serialization import is_valid_object_id, to_object_id
from marketplace.utils.time_utils import utcnow

logger = get_logger(__name__)


async def _populate(cart: Dict[str, Any]) -> Dict[str, Any]:
    """Replaces product ids with product documents; lines for deleted products are dropped."""
    ids = [item["product"] for item in cart.get("items", [])]
    products = {}
    if ids:
        async for product in get_products_collection().find({"_id": {"$in": ids}}):
            products[product["_id"]] = with_stock_flags(product)

    populated = dict(cart)
    populated["items"] = [
        dict(item, product=products[item["product"]])
        for item in cart.get("items", []) if item["product"] in products
    ]
    return populated


async def _find_product(product_id) -> Optional[Dict[str, Any]]:
    if not is_valid_object_id(product_id):
        return None
    return await get_products_collection().find_one({"_id": ObjectId(str(product_id))})


async def _save_items(user_id: ObjectId, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    now = utcnow()
    cart = await get_carts_collection().find_one_and_update(
        {"user": user_id},
        {"$set": {"items": items, "updated_at": now}, "$setOnInsert": {"user": user_id, "created_at": now}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return await _populate(cart)


async def get_cart(user: Dict[str, Any]) -> Dict[str, Any]:
    cart = await get_carts_collection().find_one({"user": user["_id"]})
    if not cart:
        return empty_cart(user["_id"])
    return await _populate(cart)


async def replace_cart(user: Dict[str, Any], items: Any) -> Dict[str, Any]:
    """
    Replaces the whole cart, used to merge a client-side cart after login.
    Unknown and out-of-stock products are skipped.
    """
    if not isinstance(items, list):
        raise BadRequestError("Items must be an array")

    normalized = []
    for entry in items:
        if not isinstance(entry, dict) or not entry.get("product"):
            continue
        product = await _find_product(entry["product"])
        if not product:
            continue
        if available_quantity(product) == 0:
            continue
        normalized.append(new_cart_item(product["_id"], clamp_quantity(entry.get("quantity"), product)))

    return await _save_items(user["_id"], normalized)


async def add_item(user: Dict[str, Any], product_id: Optional[str], quantity: Any = 1) -> Dict[str, Any]:
    if not product_id:
        raise BadRequestError("productId is required")
    product = await _find_product(product_id)
    if not product:
        raise ResourceNotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    if available_quantity(product) == 0:
        raise BadRequestError("Out of stock")

    quantity = clamp_quantity(quantity, product)
    cart = await get_carts_collection().find_one({"user": user["_id"]})
    items = list((cart or {}).get("items", []))

    existing = find_item({"items": items}, product["_id"])
    if existing:
        existing["quantity"] = clamp_quantity(existing["quantity"] + quantity, product)
    else:
        items.append(new_cart_item(product["_id"], quantity))

    logger.debug(f"Cart item added: {product_id}", extra={"user_id": str(user["_id"])})
    return await _save_items(user["_id"], items)


async def update_item(user: Dict[str, Any], product_id: Optional[str], quantity: Any) -> Dict[str, Any]:
    """
    Sets a line's quantity; zero or less removes the line.
    """
    if not product_id or isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise BadRequestError("productId and numeric quantity are required")

    cart = await get_carts_collection().find_one({"user": user["_id"]})
    if not cart:
        raise ResourceNotFoundError("Cart not found")

    oid = to_object_id(product_id, "productId")
    items = list(cart.get("items", []))
    item = find_item({"items": items}, oid)
    if not item:
        raise ResourceNotFoundError("Item not found in cart")

    if quantity <= 0:
        items = [i for i in items if i["product"] != oid]
    else:
        product = await _find_product(oid)
        if not product:
            raise ResourceNotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
        if available_quantity(product) == 0:
            raise BadRequestError("Out of stock")
        item["quantity"] = clamp_quantity(quantity, product)

    return await _save_items(user["_id"], items)


async def clear_cart(user: Dict[str, Any]) -> Dict[str, Any]:
    return await _save_items(user["_id"], [])
