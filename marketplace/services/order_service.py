"""
marketplace/services/order_service.py

Purpose: Customer orders

- Order creation with stock checks and inventory decrement
- Listing, retrieval and tracking for the owner or an admin
- Cancellation (restores inventory) and return requests
"""

from typing import Any, Dict, List, Optional, Tuple

from marketplace.core.config import settings
from marketplace.core.exceptions import AuthorizationError, BadRequestError, ResourceNotFoundError
from marketplace.core.logging import get_logger, LogContext
from marketplace.db.mongo import get_orders_collection, get_products_collection, get_users_collection
from marketplace.models.order import (
    build_line_item,
    calculate_pricing,
    ensure_cancellable,
    ensure_returnable,
    generate_order_number,
    new_order_document,
    split_vendor_orders,
    status_update,
    tracking_view,
)
from marketplace.models.product import available_quantity
from marketplace.services.product_service import adjust_inventory
from marketplace.utils.constants import ORDER_NOT_FOUND_MESSAGE, PRODUCT_STATUS_ACTIVE, ROLE_ADMIN
from marketplace.utils.serialization import to_object_id
from marketplace.utils.time_utils import utcnow

logger = get_logger(__name__)

ITEM_PRODUCT_FIELDS = {"name": 1, "images": 1, "price": 1, "vendor": 1, "seller": 1}


async def populate_order(order: Dict[str, Any]) -> Dict[str, Any]:
    """Attaches product summaries to line items and the buyer's name/email."""
    ids = [item["product"] for item in order.get("items", [])]
    products = {}
    if ids:
        async for product in get_products_collection().find({"_id": {"$in": ids}}, ITEM_PRODUCT_FIELDS):
            products[product["_id"]] = product
    order["items"] = [
        dict(item, product=products.get(item["product"], item["product"]))
        for item in order.get("items", [])
    ]
    buyer = await get_users_collection().find_one({"_id": order.get("user")}, {"name": 1, "email": 1})
    if buyer:
        order["user"] = buyer
    return order


async def create_order(user: Dict[str, Any], items: List[Dict[str, Any]], shipping_address: Dict[str, Any],
                       billing_address: Optional[Dict[str, Any]], payment: Dict[str, Any],
                       notes: Optional[str] = None) -> Dict[str, Any]:
    """
    Validates every line before anything is written.

    Raises:
        ResourceNotFoundError: Unknown product
        BadRequestError: Inactive product or insufficient stock
    """
    products_coll = get_products_collection()
    line_items = []
    products_by_id = {}
    requested: Dict[Any, int] = {}

    for entry in items:
        product_id = to_object_id(entry["product"], "product")
        product = products_by_id.get(product_id) or await products_coll.find_one({"_id": product_id})
        if not product:
            raise ResourceNotFoundError(f"Product not found: {entry['product']}")
        if product.get("status") != PRODUCT_STATUS_ACTIVE:
            raise BadRequestError(f"Product is not available: {product['name']}")

        # lines for the same product draw on one stock count
        requested[product_id] = requested.get(product_id, 0) + entry["quantity"]
        available = available_quantity(product)
        if available is not None and available < requested[product_id]:
            raise BadRequestError(f"Insufficient stock for: {product['name']}")

        products_by_id[product_id] = product
        line_items.append(build_line_item(product, entry["quantity"], entry.get("variant")))

    orders = get_orders_collection()
    order_number = generate_order_number(await orders.count_documents({}))
    pricing = calculate_pricing(line_items, settings.ORDER_TAX_RATE)
    order = new_order_document(
        user_id=user["_id"],
        order_number=order_number,
        items=line_items,
        vendor_orders=split_vendor_orders(line_items, products_by_id),
        shipping_address=shipping_address,
        billing_address=billing_address,
        payment_method=payment["method"],
        pricing=pricing,
        currency=settings.STRIPE_CURRENCY,
        return_window=settings.RETURN_WINDOW_DAYS,
        notes=notes,
    )
    result = await orders.insert_one(order)
    order["_id"] = result.inserted_id

    for item in line_items:
        await adjust_inventory(item["product"], -item["quantity"])

    with LogContext(user_id=str(user["_id"]), order_id=order_number):
        logger.info(f"Order created: total {pricing['total']}")
    return await populate_order(order)


async def list_orders(user: Dict[str, Any], page: int = 1, limit: int = 20,
                      status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {"user": user["_id"]}
    if status:
        query["status"] = status
    orders = get_orders_collection()
    cursor = orders.find(query).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    items = [await populate_order(o) for o in await cursor.to_list(length=limit)]
    total = await orders.count_documents(query)
    return items, total


async def _accessible_order(user: Dict[str, Any], order_id: str, action: str) -> Dict[str, Any]:
    order = await get_orders_collection().find_one({"_id": to_object_id(order_id)})
    if not order:
        raise ResourceNotFoundError(ORDER_NOT_FOUND_MESSAGE)
    if order["user"] != user["_id"] and user.get("role") != ROLE_ADMIN:
        raise AuthorizationError(f"Not authorized to {action} this order")
    return order


async def get_order(user: Dict[str, Any], order_id: str) -> Dict[str, Any]:
    return await populate_order(await _accessible_order(user, order_id, "view"))


async def cancel_order(user: Dict[str, Any], order_id: str) -> Dict[str, Any]:
    order = await _accessible_order(user, order_id, "cancel")
    ensure_cancellable(order)

    changes = status_update(order, "cancelled", "Order cancelled by customer")
    await get_orders_collection().update_one({"_id": order["_id"]}, {"$set": changes})
    for item in order.get("items", []):
        await adjust_inventory(item["product"], item["quantity"])

    with LogContext(user_id=str(user["_id"]), order_id=order["order_number"]):
        logger.info("Order cancelled")
    return await get_orders_collection().find_one({"_id": order["_id"]})


async def request_return(user: Dict[str, Any], order_id: str, reason: str, description: Optional[str]) -> Dict[str, Any]:
    """
    Only the buyer may ask for a return, and only inside the return window.
    """
    order = await get_orders_collection().find_one({"_id": to_object_id(order_id)})
    if not order:
        raise ResourceNotFoundError(ORDER_NOT_FOUND_MESSAGE)
    if order["user"] != user["_id"]:
        raise AuthorizationError("Not authorized to request return for this order")
    ensure_returnable(order)

    request = {
        "reason": reason,
        "description": description,
        "status": "pending",
        "requested_at": utcnow(),
    }
    await get_orders_collection().update_one(
        {"_id": order["_id"]},
        {"$push": {"return_info.return_requests": request}, "$set": {"updated_at": utcnow()}}
    )
    logger.info(f"Return requested for {order['order_number']}", extra={"order_id": order["order_number"]})
    return request


async def track_order(user: Dict[str, Any], order_id: str) -> Dict[str, Any]:
    order = await populate_order(await _accessible_order(user, order_id, "track"))
    return tracking_view(order)
