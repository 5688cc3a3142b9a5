"""
marketplace/services/vendor_service.py

Purpose: Vendor workspace

- Dashboard stats and monthly revenue
- The vendor's own product listing (CRUD goes through product_service)
- Orders containing the vendor's items and sub-order status updates
- Period analytics
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from marketplace.core.exceptions import AuthorizationError, ResourceNotFoundError
from marketplace.core.logging import get_logger, LogContext
from marketplace.db.mongo import get_orders_collection, get_products_collection
from marketplace.models.product import with_stock_flags
from marketplace.services.order_service import populate_order
from marketplace.utils.constants import ORDER_NOT_FOUND_MESSAGE
from marketplace.utils.serialization import to_object_id
from marketplace.utils.time_utils import period_start, utcnow

logger = get_logger(__name__)

REVENUE_ORDER_STATUSES = ("completed", "delivered")
OPEN_SUB_ORDER_STATUSES = ("pending", "confirmed")


def vendor_sub_order(order: Dict[str, Any], vendor_id) -> Tuple[int, Optional[Dict[str, Any]]]:
    for index, sub in enumerate(order.get("vendor_orders") or []):
        if sub.get("vendor") == vendor_id:
            return index, sub
    return -1, None


async def get_dashboard(vendor: Dict[str, Any]) -> Dict[str, Any]:
    vendor_id = vendor["_id"]
    products = get_products_collection()
    orders = get_orders_collection()

    total_products = await products.count_documents({"vendor": vendor_id})
    active_products = await products.count_documents({"vendor": vendor_id, "status": "active"})

    total_orders = pending_orders = 0
    total_revenue = 0.0
    monthly: Dict[Tuple[int, int], Dict[str, Any]] = {}
    year_ago = utcnow() - timedelta(days=365)

    async for order in orders.find({"vendor_orders.vendor": vendor_id}):
        _, sub = vendor_sub_order(order, vendor_id)
        total_orders += 1
        if sub.get("status") in OPEN_SUB_ORDER_STATUSES:
            pending_orders += 1
        if order.get("status") not in REVENUE_ORDER_STATUSES:
            continue
        total_revenue += sub.get("total", 0)
        if order["created_at"] >= year_ago:
            key = (order["created_at"].year, order["created_at"].month)
            bucket = monthly.setdefault(key, {"year": key[0], "month": key[1], "revenue": 0.0, "orders": 0})
            bucket["revenue"] = round(bucket["revenue"] + sub.get("total", 0), 2)
            bucket["orders"] += 1

    recent = await orders.find({"vendor_orders.vendor": vendor_id}).sort("created_at", -1).limit(10).to_list(length=10)
    top_products = await products.find(
        {"vendor": vendor_id, "status": "active"},
        {"name": 1, "images": 1, "sales": 1, "ratings": 1}
    ).sort("sales.count", -1).limit(5).to_list(length=5)

    return {
        "stats": {
            "total_products": total_products,
            "active_products": active_products,
            "total_orders": total_orders,
            "pending_orders": pending_orders,
            "total_revenue": round(total_revenue, 2),
        },
        "recent_orders": [await populate_order(o) for o in recent],
        "top_products": top_products,
        "monthly_revenue": [monthly[k] for k in sorted(monthly)],
    }


async def list_vendor_products(vendor: Dict[str, Any], page: int = 1, limit: int = 20,
                               status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {"vendor": vendor["_id"]}
    if status:
        query["status"] = status
    products = get_products_collection()
    cursor = products.find(query).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    items = [with_stock_flags(p) for p in await cursor.to_list(length=limit)]
    return items, await products.count_documents(query)


async def list_vendor_orders(vendor: Dict[str, Any], page: int = 1, limit: int = 20,
                             status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    if status:
        query: Dict[str, Any] = {"vendor_orders": {"$elemMatch": {"vendor": vendor["_id"], "status": status}}}
    else:
        query = {"vendor_orders.vendor": vendor["_id"]}
    orders = get_orders_collection()
    cursor = orders.find(query).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    items = [await populate_order(o) for o in await cursor.to_list(length=limit)]
    return items, await orders.count_documents(query)


async def _vendor_order(vendor: Dict[str, Any], order_id: str, action: str):
    order = await get_orders_collection().find_one({"_id": to_object_id(order_id)})
    if not order:
        raise ResourceNotFoundError(ORDER_NOT_FOUND_MESSAGE)
    index, sub = vendor_sub_order(order, vendor["_id"])
    if sub is None:
        raise AuthorizationError(f"Not authorized to {action} this order")
    return order, index, sub


async def get_vendor_order(vendor: Dict[str, Any], order_id: str) -> Dict[str, Any]:
    order, _, sub = await _vendor_order(vendor, order_id, "view")
    order = await populate_order(order)
    order["vendor_order"] = sub
    return order


async def update_vendor_order_status(vendor: Dict[str, Any], order_id: str, status: str,
                                     tracking_number: Optional[str] = None, carrier: Optional[str] = None,
                                     notes: Optional[str] = None) -> Dict[str, Any]:
    """
    Updates only the calling vendor's sub-order; shipping and delivery stamp their times.
    """
    order, index, sub = await _vendor_order(vendor, order_id, "update")
    now = utcnow()
    prefix = f"vendor_orders.{index}"

    changes: Dict[str, Any] = {f"{prefix}.status": status, "updated_at": now}
    if tracking_number:
        changes[f"{prefix}.tracking.tracking_number"] = tracking_number
    if carrier:
        changes[f"{prefix}.tracking.carrier"] = carrier
    if notes:
        changes[f"{prefix}.notes"] = notes
    if status == "shipped":
        changes[f"{prefix}.tracking.shipped_at"] = now
    if status == "delivered":
        changes[f"{prefix}.tracking.delivered_at"] = now

    await get_orders_collection().update_one({"_id": order["_id"]}, {"$set": changes})
    with LogContext(user_id=str(vendor["_id"]), order_id=order["order_number"]):
        logger.info(f"Vendor sub-order status set to {status}")

    updated = await get_orders_collection().find_one({"_id": order["_id"]})
    return updated["vendor_orders"][index]


async def get_vendor_analytics(vendor: Dict[str, Any], period: str = "30d") -> Dict[str, Any]:
    vendor_id = vendor["_id"]
    start = period_start(period)

    revenue = {"total": 0.0, "count": 0}
    orders_by_status: Dict[str, int] = {}
    async for order in get_orders_collection().find({"vendor_orders.vendor": vendor_id, "created_at": {"$gte": start}}):
        _, sub = vendor_sub_order(order, vendor_id)
        orders_by_status[sub.get("status", "pending")] = orders_by_status.get(sub.get("status", "pending"), 0) + 1
        if order.get("status") in REVENUE_ORDER_STATUSES:
            revenue["total"] = round(revenue["total"] + sub.get("total", 0), 2)
            revenue["count"] += 1

    products_by_status: Dict[str, int] = {}
    async for product in get_products_collection().find({"vendor": vendor_id, "created_at": {"$gte": start}}, {"status": 1}):
        products_by_status[product.get("status")] = products_by_status.get(product.get("status"), 0) + 1

    return {
        "period": period,
        "revenue": revenue,
        "orders_by_status": [{"status": k, "count": v} for k, v in orders_by_status.items()],
        "products_by_status": [{"status": k, "count": v} for k, v in products_by_status.items()],
    }
