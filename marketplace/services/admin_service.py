"""
marketplace/services/admin_service.py

Purpose: Platform administration

- Dashboard counts, revenue and monthly chart data
- User management (update, suspend)
- Product / order listings and period analytics
- Site settings (static, not persisted)
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ReturnDocument

from marketplace.core.exceptions import ResourceNotFoundError
from marketplace.core.logging import get_logger
from marketplace.db.mongo import get_orders_collection, get_products_collection, get_users_collection
from marketplace.services.auth_service import ensure_email_available
from marketplace.services.order_service import populate_order
from marketplace.services.product_service import populate_owners
from marketplace.utils.constants import DEFAULT_SITE_SETTINGS
from marketplace.utils.serialization import to_object_id
from marketplace.utils.time_utils import period_start, utcnow

logger = get_logger(__name__)

USER_PROJECTION = {"password": 0, "refresh_tokens": 0, "reset_password_token": 0, "reset_password_expire": 0}
REVENUE_ORDER_STATUSES = ["completed", "delivered"]


def _count_by(docs: List[Dict[str, Any]], field: str) -> List[Dict[str, Any]]:
    counts: Dict[Any, int] = {}
    for doc in docs:
        counts[doc.get(field)] = counts.get(doc.get(field), 0) + 1
    return [{field: key, "count": count} for key, count in counts.items()]


async def get_dashboard() -> Dict[str, Any]:
    users = get_users_collection()
    products = get_products_collection()
    orders = get_orders_collection()

    total_revenue = 0.0
    monthly: Dict[Tuple[int, int], Dict[str, Any]] = {}
    year_ago = utcnow() - timedelta(days=365)
    async for order in orders.find({"status": {"$in": REVENUE_ORDER_STATUSES}}, {"pricing": 1, "created_at": 1}):
        total = (order.get("pricing") or {}).get("total", 0)
        total_revenue += total
        if order["created_at"] >= year_ago:
            key = (order["created_at"].year, order["created_at"].month)
            bucket = monthly.setdefault(key, {"year": key[0], "month": key[1], "revenue": 0.0, "orders": 0})
            bucket["revenue"] = round(bucket["revenue"] + total, 2)
            bucket["orders"] += 1

    recent = await orders.find().sort("created_at", -1).limit(10).to_list(length=10)
    top_products = await products.find(
        {"status": "active"}, {"name": 1, "images": 1, "sales": 1, "ratings": 1}
    ).sort("sales.count", -1).limit(5).to_list(length=5)

    return {
        "stats": {
            "total_users": await users.count_documents({"role": "customer"}),
            "total_vendors": await users.count_documents({"role": "vendor"}),
            "total_products": await products.count_documents({}),
            "total_orders": await orders.count_documents({}),
            "pending_orders": await orders.count_documents({"status": {"$in": ["pending", "confirmed"]}}),
            "total_revenue": round(total_revenue, 2),
        },
        "recent_orders": [await populate_order(o) for o in recent],
        "top_products": top_products,
        "monthly_revenue": [monthly[k] for k in sorted(monthly)],
    }


async def list_users(page: int = 1, limit: int = 20, role: Optional[str] = None,
                     status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {}
    if role:
        query["role"] = role
    if status:
        query["is_suspended"] = status == "suspended"
    users = get_users_collection()
    cursor = users.find(query, USER_PROJECTION).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    return await cursor.to_list(length=limit), await users.count_documents(query)


async def get_user(user_id: str) -> Dict[str, Any]:
    user = await get_users_collection().find_one({"_id": to_object_id(user_id)}, USER_PROJECTION)
    if not user:
        raise ResourceNotFoundError("User not found")
    return user


async def update_user(user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    oid = to_object_id(user_id)
    users = get_users_collection()
    changes = {k: v for k, v in changes.items() if v is not None}
    if "email" in changes:
        await ensure_email_available(users, changes["email"], oid)
    changes["updated_at"] = utcnow()
    user = await users.find_one_and_update(
        {"_id": oid}, {"$set": changes}, projection=USER_PROJECTION, return_document=ReturnDocument.AFTER
    )
    if not user:
        raise ResourceNotFoundError("User not found")
    logger.info(f"Admin updated user {user_id}")
    return user


async def set_user_suspension(user_id: str, is_suspended: bool, reason: Optional[str] = None) -> Dict[str, Any]:
    changes: Dict[str, Any] = {"is_suspended": is_suspended, "updated_at": utcnow()}
    if is_suspended:
        changes["suspension_reason"] = reason
    else:
        changes["suspension_reason"] = None
        changes["refresh_tokens"] = []
    user = await get_users_collection().find_one_and_update(
        {"_id": to_object_id(user_id)}, {"$set": changes},
        projection=USER_PROJECTION, return_document=ReturnDocument.AFTER
    )
    if not user:
        raise ResourceNotFoundError("User not found")
    logger.warning(f"User {user_id} {'suspended' if is_suspended else 'unsuspended'}")
    return user


async def list_products(page: int = 1, limit: int = 20, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {"status": status} if status else {}
    products = get_products_collection()
    cursor = products.find(query).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    items = await populate_owners(await cursor.to_list(length=limit))
    return items, await products.count_documents(query)


async def list_orders(page: int = 1, limit: int = 20, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {"status": status} if status else {}
    orders = get_orders_collection()
    cursor = orders.find(query).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    items = [await populate_order(o) for o in await cursor.to_list(length=limit)]
    return items, await orders.count_documents(query)


async def get_analytics(period: str = "30d") -> Dict[str, Any]:
    since = {"created_at": {"$gte": period_start(period)}}

    orders = await get_orders_collection().find(since, {"status": 1, "pricing": 1}).to_list(length=None)
    paid = [o for o in orders if o.get("status") in REVENUE_ORDER_STATUSES]
    users = await get_users_collection().find(since, {"role": 1}).to_list(length=None)
    products = await get_products_collection().find(since, {"status": 1}).to_list(length=None)

    return {
        "period": period,
        "revenue": {
            "total": round(sum((o.get("pricing") or {}).get("total", 0) for o in paid), 2),
            "count": len(paid),
        },
        "orders_by_status": _count_by(orders, "status"),
        "users_by_role": _count_by(users, "role"),
        "products_by_status": _count_by(products, "status"),
    }


def get_settings() -> Dict[str, Any]:
    return dict(DEFAULT_SITE_SETTINGS)


def update_settings(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Echoes the known settings keys merged over the defaults. Nothing is stored.
    """
    updated = get_settings()
    for key, value in (changes or {}).items():
        if key in updated and value is not None:
            updated[key] = value
    logger.info(f"Admin settings updated: {sorted(k for k in (changes or {}) if k in updated)}")
    return updated
