"""
marketplace/services/seller_service.py

Purpose: Seller accounts

- Registration / login with the shared token lifecycle
- Profile updates and dashboard stats
- Nearby seller lookup
- Admin listing, approval / suspension and deletion
"""

from datetime import datetime, time as dt_time
from typing import Any, Dict, List, Optional, Tuple

from marketplace.core.exceptions import BadRequestError, ResourceNotFoundError
from marketplace.core.logging import get_logger, LogContext
from marketplace.core.security import hash_password
from marketplace.db.mongo import get_sellers_collection, get_products_collection, get_orders_collection
from marketplace.models.seller import geo_point, new_seller_document, seller_status_filter
from marketplace.services.auth_service import (
    authenticate,
    ensure_email_available,
    issue_tokens,
    revoke_refresh_token,
)
from marketplace.utils.serialization import to_object_id
from marketplace.utils.time_utils import utcnow
from marketplace.utils.validation_utils import regex_search

logger = get_logger(__name__)

SELLER_PROJECTION = {"password": 0, "refresh_tokens": 0}
COUNTED_ORDER_STATUSES = ["pending", "confirmed", "processing", "shipped", "delivered"]


async def register_seller(data: Dict[str, Any]) -> Tuple[Dict[str, Any], str, str]:
    sellers = get_sellers_collection()
    if await sellers.find_one({"email": data["email"].lower()}):
        raise BadRequestError("Seller already exists with this email")

    seller = new_seller_document(data, hash_password(data["password"]))
    result = await sellers.insert_one(seller)
    seller["_id"] = result.inserted_id

    with LogContext(seller_id=str(seller["_id"]), role="seller"):
        logger.info(f"Seller registered: {seller['store_name']}")

    access_token, refresh_token = await issue_tokens(sellers, seller)
    return seller, access_token, refresh_token


async def login_seller(email: str, password: str) -> Tuple[Dict[str, Any], str, str]:
    sellers = get_sellers_collection()
    seller = await authenticate(sellers, email, password)
    access_token, refresh_token = await issue_tokens(sellers, seller)
    return seller, access_token, refresh_token


async def logout_seller(seller: Dict[str, Any], refresh_token: Optional[str]):
    await revoke_refresh_token(get_sellers_collection(), seller["_id"], refresh_token)


async def get_seller(seller_id) -> Dict[str, Any]:
    oid = to_object_id(seller_id)
    seller = await get_sellers_collection().find_one({"_id": oid}, SELLER_PROJECTION)
    if not seller:
        raise ResourceNotFoundError("Seller not found")
    return seller


async def update_seller_profile(seller: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    sellers = get_sellers_collection()
    changes = {k: v for k, v in changes.items() if v is not None}
    if "email" in changes:
        await ensure_email_available(sellers, changes["email"], seller["_id"])
    if "geo" in changes:
        changes["geo"] = geo_point(changes["geo"]["coordinates"])
    changes["updated_at"] = utcnow()
    await sellers.update_one({"_id": seller["_id"]}, {"$set": changes})
    return await get_seller(seller["_id"])


async def get_dashboard_stats(seller: Dict[str, Any]) -> Dict[str, Any]:
    seller_id = seller["_id"]
    products = get_products_collection()
    orders = get_orders_collection()

    product_count = await products.count_documents({"seller": seller_id})
    active_count = await products.count_documents({"seller": seller_id, "status": "active"})

    today_start = datetime.combine(utcnow().date(), dt_time.min)
    total_orders = today_orders = 0
    total_revenue = today_revenue = 0.0

    query = {"vendor_orders.vendor": seller_id, "status": {"$in": COUNTED_ORDER_STATUSES}}
    async for order in orders.find(query):
        revenue = sum(
            item["total"]
            for sub in order.get("vendor_orders", []) if sub["vendor"] == seller_id
            for item in sub.get("items", [])
        )
        total_orders += 1
        total_revenue += revenue
        if order["created_at"] >= today_start:
            today_orders += 1
            today_revenue += revenue

    recent = await orders.find({"vendor_orders.vendor": seller_id}).sort("created_at", -1).limit(5).to_list(length=5)

    return {
        "products": {"total": product_count, "active": active_count},
        "orders": {
            "total": total_orders,
            "today": today_orders,
            "revenue": {"total": round(total_revenue, 2), "today": round(today_revenue, 2)},
        },
        "recent_orders": recent,
    }


async def find_nearby_sellers(lat: float, lng: float, radius_km: float, limit: int = 50) -> List[Dict[str, Any]]:
    """
    Approved, active sellers within `radius_km` of the point, nearest first.
    """
    query = {
        "is_approved": True,
        "is_suspended": False,
        "geo": {
            "$near": {
                "$geometry": {"type": "Point", "coordinates": [lng, lat]},
                "$maxDistance": radius_km * 1000,
            }
        },
    }
    return await get_sellers_collection().find(query, SELLER_PROJECTION).limit(limit).to_list(length=limit)


async def list_sellers(page: int, limit: int, status: Optional[str], search: Optional[str]) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = seller_status_filter(status) if status else {}
    if search:
        term = regex_search(search)
        query["$or"] = [
            {"name": term},
            {"email": term},
            {"store_name": term},
            {"address.city": term},
        ]
    sellers = get_sellers_collection()
    cursor = sellers.find(query, SELLER_PROJECTION).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    items = await cursor.to_list(length=limit)
    total = await sellers.count_documents(query)
    return items, total


async def update_seller_status(seller_id: str, is_approved: Optional[bool], is_suspended: Optional[bool]) -> Dict[str, Any]:
    oid = to_object_id(seller_id)
    changes = {k: v for k, v in {"is_approved": is_approved, "is_suspended": is_suspended}.items() if v is not None}
    changes["updated_at"] = utcnow()
    result = await get_sellers_collection().update_one({"_id": oid}, {"$set": changes})
    if result.matched_count == 0:
        raise ResourceNotFoundError("Seller not found")
    logger.info(f"Seller {seller_id} status updated: {changes}")
    return await get_seller(oid)


async def delete_seller(seller_id: str):
    oid = to_object_id(seller_id)
    sellers = get_sellers_collection()
    if not await sellers.find_one({"_id": oid}):
        raise ResourceNotFoundError("Seller not found")
    if await get_products_collection().count_documents({"seller": oid}) > 0:
        raise BadRequestError(
            "Cannot delete seller with existing products. Please transfer or delete products first."
        )
    await sellers.delete_one({"_id": oid})
    logger.info(f"Seller {seller_id} deleted")
