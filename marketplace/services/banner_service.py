"""
marketplace/services/banner_service.py

Purpose: Storefront banners

- Public list of banners whose display window contains now
- Admin CRUD, toggle and reorder
"""

from typing import Any, Dict, List, Optional, Tuple

from pymongo import ReturnDocument

from marketplace.core.exceptions import ResourceNotFoundError
from marketplace.core.logging import get_logger
from marketplace.db.mongo import get_banners_collection
from marketplace.models.banner import (
    ACTIVE_BANNER_SORT,
    active_banner_query,
    new_banner_document,
    validate_window,
)
from marketplace.utils.serialization import to_object_id
from marketplace.utils.time_utils import utcnow

logger = get_logger(__name__)

BANNER_NOT_FOUND_MESSAGE = "Banner not found"


async def get_active_banners() -> List[Dict[str, Any]]:
    cursor = get_banners_collection().find(active_banner_query()).sort(ACTIVE_BANNER_SORT)
    return await cursor.to_list(length=None)


async def list_banners(page: int = 1, limit: int = 10, category: Optional[str] = None,
                       is_active: Optional[bool] = None) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {}
    if category:
        query["category"] = category
    if is_active is not None:
        query["is_active"] = is_active
    banners = get_banners_collection()
    cursor = banners.find(query).sort(ACTIVE_BANNER_SORT).skip((page - 1) * limit).limit(limit)
    items = await cursor.to_list(length=limit)
    total = await banners.count_documents(query)
    return items, total


async def get_banner(banner_id: str) -> Dict[str, Any]:
    banner = await get_banners_collection().find_one({"_id": to_object_id(banner_id)})
    if not banner:
        raise ResourceNotFoundError(BANNER_NOT_FOUND_MESSAGE)
    return banner


async def create_banner(data: Dict[str, Any], admin: Dict[str, Any]) -> Dict[str, Any]:
    doc = new_banner_document(data, created_by=admin["_id"])
    result = await get_banners_collection().insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info(f"Banner created: {doc['title']}", extra={"user_id": str(admin["_id"])})
    return doc


async def update_banner(banner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    The window is re-checked against the stored dates when only one side changes.
    """
    banner = await get_banner(banner_id)
    changes = {k: v for k, v in data.items() if v is not None}
    validate_window(changes.get("start_date", banner.get("start_date")), changes.get("end_date", banner.get("end_date")))
    changes["updated_at"] = utcnow()
    return await get_banners_collection().find_one_and_update(
        {"_id": banner["_id"]}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )


async def delete_banner(banner_id: str):
    result = await get_banners_collection().delete_one({"_id": to_object_id(banner_id)})
    if result.deleted_count == 0:
        raise ResourceNotFoundError(BANNER_NOT_FOUND_MESSAGE)
    logger.info(f"Banner {banner_id} deleted")


async def toggle_banner(banner_id: str) -> Dict[str, Any]:
    banner = await get_banner(banner_id)
    return await get_banners_collection().find_one_and_update(
        {"_id": banner["_id"]},
        {"$set": {"is_active": not banner.get("is_active", True), "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )


async def reorder_banners(banner_orders: List[Dict[str, Any]]):
    banners = get_banners_collection()
    for entry in banner_orders:
        await banners.update_one(
            {"_id": to_object_id(entry["id"], "id")},
            {"$set": {"order": entry["order"], "updated_at": utcnow()}}
        )
