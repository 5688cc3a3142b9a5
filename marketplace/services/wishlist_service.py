"""
marketplace/services/wishlist_service.py

Purpose: Per-user wishlist stored on the user document
"""

from typing import Any, Dict, List

from bson import ObjectId

from marketplace.core.exceptions import BadRequestError, ResourceNotFoundError
from marketplace.db.mongo import get_products_collection, get_users_collection
from marketplace.services.product_service import populate_owners
from marketplace.utils.constants import PRODUCT_NOT_FOUND_MESSAGE
from marketplace.utils.serialization import is_valid_object_id


def _product_oid(product_id: str) -> ObjectId:
    if not is_valid_object_id(product_id):
        raise BadRequestError("Invalid product ID")
    return ObjectId(product_id)


async def _wishlist_ids(user: Dict[str, Any]) -> List[ObjectId]:
    fresh = await get_users_collection().find_one({"_id": user["_id"]}, {"wishlist": 1})
    if not fresh:
        raise ResourceNotFoundError("User not found")
    return list(fresh.get("wishlist") or [])


async def get_wishlist(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Wishlist products in insertion order; deleted products are skipped."""
    ids = await _wishlist_ids(user)
    if not ids:
        return []
    found = {p["_id"]: p async for p in get_products_collection().find({"_id": {"$in": ids}})}
    products = [found[oid] for oid in ids if oid in found]
    return await populate_owners(products)


async def add_to_wishlist(user: Dict[str, Any], product_id: str) -> int:
    oid = _product_oid(product_id)
    if not await get_products_collection().find_one({"_id": oid}, {"_id": 1}):
        raise ResourceNotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    ids = await _wishlist_ids(user)
    if oid in ids:
        raise BadRequestError("Product already in wishlist")
    await get_users_collection().update_one({"_id": user["_id"]}, {"$push": {"wishlist": oid}})
    return len(ids) + 1


async def remove_from_wishlist(user: Dict[str, Any], product_id: str) -> int:
    oid = _product_oid(product_id)
    ids = await _wishlist_ids(user)
    if oid not in ids:
        raise BadRequestError("Product not in wishlist")
    await get_users_collection().update_one({"_id": user["_id"]}, {"$pull": {"wishlist": oid}})
    return len(ids) - 1


async def is_in_wishlist(user: Dict[str, Any], product_id: str) -> bool:
    oid = _product_oid(product_id)
    return oid in await _wishlist_ids(user)


async def clear_wishlist(user: Dict[str, Any]):
    await get_users_collection().update_one({"_id": user["_id"]}, {"$set": {"wishlist": []}})
