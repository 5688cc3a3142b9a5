"""
marketplace/services/product_service.py

Purpose: Product catalog

- Public listing with price/rating/delivery/location filters
- Batch, featured, category and text search lookups
- Vendor / admin create, update and delete with Cloudinary images
- Owner checks and stock flags
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from fastapi import UploadFile

from marketplace.core.exceptions import AuthorizationError, ResourceNotFoundError
from marketplace.core.logging import get_logger, LogContext
from marketplace.db.mongo import get_products_collection, get_sellers_collection, get_users_collection
from marketplace.models.product import (
    build_product_document,
    merge_delivery_options,
    merge_inventory,
    normalize_images,
    owner_ids,
    with_stock_flags,
)
from marketplace.services.upload_service import get_upload_service, PRODUCT_TRANSFORMATION
from marketplace.utils.constants import (
    PRODUCT_NOT_FOUND_MESSAGE,
    PRODUCT_SORTS,
    PRODUCT_STATUS_ACTIVE,
    ROLE_ADMIN,
)
from marketplace.utils.serialization import is_valid_object_id, to_object_id
from marketplace.utils.time_utils import utcnow
from marketplace.utils.validation_utils import slugify

logger = get_logger(__name__)

EARTH_RADIUS_KM = 6378.1
VENDOR_FIELDS = {"name": 1, "email": 1, "vendor_profile.business_name": 1}
SELLER_FIELDS = {"name": 1, "email": 1, "store_name": 1, "address": 1, "geo": 1, "service_radius_km": 1}

DELIVERY_ALIASES = {"instant": "instant", "nextDay": "next_day", "next_day": "next_day", "standard": "standard"}


async def populate_owners(products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Replaces vendor / seller ids with small profile documents (one query per collection).
    """
    vendor_ids = {p["vendor"] for p in products if isinstance(p.get("vendor"), ObjectId)}
    seller_ids = {p["seller"] for p in products if isinstance(p.get("seller"), ObjectId)}

    vendors = {}
    if vendor_ids:
        async for doc in get_users_collection().find({"_id": {"$in": list(vendor_ids)}}, VENDOR_FIELDS):
            vendors[doc["_id"]] = doc
    sellers = {}
    if seller_ids:
        async for doc in get_sellers_collection().find({"_id": {"$in": list(seller_ids)}}, SELLER_FIELDS):
            sellers[doc["_id"]] = doc

    for product in products:
        if product.get("vendor") in vendors:
            product["vendor"] = vendors[product["vendor"]]
        if product.get("seller") in sellers:
            product["seller"] = sellers[product["seller"]]
        with_stock_flags(product)
    return products


async def build_listing_query(category: Optional[str] = None, min_price: Optional[float] = None,
                              max_price: Optional[float] = None, min_rating: Optional[float] = None,
                              delivery: Optional[str] = None, lat: Optional[float] = None,
                              lng: Optional[float] = None, radius_km: float = 5,
                              pincode: Optional[str] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"status": PRODUCT_STATUS_ACTIVE}

    if category:
        query["category"] = category

    if min_price is not None or max_price is not None:
        query["price"] = {}
        if min_price is not None:
            query["price"]["$gte"] = min_price
        if max_price is not None:
            query["price"]["$lte"] = max_price

    if min_rating is not None:
        query["ratings.average"] = {"$gte": min_rating}

    if delivery in DELIVERY_ALIASES:
        query[f"delivery_options.{DELIVERY_ALIASES[delivery]}"] = True

    if lat is not None and lng is not None:
        query["location"] = {
            "$geoWithin": {"$centerSphere": [[lng, lat], radius_km / EARTH_RADIUS_KM]}
        }
    elif pincode:
        seller_ids = await get_sellers_collection().distinct(
            "_id", {"address.pincode": pincode, "is_approved": True, "is_suspended": False}
        )
        query["seller"] = {"$in": seller_ids}

    return query


async def list_products(page: int = 1, limit: int = 20, sort_by: str = "newest", lat: Optional[float] = None,
                        lng: Optional[float] = None, radius_km: float = 5, **filters) -> Tuple[List[Dict[str, Any]], int]:
    products = get_products_collection()
    query = await build_listing_query(lat=lat, lng=lng, radius_km=radius_km, **filters)
    skip = (page - 1) * limit
    total = await products.count_documents(query)

    if sort_by == "distance" and lat is not None and lng is not None:
        match = {k: v for k, v in query.items() if k != "location"}
        pipeline = [
            {
                "$geoNear": {
                    "near": {"type": "Point", "coordinates": [lng, lat]},
                    "distanceField": "distance",
                    "maxDistance": radius_km * 1000,
                    "spherical": True,
                    "query": match,
                }
            },
            {"$sort": {"distance": 1}},
            {"$skip": skip},
            {"$limit": limit},
        ]
        items = await products.aggregate(pipeline).to_list(length=limit)
    else:
        sort = PRODUCT_SORTS.get(sort_by, PRODUCT_SORTS["newest"])
        items = await products.find(query).sort(sort).skip(skip).limit(limit).to_list(length=limit)

    return await populate_owners(items), total


async def get_products_by_ids(ids: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Active products for the given ids; malformed ids are ignored.
    """
    oids = [ObjectId(i) for i in ids if is_valid_object_id(i)]
    if not oids:
        return []
    items = await get_products_collection().find(
        {"_id": {"$in": oids}, "status": PRODUCT_STATUS_ACTIVE}
    ).to_list(length=len(oids))
    return await populate_owners(items)


async def get_featured_products(limit: int = 8) -> List[Dict[str, Any]]:
    items = await get_products_collection().find(
        {"status": PRODUCT_STATUS_ACTIVE, "featured": True}
    ).sort([("ratings.average", -1), ("created_at", -1)]).limit(limit).to_list(length=limit)
    return await populate_owners(items)


async def get_categories() -> List[str]:
    categories = await get_products_collection().distinct("category", {"status": PRODUCT_STATUS_ACTIVE})
    return sorted(c for c in categories if c)


async def search_products(q: str, page: int = 1, limit: int = 20, category: Optional[str] = None,
                          min_price: Optional[float] = None, max_price: Optional[float] = None) -> Tuple[List[Dict[str, Any]], int]:
    query = await build_listing_query(category=category, min_price=min_price, max_price=max_price)
    query["$text"] = {"$search": q}
    products = get_products_collection()
    cursor = products.find(query, {"score": {"$meta": "textScore"}}).sort([("score", {"$meta": "textScore"})])
    items = await cursor.skip((page - 1) * limit).limit(limit).to_list(length=limit)
    total = await products.count_documents(query)
    return await populate_owners(items), total


def is_owner(product: Dict[str, Any], user: Optional[Dict[str, Any]]) -> bool:
    return bool(user) and user["_id"] in owner_ids(product)


def can_manage(product: Dict[str, Any], user: Optional[Dict[str, Any]]) -> bool:
    return bool(user) and (user.get("role") == ROLE_ADMIN or is_owner(product, user))


async def find_product(product_id: str) -> Dict[str, Any]:
    oid = to_object_id(product_id)
    product = await get_products_collection().find_one({"_id": oid})
    if not product:
        raise ResourceNotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    return product


async def get_product(product_id: str, viewer: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Non-active products are only visible to their owner or an admin; everyone else gets a 404.
    """
    product = await find_product(product_id)
    if product.get("status") != PRODUCT_STATUS_ACTIVE and not can_manage(product, viewer):
        raise ResourceNotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    return (await populate_owners([product]))[0]


async def _manageable_product(product_id: str, user: Dict[str, Any], action: str) -> Dict[str, Any]:
    product = await find_product(product_id)
    if not can_manage(product, user):
        raise AuthorizationError(f"Not authorized to {action} this product")
    return product


async def create_product(user: Dict[str, Any], data: Dict[str, Any], files: Optional[List[UploadFile]] = None) -> Dict[str, Any]:
    if files:
        data["images"] = await get_upload_service().upload_images(files, "products", PRODUCT_TRANSFORMATION)
    doc = build_product_document(data, vendor=user["_id"])
    result = await get_products_collection().insert_one(doc)
    doc["_id"] = result.inserted_id

    with LogContext(user_id=str(user["_id"]), product_id=str(doc["_id"])):
        logger.info(f"Product created: {doc['name']}")
    return with_stock_flags(doc)


def product_changes(product: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    """
    `$set` payload for a partial product update; nested groups are merged, not replaced.
    """
    changes = {k: v for k, v in data.items() if v is not None}
    if "delivery_options" in changes:
        changes["delivery_options"] = merge_delivery_options(changes["delivery_options"], product.get("delivery_options"))
    if "inventory" in changes:
        changes["inventory"] = merge_inventory(changes["inventory"], product.get("inventory"))
    if "images" in changes:
        changes["images"] = normalize_images(changes["images"])
    if "name" in changes:
        changes["slug"] = slugify(changes["name"])
    if changes.get("sku"):
        changes["sku"] = changes["sku"].upper()
    changes["updated_at"] = utcnow()
    return changes


async def update_product(user: Dict[str, Any], product_id: str, data: Dict[str, Any],
                         files: Optional[List[UploadFile]] = None) -> Dict[str, Any]:
    """
    New uploads replace the current images; the replaced ones are destroyed in Cloudinary.
    """
    product = await _manageable_product(product_id, user, "update")
    uploader = get_upload_service()

    replaced: List[Dict[str, Any]] = []
    if files:
        data["images"] = await uploader.upload_images(files, "products", PRODUCT_TRANSFORMATION)
        replaced = product.get("images") or []

    changes = product_changes(product, data)
    await get_products_collection().update_one({"_id": product["_id"]}, {"$set": changes})
    await uploader.destroy_many(replaced)

    logger.info(f"Product {product_id} updated", extra={"user_id": str(user["_id"])})
    return with_stock_flags(await find_product(product_id))


async def delete_product(user: Dict[str, Any], product_id: str):
    product = await _manageable_product(product_id, user, "delete")
    await get_upload_service().destroy_many(product.get("images") or [])
    await get_products_collection().delete_one({"_id": product["_id"]})
    logger.info(f"Product {product_id} deleted", extra={"user_id": str(user["_id"])})


async def adjust_inventory(product_id: ObjectId, delta: int):
    await get_products_collection().update_one(
        {"_id": product_id, "inventory.track_quantity": {"$ne": False}},
        {"$inc": {"inventory.quantity": delta}}
    )
