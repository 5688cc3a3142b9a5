"""
marketplace/services/seller_product_service.py

Purpose: Product management for location-aware sellers

- Listing / CRUD scoped to the calling seller
- Image add / remove / primary management
- Per-seller product analytics
"""

from typing import Any, Dict, List, Optional, Tuple

from fastapi import UploadFile

from marketplace.core.exceptions import BadRequestError, ResourceNotFoundError
from marketplace.core.logging import get_logger, LogContext
from marketplace.db.mongo import get_products_collection
from marketplace.models.product import build_product_document, normalize_images, set_primary_image, with_stock_flags
from marketplace.services.product_service import product_changes
from marketplace.services.upload_service import get_upload_service, PRODUCT_TRANSFORMATION
from marketplace.utils.constants import PRODUCT_NOT_FOUND_MESSAGE, PRODUCT_STATUSES
from marketplace.utils.serialization import to_object_id
from marketplace.utils.time_utils import utcnow
from marketplace.utils.validation_utils import regex_search

logger = get_logger(__name__)

MAX_IMAGES_PER_UPLOAD = 5


async def _own_product(seller: Dict[str, Any], product_id: str) -> Dict[str, Any]:
    """Products owned by someone else are reported as missing."""
    oid = to_object_id(product_id)
    product = await get_products_collection().find_one({"_id": oid, "seller": seller["_id"]})
    if not product:
        raise ResourceNotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    return product


async def list_seller_products(seller: Dict[str, Any], page: int = 1, limit: int = 20, status: Optional[str] = None,
                               category: Optional[str] = None, search: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {"seller": seller["_id"]}
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    if search:
        term = regex_search(search)
        query["$or"] = [{"name": term}, {"description": term}, {"tags": term}]

    products = get_products_collection()
    cursor = products.find(query).sort("created_at", -1).skip((page - 1) * limit).limit(limit)
    items = [with_stock_flags(p) for p in await cursor.to_list(length=limit)]
    total = await products.count_documents(query)
    return items, total


async def get_seller_product(seller: Dict[str, Any], product_id: str) -> Dict[str, Any]:
    return with_stock_flags(await _own_product(seller, product_id))


async def create_seller_product(seller: Dict[str, Any], data: Dict[str, Any],
                                files: Optional[List[UploadFile]] = None) -> Dict[str, Any]:
    """
    The product inherits the seller's store location so it shows up in nearby searches.
    """
    if files:
        data["images"] = await get_upload_service().upload_images(files, "products", PRODUCT_TRANSFORMATION)
    doc = build_product_document(data, seller=seller["_id"], location=seller.get("geo"))
    result = await get_products_collection().insert_one(doc)
    doc["_id"] = result.inserted_id

    with LogContext(seller_id=str(seller["_id"]), role="seller", product_id=str(doc["_id"])):
        logger.info(f"Seller product created: {doc['name']}")
    return with_stock_flags(doc)


async def update_seller_product(seller: Dict[str, Any], product_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    product = await _own_product(seller, product_id)
    changes = product_changes(product, data)
    await get_products_collection().update_one({"_id": product["_id"]}, {"$set": changes})
    return await get_seller_product(seller, product_id)


async def delete_seller_product(seller: Dict[str, Any], product_id: str):
    product = await _own_product(seller, product_id)
    await get_upload_service().destroy_many(product.get("images") or [])
    await get_products_collection().delete_one({"_id": product["_id"]})
    logger.info(f"Seller product {product_id} deleted", extra={"user_id": str(seller["_id"])})


async def _save_images(product: Dict[str, Any], images: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    await get_products_collection().update_one(
        {"_id": product["_id"]}, {"$set": {"images": images, "updated_at": utcnow()}}
    )
    return images


async def add_product_images(seller: Dict[str, Any], product_id: str, files: List[UploadFile]) -> List[Dict[str, Any]]:
    if not files:
        raise BadRequestError("No images uploaded")
    if len(files) > MAX_IMAGES_PER_UPLOAD:
        raise BadRequestError(f"Too many files. Maximum is {MAX_IMAGES_PER_UPLOAD} files.")
    product = await _own_product(seller, product_id)
    uploaded = await get_upload_service().upload_images(files, "products", PRODUCT_TRANSFORMATION)

    existing = list(product.get("images") or [])
    if existing:
        for image in uploaded:
            image["is_primary"] = False
    return await _save_images(product, normalize_images(existing + uploaded))


async def delete_product_image(seller: Dict[str, Any], product_id: str, image_id: str) -> List[Dict[str, Any]]:
    product = await _own_product(seller, product_id)
    oid = to_object_id(image_id, "imageId")
    images = list(product.get("images") or [])
    image = next((img for img in images if img["_id"] == oid), None)
    if image is None:
        raise ResourceNotFoundError("Image not found")

    await get_upload_service().destroy(image.get("public_id"))
    remaining = [img for img in images if img["_id"] != oid]
    # normalize_images promotes the first remaining image if the primary was removed
    return await _save_images(product, normalize_images(remaining))


async def set_primary_product_image(seller: Dict[str, Any], product_id: str, image_id: str) -> List[Dict[str, Any]]:
    product = await _own_product(seller, product_id)
    oid = to_object_id(image_id, "imageId")
    images = list(product.get("images") or [])
    if not set_primary_image(images, oid):
        raise ResourceNotFoundError("Image not found")
    return await _save_images(product, images)


async def get_seller_product_analytics(seller: Dict[str, Any]) -> Dict[str, Any]:
    """
    Status counts, sales totals, top 5 products by units sold and the category spread.
    """
    status_counts = {status: 0 for status in PRODUCT_STATUSES}
    categories: Dict[str, int] = {}
    total_revenue = 0.0
    units_sold = 0
    products = []

    async for product in get_products_collection().find({"seller": seller["_id"]}):
        status_counts[product.get("status", "draft")] = status_counts.get(product.get("status", "draft"), 0) + 1
        category = product.get("category") or "uncategorized"
        categories[category] = categories.get(category, 0) + 1
        sales = product.get("sales") or {}
        total_revenue += sales.get("total", 0)
        units_sold += sales.get("count", 0)
        products.append(product)

    top = sorted(products, key=lambda p: (p.get("sales") or {}).get("count", 0), reverse=True)[:5]
    return {
        "total_products": len(products),
        "status_counts": status_counts,
        "sales": {"total_revenue": round(total_revenue, 2), "units_sold": units_sold},
        "top_products": [
            {
                "_id": p["_id"],
                "name": p.get("name"),
                "units_sold": (p.get("sales") or {}).get("count", 0),
                "revenue": (p.get("sales") or {}).get("total", 0),
            }
            for p in top
        ],
        "category_distribution": [
            {"category": name, "count": count}
            for name, count in sorted(categories.items(), key=lambda kv: kv[1], reverse=True)
        ],
    }
