"""
marketplace/models/product.py

Purpose: Product document model

- Catalog fields, inventory and delivery options
- Exactly one primary image
- Slug derived from the name
- Stock helpers used by cart and orders
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId

from marketplace.core.exceptions import BadRequestError
from marketplace.utils.constants import DELIVERY_OPTIONS, DELIVERY_OPTION_REQUIRED_MESSAGE
from marketplace.utils.time_utils import utcnow
from marketplace.utils.validation_utils import slugify

DEFAULT_INVENTORY = {
    "track_quantity": True,
    "quantity": 0,
    "low_stock_threshold": 10,
    "allow_backorder": False,
}

DEFAULT_DELIVERY_OPTIONS = {"instant": False, "next_day": False, "standard": True}


def normalize_images(images: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Gives every image an _id and keeps exactly one primary image.
    The first flagged image wins; with none flagged the first image becomes primary.
    """
    normalized = []
    primary_seen = False
    for image in images or []:
        item = {
            "_id": image.get("_id") or ObjectId(),
            "public_id": image.get("public_id"),
            "url": image["url"],
            "alt": image.get("alt") or "",
            "is_primary": False,
        }
        if image.get("is_primary") and not primary_seen:
            item["is_primary"] = True
            primary_seen = True
        normalized.append(item)
    if normalized and not primary_seen:
        normalized[0]["is_primary"] = True
    return normalized


def set_primary_image(images: List[Dict[str, Any]], image_id: ObjectId) -> bool:
    """Moves the primary flag. Returns False when the image does not exist."""
    if not any(img["_id"] == image_id for img in images):
        return False
    for img in images:
        img["is_primary"] = img["_id"] == image_id
    return True


def merge_delivery_options(options: Optional[Dict[str, bool]], current: Optional[Dict[str, bool]] = None) -> Dict[str, bool]:
    merged = dict(current or DEFAULT_DELIVERY_OPTIONS)
    for key in DELIVERY_OPTIONS:
        if options and key in options and options[key] is not None:
            merged[key] = bool(options[key])
    if not any(merged.values()):
        raise BadRequestError(DELIVERY_OPTION_REQUIRED_MESSAGE)
    return merged


def merge_inventory(inventory: Optional[Dict[str, Any]], current: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    merged = dict(current or DEFAULT_INVENTORY)
    for key, value in (inventory or {}).items():
        if value is not None:
            merged[key] = value
    return merged


def build_product_document(data: Dict[str, Any], vendor: Optional[ObjectId] = None, seller: Optional[ObjectId] = None,
                           location: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        "name": data["name"].strip(),
        "description": data["description"],
        "short_description": data.get("short_description"),
        "price": float(data["price"]),
        "compare_price": data.get("compare_price"),
        "cost_price": data.get("cost_price"),
        "sku": data["sku"].upper() if data.get("sku") else None,
        "barcode": data.get("barcode"),
        "category": data["category"],
        "subcategory": data.get("subcategory"),
        "brand": data.get("brand"),
        "tags": data.get("tags") or [],
        "images": normalize_images(data.get("images")),
        "inventory": merge_inventory(data.get("inventory")),
        "shipping": data.get("shipping") or {"free_shipping": False, "shipping_class": "standard"},
        "seo": data.get("seo") or {},
        "specifications": data.get("specifications") or [],
        "variants": data.get("variants") or [],
        "status": data.get("status") or "draft",
        "featured": bool(data.get("featured")),
        "vendor": vendor,
        "seller": seller,
        "location": location,
        "ratings": {"average": 0, "count": 0},
        "sales": {"total": 0, "count": 0},
        "delivery_options": merge_delivery_options(data.get("delivery_options")),
        "slug": slugify(data["name"]),
        "created_at": now,
        "updated_at": now,
    }
    if doc["sku"] is None:
        # sparse unique index: absent, not null
        doc.pop("sku")
    if location is None:
        doc.pop("location")
    return doc


def available_quantity(product: Dict[str, Any]) -> Optional[int]:
    """
    Units that can be sold, or None when inventory is not tracked.
    """
    inventory = product.get("inventory") or DEFAULT_INVENTORY
    if not inventory.get("track_quantity", True):
        return None
    return max(0, int(inventory.get("quantity", 0)))


def is_in_stock(product: Dict[str, Any]) -> bool:
    available = available_quantity(product)
    return available is None or available > 0


def is_low_stock(product: Dict[str, Any]) -> bool:
    available = available_quantity(product)
    if available is None:
        return False
    inventory = product.get("inventory") or DEFAULT_INVENTORY
    return available <= inventory.get("low_stock_threshold", 10)


def with_stock_flags(product: Dict[str, Any]) -> Dict[str, Any]:
    product["is_in_stock"] = is_in_stock(product)
    product["is_low_stock"] = is_low_stock(product)
    return product


def owner_ids(product: Dict[str, Any]) -> List[ObjectId]:
    return [oid for oid in (product.get("vendor"), product.get("seller")) if oid is not None]
