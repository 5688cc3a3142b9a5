"""
marketplace/models/homepage_section.py

Purpose: Homepage section document model

- Curated product lists shown on the storefront
- Product list is capped at max_products
"""

from typing import Any, Dict, List

from bson import ObjectId

from marketplace.utils.constants import SECTION_MAX_PRODUCTS_DEFAULT
from marketplace.utils.time_utils import utcnow


def new_section_document(data: Dict[str, Any], admin_id: ObjectId) -> Dict[str, Any]:
    now = utcnow()
    max_products = data.get("max_products") or SECTION_MAX_PRODUCTS_DEFAULT
    category = data.get("category")
    return {
        "title": data["title"].strip(),
        "description": data.get("description") or "",
        "type": data["type"],
        "category": category.lower() if category else None,
        "products": list(data.get("products") or [])[:max_products],
        "max_products": max_products,
        "is_visible": data.get("is_visible", True),
        "order": data.get("order", 0),
        "banner_image": data.get("banner_image"),
        "banner_link": data.get("banner_link"),
        "banner_text": data.get("banner_text"),
        "created_by": admin_id,
        "last_modified_by": admin_id,
        "created_at": now,
        "updated_at": now,
    }


def add_product(products: List[ObjectId], product_id: ObjectId, max_products: int) -> List[ObjectId]:
    """
    Appends a product unless already present, keeping the most recent `max_products`.
    """
    if product_id in products:
        return list(products)
    return (list(products) + [product_id])[-max_products:]


def remove_product(products: List[ObjectId], product_id: ObjectId) -> List[ObjectId]:
    return [p for p in products if p != product_id]


def reorder_products(product_ids: List[ObjectId], max_products: int) -> List[ObjectId]:
    return list(product_ids)[:max_products]
