"""
marketplace/services/homepage_section_service.py

Purpose: Curated homepage sections

- Public list of visible sections with populated products
- Admin CRUD plus product add / remove / reorder and section reorder
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId

from marketplace.core.exceptions import BadRequestError, ResourceNotFoundError
from marketplace.core.logging import get_logger
from marketplace.db.mongo import get_homepage_sections_collection, get_products_collection, get_users_collection
from marketplace.models.homepage_section import add_product, new_section_document, remove_product, reorder_products
from marketplace.services.product_service import DELIVERY_ALIASES
from marketplace.utils.constants import PRODUCT_NOT_FOUND_MESSAGE
from marketplace.utils.serialization import to_object_id, to_object_ids
from marketplace.utils.time_utils import utcnow

logger = get_logger(__name__)

SECTION_NOT_FOUND_MESSAGE = "Section not found"
SECTION_SORT = [("order", 1), ("created_at", 1)]
SECTION_PRODUCT_FIELDS = {
    "name": 1, "price": 1, "compare_price": 1, "images": 1, "ratings": 1, "category": 1, "delivery_options": 1,
}
EDITOR_FIELDS = {"name": 1, "email": 1}


async def populate_sections(sections: List[Dict[str, Any]], delivery: Optional[str] = None,
                            with_editors: bool = False) -> List[Dict[str, Any]]:
    """
    Replaces product ids with product summaries, keeping the section's order.
    With a delivery option, products that do not offer it are dropped.
    """
    ids = {pid for s in sections for pid in s.get("products", [])}
    query: Dict[str, Any] = {"_id": {"$in": list(ids)}}
    if delivery in DELIVERY_ALIASES:
        query[f"delivery_options.{DELIVERY_ALIASES[delivery]}"] = True

    products = {}
    if ids:
        async for product in get_products_collection().find(query, SECTION_PRODUCT_FIELDS):
            products[product["_id"]] = product

    editors = {}
    if with_editors:
        editor_ids = {s.get(f) for s in sections for f in ("created_by", "last_modified_by") if s.get(f)}
        if editor_ids:
            async for user in get_users_collection().find({"_id": {"$in": list(editor_ids)}}, EDITOR_FIELDS):
                editors[user["_id"]] = user

    for section in sections:
        section["products"] = [products[p] for p in section.get("products", []) if p in products]
        for field in ("created_by", "last_modified_by"):
            if section.get(field) in editors:
                section[field] = editors[section[field]]
    return sections


async def _ensure_products_exist(product_ids: List[ObjectId]):
    if not product_ids:
        return
    found = await get_products_collection().count_documents({"_id": {"$in": list(set(product_ids))}})
    if found != len(set(product_ids)):
        raise BadRequestError("One or more products not found")


async def _find_section(section_id: str) -> Dict[str, Any]:
    section = await get_homepage_sections_collection().find_one({"_id": to_object_id(section_id)})
    if not section:
        raise ResourceNotFoundError(SECTION_NOT_FOUND_MESSAGE)
    return section


async def _reload(section_id: ObjectId) -> Dict[str, Any]:
    section = await get_homepage_sections_collection().find_one({"_id": section_id})
    return (await populate_sections([section], with_editors=True))[0]


async def get_visible_sections(delivery: Optional[str] = None) -> List[Dict[str, Any]]:
    cursor = get_homepage_sections_collection().find({"is_visible": True}).sort(SECTION_SORT)
    return await populate_sections(await cursor.to_list(length=None), delivery)


async def get_section(section_id: str) -> Dict[str, Any]:
    return (await populate_sections([await _find_section(section_id)]))[0]


async def list_all_sections() -> List[Dict[str, Any]]:
    cursor = get_homepage_sections_collection().find().sort(SECTION_SORT)
    return await populate_sections(await cursor.to_list(length=None), with_editors=True)


async def create_section(data: Dict[str, Any], admin: Dict[str, Any]) -> Dict[str, Any]:
    data["products"] = to_object_ids(data.get("products") or [], "products")
    await _ensure_products_exist(data["products"])
    doc = new_section_document(data, admin["_id"])
    result = await get_homepage_sections_collection().insert_one(doc)
    logger.info(f"Homepage section created: {doc['title']}", extra={"user_id": str(admin["_id"])})
    return await _reload(result.inserted_id)


async def update_section(section_id: str, data: Dict[str, Any], admin: Dict[str, Any]) -> Dict[str, Any]:
    section = await _find_section(section_id)
    changes = {k: v for k, v in data.items() if v is not None}
    if "products" in changes:
        changes["products"] = to_object_ids(changes["products"], "products")
        await _ensure_products_exist(changes["products"])
    if changes.get("category"):
        changes["category"] = changes["category"].lower()

    max_products = changes.get("max_products", section.get("max_products"))
    if "products" in changes or "max_products" in changes:
        changes["products"] = list(changes.get("products", section.get("products", [])))[:max_products]

    changes["last_modified_by"] = admin["_id"]
    changes["updated_at"] = utcnow()
    await get_homepage_sections_collection().update_one({"_id": section["_id"]}, {"$set": changes})
    return await _reload(section["_id"])


async def delete_section(section_id: str):
    result = await get_homepage_sections_collection().delete_one({"_id": to_object_id(section_id)})
    if result.deleted_count == 0:
        raise ResourceNotFoundError(SECTION_NOT_FOUND_MESSAGE)
    logger.info(f"Homepage section {section_id} deleted")


async def _save_products(section: Dict[str, Any], products: List[ObjectId]) -> Dict[str, Any]:
    await get_homepage_sections_collection().update_one(
        {"_id": section["_id"]}, {"$set": {"products": products, "updated_at": utcnow()}}
    )
    return await _reload(section["_id"])


async def add_section_product(section_id: str, product_id: Optional[str]) -> Dict[str, Any]:
    if not product_id:
        raise BadRequestError("Product ID is required")
    section = await _find_section(section_id)
    oid = to_object_id(product_id, "productId")
    if not await get_products_collection().find_one({"_id": oid}, {"_id": 1}):
        raise ResourceNotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    products = add_product(section.get("products", []), oid, section["max_products"])
    return await _save_products(section, products)


async def remove_section_product(section_id: str, product_id: str) -> Dict[str, Any]:
    section = await _find_section(section_id)
    oid = to_object_id(product_id, "productId")
    return await _save_products(section, remove_product(section.get("products", []), oid))


async def reorder_section_products(section_id: str, product_ids: List[str]) -> Dict[str, Any]:
    section = await _find_section(section_id)
    products = reorder_products(to_object_ids(product_ids, "productIds"), section["max_products"])
    return await _save_products(section, products)


async def reorder_sections(section_orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    sections = get_homepage_sections_collection()
    for entry in section_orders:
        await sections.update_one(
            {"_id": to_object_id(entry["section_id"], "sectionId")},
            {"$set": {"order": entry["order"], "updated_at": utcnow()}}
        )
    return await list_all_sections()
