"""
marketplace/api/homepage_sections.py

Purpose: Homepage sections

- `router`: public visible sections
- `admin_router`: admin management (mounted under /admin/homepage-sections)
"""

from typing import Optional, Literal

from fastapi import APIRouter, Depends

from marketplace.api.common import ok
from marketplace.core.dependencies import require_admin
from marketplace.schemas.content import (
    SectionCreateRequest,
    SectionProductRequest,
    SectionProductsReorderRequest,
    SectionReorderRequest,
    SectionUpdateRequest,
)
from marketplace.services import homepage_section_service

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("")
async def get_sections(delivery: Optional[Literal["instant", "nextDay", "next_day", "standard"]] = None):
    sections = await homepage_section_service.get_visible_sections(delivery)
    return ok(sections, count=len(sections))


@router.get("/{section_id}")
async def get_section(section_id: str):
    return ok(await homepage_section_service.get_section(section_id))


@admin_router.get("")
async def list_sections():
    sections = await homepage_section_service.list_all_sections()
    return ok(sections, count=len(sections))


@admin_router.post("", status_code=201)
async def create_section(body: SectionCreateRequest, admin: dict = Depends(require_admin)):
    return ok(await homepage_section_service.create_section(body.model_dump(), admin))


@admin_router.put("/reorder")
async def reorder_sections(body: SectionReorderRequest):
    sections = await homepage_section_service.reorder_sections([entry.model_dump() for entry in body.section_orders])
    return ok(sections)


@admin_router.put("/{section_id}")
async def update_section(section_id: str, body: SectionUpdateRequest, admin: dict = Depends(require_admin)):
    return ok(await homepage_section_service.update_section(section_id, body.model_dump(exclude_unset=True), admin))


@admin_router.delete("/{section_id}")
async def delete_section(section_id: str):
    await homepage_section_service.delete_section(section_id)
    return ok(message="Section deleted successfully")


@admin_router.post("/{section_id}/products")
async def add_product(section_id: str, body: SectionProductRequest):
    return ok(await homepage_section_service.add_section_product(section_id, body.product_id))


@admin_router.put("/{section_id}/products/reorder")
async def reorder_products(section_id: str, body: SectionProductsReorderRequest):
    return ok(await homepage_section_service.reorder_section_products(section_id, body.product_ids))


@admin_router.delete("/{section_id}/products/{product_id}")
async def remove_product(section_id: str, product_id: str):
    return ok(await homepage_section_service.remove_section_product(section_id, product_id))
