"""
marketplace/api/banners.py

Purpose: Storefront banners

- `router`: public active banners
- `admin_router`: admin management (mounted under /admin/banners)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from marketplace.api.common import ok
from marketplace.core.dependencies import require_admin
from marketplace.schemas.content import BannerCreateRequest, BannerReorderRequest, BannerUpdateRequest
from marketplace.services import banner_service

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("")
async def get_banners():
    banners = await banner_service.get_active_banners()
    return ok(banners, count=len(banners))


@admin_router.get("")
async def list_banners(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
):
    banners, total = await banner_service.list_banners(page, limit, category, is_active)
    return ok(
        banners,
        count=len(banners),
        total=total,
        pages=(total + limit - 1) // limit,
        currentPage=page,
    )


# registered before /{banner_id} so "reorder" is not taken for an id
@admin_router.put("/reorder")
async def reorder_banners(body: BannerReorderRequest):
    await banner_service.reorder_banners([entry.model_dump() for entry in body.banner_orders])
    return ok(message="Banners reordered successfully")


@admin_router.get("/{banner_id}")
async def get_banner(banner_id: str):
    return ok(await banner_service.get_banner(banner_id))


@admin_router.post("", status_code=201)
async def create_banner(body: BannerCreateRequest, admin: dict = Depends(require_admin)):
    return ok(await banner_service.create_banner(body.model_dump(exclude_unset=True), admin))


@admin_router.put("/{banner_id}")
async def update_banner(banner_id: str, body: BannerUpdateRequest):
    return ok(await banner_service.update_banner(banner_id, body.model_dump(exclude_unset=True)))


@admin_router.delete("/{banner_id}")
async def delete_banner(banner_id: str):
    await banner_service.delete_banner(banner_id)
    return ok(message="Banner deleted successfully")


@admin_router.patch("/{banner_id}/toggle")
async def toggle_banner(banner_id: str):
    return ok(await banner_service.toggle_banner(banner_id))
