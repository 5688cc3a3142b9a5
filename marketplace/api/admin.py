"""
marketplace/api/admin.py

Purpose: Platform administration endpoints (role admin)
"""

from typing import Any, Dict, Optional, Literal

from fastapi import APIRouter, Body, Depends, Query
from pydantic.alias_generators import to_snake

from marketplace.api.common import ok, paginated
from marketplace.core.dependencies import require_admin
from marketplace.schemas.admin import AdminUserUpdateRequest, SuspendRequest
from marketplace.services import admin_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/dashboard")
async def dashboard():
    return ok(await admin_service.get_dashboard())


@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[Literal["customer", "vendor", "admin"]] = None,
    status: Optional[Literal["active", "suspended"]] = None,
):
    users, total = await admin_service.list_users(page, limit, role, status)
    return paginated(users, page, limit, total)


@router.get("/users/{user_id}")
async def get_user(user_id: str):
    return ok(await admin_service.get_user(user_id))


@router.put("/users/{user_id}")
async def update_user(user_id: str, body: AdminUserUpdateRequest):
    return ok(await admin_service.update_user(user_id, body.model_dump(exclude_unset=True)))


@router.put("/users/{user_id}/suspend")
async def suspend_user(user_id: str, body: SuspendRequest):
    return ok(await admin_service.set_user_suspension(user_id, body.is_suspended, body.reason))


@router.get("/products")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
):
    products, total = await admin_service.list_products(page, limit, status)
    return paginated(products, page, limit, total)


@router.get("/orders")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
):
    orders, total = await admin_service.list_orders(page, limit, status)
    return paginated(orders, page, limit, total)


@router.get("/analytics")
async def analytics(period: Literal["7d", "30d", "90d", "1y"] = "30d"):
    return ok(await admin_service.get_analytics(period))


@router.get("/settings")
async def get_settings():
    return ok(admin_service.get_settings())


@router.put("/settings")
async def update_settings(body: Dict[str, Any] = Body(default={})):
    return ok(admin_service.update_settings({to_snake(k): v for k, v in body.items()}))
