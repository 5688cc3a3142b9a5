"""
marketplace/api/vendor.py

Purpose: Vendor workspace endpoints (role vendor)
"""

from typing import Optional, Literal

from fastapi import APIRouter, Depends, Query, Request

from marketplace.api.common import ok, paginated
from marketplace.api.forms import read_product_payload
from marketplace.core.dependencies import require_vendor
from marketplace.schemas.admin import VendorOrderStatusRequest
from marketplace.schemas.product import ProductCreateRequest, ProductUpdateRequest
from marketplace.services import product_service, vendor_service

router = APIRouter()


@router.get("/dashboard")
async def dashboard(vendor: dict = Depends(require_vendor)):
    return ok(await vendor_service.get_dashboard(vendor))


@router.get("/products")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    vendor: dict = Depends(require_vendor),
):
    products, total = await vendor_service.list_vendor_products(vendor, page, limit, status)
    return paginated(products, page, limit, total)


@router.post("/products", status_code=201)
async def create_product(request: Request, vendor: dict = Depends(require_vendor)):
    data, files = await read_product_payload(request, ProductCreateRequest)
    return ok(await product_service.create_product(vendor, data, files))


@router.put("/products/{product_id}")
async def update_product(product_id: str, request: Request, vendor: dict = Depends(require_vendor)):
    data, files = await read_product_payload(request, ProductUpdateRequest)
    return ok(await product_service.update_product(vendor, product_id, data, files))


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, vendor: dict = Depends(require_vendor)):
    await product_service.delete_product(vendor, product_id)
    return ok(message="Product deleted successfully")


@router.get("/orders")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    vendor: dict = Depends(require_vendor),
):
    orders, total = await vendor_service.list_vendor_orders(vendor, page, limit, status)
    return paginated(orders, page, limit, total)


@router.get("/orders/{order_id}")
async def get_order(order_id: str, vendor: dict = Depends(require_vendor)):
    return ok(await vendor_service.get_vendor_order(vendor, order_id))


@router.put("/orders/{order_id}/status")
async def update_order_status(order_id: str, body: VendorOrderStatusRequest, vendor: dict = Depends(require_vendor)):
    sub_order = await vendor_service.update_vendor_order_status(
        vendor, order_id, body.status, body.tracking_number, body.carrier, body.notes
    )
    return ok(sub_order)


@router.get("/analytics")
async def analytics(period: Literal["7d", "30d", "90d", "1y"] = "30d", vendor: dict = Depends(require_vendor)):
    return ok(await vendor_service.get_vendor_analytics(vendor, period))
