"""
marketplace/api/products.py

Purpose: Product catalog endpoints

- Public listing, batch, featured, categories, search and detail
- Vendor / admin create, update and delete (JSON or multipart with images)
"""

from typing import Optional, Literal

from fastapi import APIRouter, Depends, Query, Request

from marketplace.api.common import ok, paginated
from marketplace.api.forms import read_product_payload
from marketplace.core.dependencies import get_optional_user, require_vendor_or_admin
from marketplace.schemas.product import ProductCreateRequest, ProductUpdateRequest
from marketplace.services import product_service

router = APIRouter()

SortOption = Literal["newest", "oldest", "price_low", "price_high", "rating", "popular", "distance"]
DeliveryOption = Literal["instant", "nextDay", "next_day", "standard"]


@router.get("")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    sort_by: SortOption = Query("newest", alias="sortBy"),
    delivery: Optional[DeliveryOption] = None,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    pincode: Optional[str] = None,
    radius_km: float = Query(5, alias="radiusKm", gt=0, le=100),
):
    """
    Active products. `lat`/`lng` restrict to `radiusKm`; otherwise `pincode`
    restricts to approved sellers with that postal code. `sortBy=distance`
    needs coordinates and falls back to newest without them.
    """
    products, total = await product_service.list_products(
        page=page,
        limit=limit,
        sort_by=sort_by,
        lat=lat,
        lng=lng,
        radius_km=radius_km,
        category=category,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        delivery=delivery,
        pincode=pincode,
    )
    return paginated(products, page, limit, total)


@router.get("/batch")
async def batch_products(ids: str = Query(..., min_length=1)):
    products = await product_service.get_products_by_ids(i.strip() for i in ids.split(",") if i.strip())
    return ok(products, count=len(products))


@router.get("/featured")
async def featured_products(limit: int = Query(8, ge=1, le=50)):
    products = await product_service.get_featured_products(limit)
    return ok(products, count=len(products))


@router.get("/categories")
async def categories():
    return ok(await product_service.get_categories())


@router.get("/search")
async def search_products(
    q: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
):
    products, total = await product_service.search_products(q, page, limit, category, min_price, max_price)
    return paginated(products, page, limit, total)


@router.get("/{product_id}")
async def get_product(product_id: str, viewer: Optional[dict] = Depends(get_optional_user)):
    return ok(await product_service.get_product(product_id, viewer))


@router.post("", status_code=201)
async def create_product(request: Request, user: dict = Depends(require_vendor_or_admin)):
    data, files = await read_product_payload(request, ProductCreateRequest)
    return ok(await product_service.create_product(user, data, files))


@router.put("/{product_id}")
async def update_product(product_id: str, request: Request, user: dict = Depends(require_vendor_or_admin)):
    data, files = await read_product_payload(request, ProductUpdateRequest)
    return ok(await product_service.update_product(user, product_id, data, files))


@router.delete("/{product_id}")
async def delete_product(product_id: str, user: dict = Depends(require_vendor_or_admin)):
    await product_service.delete_product(user, product_id)
    return ok(message="Product deleted successfully")
