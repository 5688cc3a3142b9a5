"""
marketplace/api/seller_products.py

Purpose: Seller-owned product management and image handling
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile

from marketplace.api.common import ok
from marketplace.api.forms import read_product_payload
from marketplace.core.dependencies import get_current_seller
from marketplace.schemas.product import ProductCreateRequest, ProductUpdateRequest
from marketplace.services import seller_product_service

router = APIRouter()


@router.get("")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    seller: dict = Depends(get_current_seller),
):
    products, total = await seller_product_service.list_seller_products(seller, page, limit, status, category, search)
    return ok(products, count=len(products), total=total)


@router.get("/analytics")
async def analytics(seller: dict = Depends(get_current_seller)):
    return ok(await seller_product_service.get_seller_product_analytics(seller))


@router.get("/{product_id}")
async def get_product(product_id: str, seller: dict = Depends(get_current_seller)):
    return ok(await seller_product_service.get_seller_product(seller, product_id))


@router.post("", status_code=201)
async def create_product(request: Request, seller: dict = Depends(get_current_seller)):
    data, files = await read_product_payload(request, ProductCreateRequest)
    return ok(await seller_product_service.create_seller_product(seller, data, files))


@router.put("/{product_id}")
async def update_product(product_id: str, request: Request, seller: dict = Depends(get_current_seller)):
    data, _ = await read_product_payload(request, ProductUpdateRequest)
    return ok(await seller_product_service.update_seller_product(seller, product_id, data))


@router.delete("/{product_id}")
async def delete_product(product_id: str, seller: dict = Depends(get_current_seller)):
    await seller_product_service.delete_seller_product(seller, product_id)
    return ok(message="Product deleted successfully")


@router.post("/{product_id}/images")
async def upload_images(product_id: str, images: List[UploadFile] = File(default=[]),
                        seller: dict = Depends(get_current_seller)):
    return ok(await seller_product_service.add_product_images(seller, product_id, images))


@router.delete("/{product_id}/images/{image_id}")
async def delete_image(product_id: str, image_id: str, seller: dict = Depends(get_current_seller)):
    return ok(await seller_product_service.delete_product_image(seller, product_id, image_id))


@router.patch("/{product_id}/images/{image_id}/primary")
async def set_primary_image(product_id: str, image_id: str, seller: dict = Depends(get_current_seller)):
    return ok(await seller_product_service.set_primary_product_image(seller, product_id, image_id))
