"""
marketplace/api/wishlist.py

Purpose: Wishlist endpoints for the signed-in user
"""

from fastapi import APIRouter, Depends

from marketplace.api.common import ok
from marketplace.core.dependencies import get_current_user
from marketplace.services import wishlist_service

router = APIRouter()


@router.get("")
async def get_wishlist(user: dict = Depends(get_current_user)):
    products = await wishlist_service.get_wishlist(user)
    return ok(products, count=len(products))


@router.delete("")
async def clear_wishlist(user: dict = Depends(get_current_user)):
    await wishlist_service.clear_wishlist(user)
    return ok(message="Wishlist cleared")


@router.get("/check/{product_id}")
async def check_wishlist(product_id: str, user: dict = Depends(get_current_user)):
    return ok({"in_wishlist": await wishlist_service.is_in_wishlist(user, product_id)})


@router.post("/{product_id}")
async def add_to_wishlist(product_id: str, user: dict = Depends(get_current_user)):
    count = await wishlist_service.add_to_wishlist(user, product_id)
    return ok({"product_id": product_id, "wishlist_count": count}, message="Product added to wishlist")


@router.delete("/{product_id}")
async def remove_from_wishlist(product_id: str, user: dict = Depends(get_current_user)):
    count = await wishlist_service.remove_from_wishlist(user, product_id)
    return ok({"product_id": product_id, "wishlist_count": count}, message="Product removed from wishlist")
