"""
marketplace/api/cart.py

Purpose: Server-side cart for the signed-in user
"""

from fastapi import APIRouter, Depends

from marketplace.api.common import ok
from marketplace.core.dependencies import get_current_user
from marketplace.schemas.order import CartItemRequest, CartReplaceRequest
from marketplace.services import cart_service

router = APIRouter()


@router.get("/me")
async def get_my_cart(user: dict = Depends(get_current_user)):
    return ok(await cart_service.get_cart(user))


@router.put("/me")
async def replace_my_cart(body: CartReplaceRequest, user: dict = Depends(get_current_user)):
    return ok(await cart_service.replace_cart(user, body.items))


@router.post("/me/items")
async def add_item(body: CartItemRequest, user: dict = Depends(get_current_user)):
    return ok(await cart_service.add_item(user, body.product_id, body.quantity))


@router.patch("/me/items")
async def update_item(body: CartItemRequest, user: dict = Depends(get_current_user)):
    return ok(await cart_service.update_item(user, body.product_id, body.quantity))


@router.delete("/me")
async def clear_my_cart(user: dict = Depends(get_current_user)):
    return ok(await cart_service.clear_cart(user))
