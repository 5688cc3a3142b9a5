"""
marketplace/api/users.py

Purpose: User profile, avatar, address book and preferences
"""

from fastapi import APIRouter, Depends, File, UploadFile

from marketplace.api.common import ok
from marketplace.core.dependencies import get_current_user
from marketplace.schemas.user import AddressRequest, AddressUpdateRequest, PreferencesRequest, ProfileUpdateRequest
from marketplace.services import user_service
from marketplace.utils.serialization import public_document

router = APIRouter()


@router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user)):
    return {"success": True, "data": public_document(await user_service.get_user(user["_id"]))}


@router.put("/profile")
async def update_profile(body: ProfileUpdateRequest, user: dict = Depends(get_current_user)):
    updated = await user_service.update_profile(user, body.model_dump(exclude_unset=True))
    return {"success": True, "data": public_document(updated)}


@router.post("/avatar")
async def upload_avatar(avatar: UploadFile = File(...), user: dict = Depends(get_current_user)):
    return ok(await user_service.update_avatar(user, avatar))


@router.post("/addresses", status_code=201)
async def add_address(body: AddressRequest, user: dict = Depends(get_current_user)):
    return ok(await user_service.add_shipping_address(user, body.model_dump()))


@router.put("/addresses/{address_id}")
async def update_address(address_id: str, body: AddressUpdateRequest, user: dict = Depends(get_current_user)):
    return ok(await user_service.update_shipping_address(user, address_id, body.model_dump(exclude_unset=True)))


@router.delete("/addresses/{address_id}")
async def delete_address(address_id: str, user: dict = Depends(get_current_user)):
    return ok(await user_service.delete_shipping_address(user, address_id))


@router.put("/addresses/{address_id}/default")
async def set_default_address(address_id: str, user: dict = Depends(get_current_user)):
    return ok(await user_service.set_default_address(user, address_id))


@router.put("/preferences")
async def update_preferences(body: PreferencesRequest, user: dict = Depends(get_current_user)):
    return ok(await user_service.update_preferences(user, body.model_dump(exclude_unset=True)))
