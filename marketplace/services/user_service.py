"""
marketplace/services/user_service.py

Purpose: User profile management

- Profile and avatar updates
- Shipping address book (single default address)
- Notification preferences
"""

from typing import Any, Dict, List, Optional

from fastapi import UploadFile

from marketplace.core.exceptions import ResourceNotFoundError
from marketplace.core.logging import get_logger, LogContext
from marketplace.db.mongo import get_users_collection
from marketplace.models.user import apply_default_address, new_address
from marketplace.services.auth_service import ensure_email_available
from marketplace.services.upload_service import get_upload_service, AVATAR_TRANSFORMATION
from marketplace.utils.serialization import to_object_id
from marketplace.utils.time_utils import utcnow

logger = get_logger(__name__)


async def get_user(user_id) -> Dict[str, Any]:
    user = await get_users_collection().find_one({"_id": user_id})
    if not user:
        raise ResourceNotFoundError("User not found")
    return user


async def update_profile(user: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    users = get_users_collection()
    changes = {k: v for k, v in changes.items() if v is not None}
    if "email" in changes:
        await ensure_email_available(users, changes["email"], user["_id"])
    if "vendor_profile" in changes and user.get("role") != "vendor":
        changes.pop("vendor_profile")
    changes["updated_at"] = utcnow()
    await users.update_one({"_id": user["_id"]}, {"$set": changes})
    return await get_user(user["_id"])


async def update_avatar(user: Dict[str, Any], file: UploadFile) -> Dict[str, Any]:
    """
    Uploads a new avatar and destroys the previous one.
    """
    uploader = get_upload_service()
    uploader.check_files([file])
    image = await uploader.upload_image(file, folder="avatars", transformation=AVATAR_TRANSFORMATION)

    previous = user.get("avatar") or {}
    avatar = {"public_id": image["public_id"], "url": image["url"]}
    await get_users_collection().update_one(
        {"_id": user["_id"]}, {"$set": {"avatar": avatar, "updated_at": utcnow()}}
    )
    if previous.get("public_id"):
        await uploader.destroy(previous["public_id"])

    with LogContext(user_id=str(user["_id"])):
        logger.info("Avatar updated")
    return avatar


async def _save_addresses(user_id, addresses: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    await get_users_collection().update_one(
        {"_id": user_id}, {"$set": {"shipping_addresses": addresses, "updated_at": utcnow()}}
    )
    return addresses


def _find_address(addresses: List[Dict[str, Any]], address_id) -> Dict[str, Any]:
    for address in addresses:
        if address["_id"] == address_id:
            return address
    raise ResourceNotFoundError("Address not found")


async def add_shipping_address(user: Dict[str, Any], data: Dict[str, Any]) -> List[Dict[str, Any]]:
    fresh = await get_user(user["_id"])
    addresses = list(fresh.get("shipping_addresses") or [])
    address = new_address(data)
    addresses.append(address)
    default_id = address["_id"] if address["is_default"] else None
    return await _save_addresses(user["_id"], apply_default_address(addresses, default_id))


async def update_shipping_address(user: Dict[str, Any], address_id: str, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
    oid = to_object_id(address_id, "addressId")
    fresh = await get_user(user["_id"])
    addresses = list(fresh.get("shipping_addresses") or [])
    address = _find_address(addresses, oid)

    make_default: Optional[bool] = changes.pop("is_default", None)
    address.update({k: v for k, v in changes.items() if v is not None})
    default_id = oid if make_default else None
    if make_default is False and address.get("is_default"):
        # unsetting the current default hands it to another address
        address["is_default"] = False
        default_id = next((a["_id"] for a in addresses if a["_id"] != oid), oid)
    return await _save_addresses(user["_id"], apply_default_address(addresses, default_id))


async def delete_shipping_address(user: Dict[str, Any], address_id: str) -> List[Dict[str, Any]]:
    oid = to_object_id(address_id, "addressId")
    fresh = await get_user(user["_id"])
    addresses = list(fresh.get("shipping_addresses") or [])
    _find_address(addresses, oid)
    remaining = [a for a in addresses if a["_id"] != oid]
    return await _save_addresses(user["_id"], apply_default_address(remaining, None))


async def set_default_address(user: Dict[str, Any], address_id: str) -> List[Dict[str, Any]]:
    oid = to_object_id(address_id, "addressId")
    fresh = await get_user(user["_id"])
    addresses = list(fresh.get("shipping_addresses") or [])
    _find_address(addresses, oid)
    return await _save_addresses(user["_id"], apply_default_address(addresses, oid))


async def update_preferences(user: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    updates = {f"preferences.{k}": v for k, v in changes.items() if v is not None}
    if updates:
        updates["updated_at"] = utcnow()
        await get_users_collection().update_one({"_id": user["_id"]}, {"$set": updates})
    fresh = await get_user(user["_id"])
    return fresh.get("preferences") or {}
