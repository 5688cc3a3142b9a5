"""
marketplace/models/user.py

Purpose: User document model

- Customers, vendors and admins share one collection
- Embedded shipping addresses, preferences and wishlist
- Refresh token list and password reset fields
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId

from marketplace.utils.constants import ROLE_CUSTOMER
from marketplace.utils.time_utils import utcnow

DEFAULT_PREFERENCES = {
    "email_notifications": True,
    "sms_notifications": False,
    "newsletter": True,
}


def new_user_document(name: str, email: str, password_hash: str, role: str = ROLE_CUSTOMER) -> Dict[str, Any]:
    now = utcnow()
    return {
        "name": name.strip(),
        "email": email.strip().lower(),
        "password": password_hash,
        "role": role,
        "avatar": None,
        "is_suspended": False,
        "refresh_tokens": [],
        "last_login": None,
        "vendor_profile": None,
        "shipping_addresses": [],
        "preferences": dict(DEFAULT_PREFERENCES),
        "wishlist": [],
        "reset_password_token": None,
        "reset_password_expire": None,
        "created_at": now,
        "updated_at": now,
    }


def new_address(data: Dict[str, Any]) -> Dict[str, Any]:
    address = {
        "_id": ObjectId(),
        "name": data["name"],
        "phone": data["phone"],
        "address": data["address"],
        "city": data["city"],
        "state": data["state"],
        "zip_code": data["zip_code"],
        "country": data.get("country") or "US",
        "is_default": bool(data.get("is_default")),
    }
    return address


def apply_default_address(addresses: List[Dict[str, Any]], default_id: Optional[ObjectId]) -> List[Dict[str, Any]]:
    """
    Marks exactly one address as default.
    With no explicit choice the first address becomes the default.
    """
    if not addresses:
        return addresses
    if default_id is None or not any(a["_id"] == default_id for a in addresses):
        default_id = next((a["_id"] for a in addresses if a.get("is_default")), addresses[0]["_id"])
    for address in addresses:
        address["is_default"] = address["_id"] == default_id
    return addresses
