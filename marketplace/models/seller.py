"""
marketplace/models/seller.py

Purpose: Seller document model

- Store profile and postal address
- GeoJSON point plus service radius for nearby queries
- Approval / suspension flags and running metrics
"""

from typing import Any, Dict

from marketplace.utils.constants import ROLE_SELLER
from marketplace.utils.time_utils import utcnow

DEFAULT_SERVICE_RADIUS_KM = 5


def geo_point(coordinates) -> Dict[str, Any]:
    lng, lat = coordinates
    return {"type": "Point", "coordinates": [float(lng), float(lat)]}


def new_seller_document(data: Dict[str, Any], password_hash: str) -> Dict[str, Any]:
    now = utcnow()
    address = dict(data["address"])
    address.setdefault("country", "India")
    return {
        "name": data["name"].strip(),
        "email": data["email"].strip().lower(),
        "phone": data["phone"],
        "password": password_hash,
        "role": ROLE_SELLER,
        "store_name": data["store_name"].strip(),
        "store_description": data.get("store_description") or "",
        "address": address,
        "geo": geo_point(data["geo"]["coordinates"]),
        "service_radius_km": data.get("service_radius_km") or DEFAULT_SERVICE_RADIUS_KM,
        "is_approved": False,
        "is_suspended": False,
        "avatar": None,
        "business_documents": [],
        "refresh_tokens": [],
        "last_login": None,
        "metrics": {
            "total_orders": 0,
            "total_sales": 0,
            "average_rating": 0,
            "total_reviews": 0,
        },
        "business_hours": {},
        "payment_settings": {},
        "created_at": now,
        "updated_at": now,
    }


def seller_status_filter(status: str) -> Dict[str, Any]:
    """
    Query clause for the admin status filter (approved / pending / suspended).
    """
    if status == "approved":
        return {"is_approved": True, "is_suspended": False}
    if status == "pending":
        return {"is_approved": False, "is_suspended": False}
    if status == "suspended":
        return {"is_suspended": True}
    return {}
