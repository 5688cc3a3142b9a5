"""
marketplace/models/banner.py

Purpose: Banner document model

- Display window (start/end date) validation
- Active-banner query and display ordering
"""

from datetime import datetime
from typing import Any, Dict, Optional

from marketplace.core.exceptions import ValidationError
from marketplace.utils.time_utils import utcnow

# priority desc, then manual order, newest first
ACTIVE_BANNER_SORT = [("priority", -1), ("order", 1), ("created_at", -1)]

BANNER_DEFAULTS = {
    "description": "",
    "button_text": "Shop Now",
    "button_link": "/products",
    "is_active": True,
    "order": 0,
    "end_date": None,
    "target_audience": "all",
    "category": "general",
    "priority": 1,
}


def validate_window(start_date: Optional[datetime], end_date: Optional[datetime]):
    if start_date and end_date and end_date <= start_date:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "end_date", "msg": "End date must be after start date"}]
        )


def new_banner_document(data: Dict[str, Any], created_by=None) -> Dict[str, Any]:
    now = utcnow()
    doc = dict(BANNER_DEFAULTS)
    doc.update({k: v for k, v in data.items() if v is not None})
    doc.setdefault("start_date", now)
    validate_window(doc["start_date"], doc.get("end_date"))
    doc["created_by"] = created_by
    doc["created_at"] = now
    doc["updated_at"] = now
    return doc


def active_banner_query(now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    return {
        "is_active": True,
        "start_date": {"$lte": now},
        "$or": [
            {"end_date": None},
            {"end_date": {"$gte": now}},
        ],
    }
