"""
marketplace/schemas/admin.py

Purpose: Admin and vendor management request schemas
"""

from typing import Optional, Literal

from pydantic import Field, field_validator

from marketplace.schemas.common import CamelModel, check_email


class AdminUserUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = None
    role: Optional[Literal["customer", "vendor", "admin"]] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)


class SuspendRequest(CamelModel):
    is_suspended: bool
    reason: Optional[str] = None


class VendorOrderStatusRequest(CamelModel):
    status: Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    notes: Optional[str] = None
