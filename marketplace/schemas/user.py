"""
marketplace/schemas/user.py

Purpose: Profile, address and preference request schemas
"""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from marketplace.schemas.common import CamelModel, check_email


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = None
    vendor_profile: Optional[Dict[str, Any]] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)


class AddressRequest(CamelModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: Optional[str] = "US"
    is_default: bool = False


class AddressUpdateRequest(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    is_default: Optional[bool] = None


class PreferencesRequest(CamelModel):
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    newsletter: Optional[bool] = None
