"""
marketplace/schemas/seller.py

Purpose: Seller registration, profile and admin status schemas
"""

from typing import List, Optional

from pydantic import Field, field_validator

from marketplace.schemas.common import CamelModel, check_email
from marketplace.utils.validation_utils import validate_coordinates, validate_phone


class SellerAddress(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., min_length=1)
    country: Optional[str] = "India"


class GeoInput(CamelModel):
    type: str = "Point"
    coordinates: List[float]

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, v):
        if not validate_coordinates(v):
            raise ValueError("Coordinates must be an array of 2 numbers [longitude, latitude]")
        return v


def _check_phone(v):
    if v is not None and not validate_phone(v):
        raise ValueError("Please provide a valid phone number")
    return v


class SellerRegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: str
    phone: str
    password: str = Field(..., min_length=6)
    store_name: str = Field(..., min_length=2, max_length=100)
    store_description: Optional[str] = Field(None, max_length=500)
    address: SellerAddress
    geo: GeoInput
    service_radius_km: Optional[int] = Field(None, ge=1, le=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _check_phone(v)


class SellerLoginRequest(CamelModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)


class SellerUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[str] = None
    phone: Optional[str] = None
    store_name: Optional[str] = Field(None, min_length=2, max_length=100)
    store_description: Optional[str] = Field(None, max_length=500)
    address: Optional[SellerAddress] = None
    geo: Optional[GeoInput] = None
    service_radius_km: Optional[int] = Field(None, ge=1, le=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _check_phone(v)


class SellerStatusRequest(CamelModel):
    is_approved: Optional[bool] = None
    is_suspended: Optional[bool] = None
