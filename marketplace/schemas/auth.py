"""
marketplace/schemas/auth.py

Purpose: Auth and account request schemas
"""

from typing import Optional, Literal

from pydantic import Field, field_validator

from marketplace.schemas.common import CamelModel, check_email


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: str
    password: str = Field(..., min_length=6)
    role: Literal["customer", "vendor"] = "customer"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "password": "secret123",
                "role": "customer"
            }
        }


class LoginRequest(CamelModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class UpdateProfileRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)


class UpdatePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class ForgotPasswordRequest(CamelModel):
    email: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return check_email(v)


class ResetPasswordRequest(CamelModel):
    password: str = Field(..., min_length=6)
