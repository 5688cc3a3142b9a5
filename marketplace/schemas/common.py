"""
marketplace/schemas/common.py

Purpose: Shared request schema pieces

- camelCase aliases on the wire, snake_case inside the service layer
- Email / ObjectId field validators
"""

from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from marketplace.utils.validation_utils import validate_email


class CamelModel(BaseModel):
    """
    Accepts both `storeName` and `store_name`; dumps snake_case.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True


def check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not validate_email(value):
        raise ValueError("Please provide a valid email")
    return value.lower()
