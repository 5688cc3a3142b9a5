"""
marketplace/utils/serialization.py

Purpose: Mongo document <-> JSON helpers

- ObjectId parsing with a CastError on bad input
- Recursive conversion of ObjectId/datetime for JSON responses
- Stripping credentials before documents leave the API
"""

from datetime import datetime
from typing import Any, Iterable, List, Optional

from bson import ObjectId

from marketplace.core.exceptions import CastError

PRIVATE_FIELDS = ("password", "refresh_tokens", "reset_password_token", "reset_password_expire")


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, ObjectId) or (isinstance(value, str) and ObjectId.is_valid(value))


def to_object_id(value: Any, path: str = "_id") -> ObjectId:
    """
    Converts a string to ObjectId.

    Raises:
        CastError: If the value is not a valid ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise CastError(path, value)


def to_object_ids(values: Iterable[Any], path: str = "_id") -> List[ObjectId]:
    return [to_object_id(v, path) for v in values]


def serialize(value: Any) -> Any:
    """Recursively makes a Mongo value JSON friendly."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


def public_document(doc: Optional[dict], hidden: Iterable[str] = PRIVATE_FIELDS) -> Optional[dict]:
    """
    Serializes a user or seller document without credentials.
    """
    if doc is None:
        return None
    cleaned = {k: v for k, v in doc.items() if k not in hidden}
    return serialize(cleaned)
