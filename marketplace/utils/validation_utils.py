"""
marketplace/utils/validation_utils.py

Purpose: Input validation

- Email and phone regex checks
- GeoJSON coordinate validation
- Slug generation and regex escaping for search input
"""

import re
from typing import Optional, Sequence

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
PHONE_PATTERN = re.compile(r"^[+]?[1-9][\d]{0,15}$")


def validate_email(email: Optional[str]) -> bool:
    """
    Validates email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid, False otherwise
    """
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def validate_phone(phone: Optional[str]) -> bool:
    """
    Validates an international phone number (optional leading +, up to 16 digits).
    """
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone.strip()))


def validate_coordinates(coordinates: Sequence[float]) -> bool:
    """
    Checks a GeoJSON [longitude, latitude] pair.
    """
    if coordinates is None or len(coordinates) != 2:
        return False
    lng, lat = coordinates
    try:
        return -180 <= float(lng) <= 180 and -90 <= float(lat) <= 90
    except (TypeError, ValueError):
        return False


def slugify(text: str) -> str:
    """
    Lowercases, drops characters outside [a-z0-9 -], turns spaces into dashes
    and collapses repeated dashes.

    Example: "Fresh Mangoes!! (1 kg)" -> "fresh-mangoes-1-kg"
    """
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9 -]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def regex_search(term: str) -> dict:
    """Case-insensitive `$regex` clause for a user supplied search term."""
    return {"$regex": re.escape(term.strip()), "$options": "i"}
