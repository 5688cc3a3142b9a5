"""
marketplace/api/forms.py

Purpose: Product payload parsing

Product endpoints accept either a JSON body or a multipart form with image
files. In multipart forms, structured fields arrive as JSON strings and are
decoded before validation.
"""

import json
from typing import Any, Dict, List, Tuple, Type

from fastapi import Request
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from marketplace.core.exceptions import BadRequestError

JSON_FORM_FIELDS = (
    "deliveryOptions", "delivery_options",
    "inventory", "tags", "specifications", "images",
    "shipping", "seo", "variants",
)
IGNORED_FORM_FIELDS = ("imagesMeta",)


def decode_form_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decodes JSON-string fields in place. Empty strings are treated as absent.

    Raises:
        BadRequestError: "Invalid <field> format" for malformed JSON
    """
    decoded = {}
    for key, value in fields.items():
        if key in IGNORED_FORM_FIELDS or value == "":
            continue
        if key in JSON_FORM_FIELDS and isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                raise BadRequestError(f"Invalid {key} format")
        decoded[key] = value
    return decoded


async def read_product_payload(request: Request, model: Type[BaseModel]) -> Tuple[Dict[str, Any], List[UploadFile]]:
    """
    Returns the validated fields (snake_case) and any uploaded image files.
    """
    files: List[UploadFile] = []
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        fields: Dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if value.filename:
                    files.append(value)
            else:
                fields[key] = value
        raw = decode_form_fields(fields)
    else:
        try:
            raw = await request.json()
        except ValueError:
            raise BadRequestError("Invalid JSON body")
        if not isinstance(raw, dict):
            raise BadRequestError("Request body must be a JSON object")

    payload = model.model_validate(raw)
    return payload.model_dump(exclude_unset=True), files
