"""
marketplace/api/common.py

Purpose: Response helpers shared by the routers

- `{success: true, ...}` envelopes with JSON-safe Mongo values
- Paginated envelopes
- Token responses that also set the auth cookie
"""

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

from marketplace.core.config import settings
from marketplace.schemas.response import Pagination
from marketplace.utils.serialization import public_document, serialize


def ok(data: Any = None, **extra) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = serialize(data)
    body.update({k: serialize(v) for k, v in extra.items()})
    return body


def paginated(items: List[Any], page: int, limit: int, total: int) -> Dict[str, Any]:
    return ok(items, pagination=Pagination.build(page, limit, total).model_dump())


def token_response(principal: Dict[str, Any], access_token: str, refresh_token: str,
                   status_code: int = 200, key: str = "user") -> JSONResponse:
    """
    Returns both tokens in the body and the access token as an httpOnly cookie.
    """
    response = JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "accessToken": access_token,
            "refreshToken": refresh_token,
            key: public_document(principal),
        },
    )
    set_auth_cookie(response, access_token)
    return response


def set_auth_cookie(response: JSONResponse, access_token: str):
    response.set_cookie(
        key="token",
        value=access_token,
        max_age=settings.COOKIE_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_auth_cookies(response: JSONResponse):
    response.delete_cookie("token")
    response.delete_cookie("refreshToken")


def presented_refresh_token(body_token: Optional[str], cookies: Dict[str, str]) -> Optional[str]:
    return body_token or cookies.get("refreshToken")
