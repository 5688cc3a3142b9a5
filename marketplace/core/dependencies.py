"""
marketplace/core/dependencies.py

Purpose: Authentication guards as FastAPI dependencies

- Reads the JWT from the `token` cookie, then the Bearer header
- Resolves a User principal, falling back to a Seller for seller tokens
- Role checks and an optional-auth variant
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from marketplace.core.exceptions import AuthenticationError, AuthorizationError
from marketplace.core.security import decode_access_token
from marketplace.core.logging import get_logger
from marketplace.db.mongo import get_users_collection, get_sellers_collection
from marketplace.utils.constants import (
    ROLE_SELLER,
    ACCOUNT_SUSPENDED_MESSAGE,
    ROLE_NOT_AUTHORIZED_MESSAGE,
)
from marketplace.utils.serialization import is_valid_object_id, to_object_id

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def extract_token(request: Request, cred: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get("token")
    if token:
        return token
    if cred and cred.scheme.lower() == "bearer":
        return cred.credentials
    return None


async def resolve_principal(payload: dict) -> Optional[dict]:
    """
    Loads the account a token was issued for.
    Users are tried first; seller tokens fall back to the sellers collection.
    """
    principal_id = payload.get("id")
    if not is_valid_object_id(principal_id):
        return None
    oid = to_object_id(principal_id)

    user = await get_users_collection().find_one({"_id": oid})
    if user:
        return user

    if payload.get("role") == ROLE_SELLER:
        seller = await get_sellers_collection().find_one({"_id": oid})
        if seller:
            seller["role"] = ROLE_SELLER
            return seller
    return None


async def get_current_user(
    request: Request,
    cred: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    token = extract_token(request, cred)
    if not token:
        raise AuthenticationError()

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise AuthenticationError()

    principal = await resolve_principal(payload)
    if principal is None:
        raise AuthenticationError()
    if principal.get("is_suspended"):
        raise AuthenticationError(ACCOUNT_SUSPENDED_MESSAGE)

    request.state.user = principal
    return principal


async def get_optional_user(
    request: Request,
    cred: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[dict]:
    """Like get_current_user, but returns None instead of failing."""
    token = extract_token(request, cred)
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except JWTError as e:
        logger.debug(f"Ignoring invalid token in optional auth: {e}")
        return None
    principal = await resolve_principal(payload)
    if principal is None or principal.get("is_suspended"):
        return None
    return principal


def require_roles(*roles: str):
    """
    Dependency factory allowing only the given roles.

    Usage:
        @router.get("/dashboard", dependencies=[Depends(require_roles("admin"))])
    """
    async def checker(user: dict = Depends(get_current_user)) -> dict:
        role = user.get("role")
        if role not in roles:
            raise AuthorizationError(ROLE_NOT_AUTHORIZED_MESSAGE.format(role=role))
        return user

    return checker


async def get_current_seller(user: dict = Depends(get_current_user)) -> dict:
    if user.get("role") != ROLE_SELLER:
        raise AuthorizationError("Access denied. Seller role required.")
    return user


require_admin = require_roles("admin")
require_vendor = require_roles("vendor")
require_vendor_or_admin = require_roles("vendor", "admin")
