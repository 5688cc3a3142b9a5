"""
marketplace/services/auth_service.py

Purpose: Account authentication and session lifecycle

- Registration, login and logout for users
- Refresh token rotation (shared with sellers)
- Password change and reset flow
"""

from typing import Any, Dict, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection

from marketplace.core.exceptions import AuthenticationError, BadRequestError, ResourceNotFoundError
from marketplace.core.logging import get_logger, LogContext
from marketplace.core.security import (
    create_token_pair,
    decode_refresh_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    rotate_refresh_tokens,
    verify_password,
)
from marketplace.db.mongo import get_users_collection, get_sellers_collection
from marketplace.models.user import new_user_document
from marketplace.utils.constants import (
    ACCOUNT_SUSPENDED_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    INVALID_REFRESH_TOKEN_MESSAGE,
    ROLE_SELLER,
)
from marketplace.utils.serialization import is_valid_object_id, to_object_id
from marketplace.utils.time_utils import utcnow

logger = get_logger(__name__)

TokenResult = Tuple[Dict[str, Any], str, str]


async def issue_tokens(collection: AsyncIOMotorCollection, principal: Dict[str, Any],
                       old_token: Optional[str] = None, touch_login: bool = True) -> Tuple[str, str]:
    """
    Signs a new access/refresh pair and stores the refresh token.

    The stored list drops `old_token` when rotating and is trimmed to the most
    recent MAX_REFRESH_TOKENS entries. It is written back with a single `$set`.
    """
    role = principal.get("role")
    access_token, refresh_token = create_token_pair(principal["_id"], role)
    tokens = rotate_refresh_tokens(principal.get("refresh_tokens"), refresh_token, old_token=old_token)

    changes: Dict[str, Any] = {"refresh_tokens": tokens}
    if touch_login:
        changes["last_login"] = utcnow()
    await collection.update_one({"_id": principal["_id"]}, {"$set": changes})

    principal.update(changes)
    return access_token, refresh_token


async def authenticate(collection: AsyncIOMotorCollection, email: str, password: str) -> Dict[str, Any]:
    """
    Checks credentials against a users or sellers collection.

    Raises:
        AuthenticationError: Unknown email, wrong password or suspended account
    """
    principal = await collection.find_one({"email": email.lower()})
    if not principal or not verify_password(password, principal.get("password")):
        logger.info("Failed login attempt", extra={"email": email})
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
    if principal.get("is_suspended"):
        raise AuthenticationError(ACCOUNT_SUSPENDED_MESSAGE)
    return principal


async def register_user(name: str, email: str, password: str, role: str) -> TokenResult:
    users = get_users_collection()
    if await users.find_one({"email": email.lower()}):
        raise BadRequestError("User already exists with this email")

    user = new_user_document(name, email, hash_password(password), role)
    result = await users.insert_one(user)
    user["_id"] = result.inserted_id

    with LogContext(user_id=str(user["_id"]), role=role):
        logger.info("User registered")

    access_token, refresh_token = await issue_tokens(users, user)
    return user, access_token, refresh_token


async def login_user(email: str, password: str) -> TokenResult:
    users = get_users_collection()
    user = await authenticate(users, email, password)
    access_token, refresh_token = await issue_tokens(users, user)
    with LogContext(user_id=str(user["_id"]), role=user.get("role")):
        logger.info("User logged in")
    return user, access_token, refresh_token


async def _find_refresh_owner(principal_id: str) -> Tuple[Optional[AsyncIOMotorCollection], Optional[Dict[str, Any]]]:
    if not is_valid_object_id(principal_id):
        return None, None
    oid = to_object_id(principal_id)
    users = get_users_collection()
    user = await users.find_one({"_id": oid})
    if user:
        return users, user
    sellers = get_sellers_collection()
    seller = await sellers.find_one({"_id": oid})
    if seller:
        seller["role"] = ROLE_SELLER
        return sellers, seller
    return None, None


async def refresh_session(refresh_token: Optional[str]) -> TokenResult:
    """
    Exchanges a refresh token for a new pair.

    Raises:
        AuthenticationError: Missing token, unknown account or token not on file
        JWTError / ExpiredSignatureError: Bad signature or expired token
    """
    if not refresh_token:
        raise AuthenticationError("Refresh token is required")

    payload = decode_refresh_token(refresh_token)

    collection, principal = await _find_refresh_owner(payload.get("id"))
    if principal is None:
        raise AuthenticationError(INVALID_REFRESH_TOKEN_MESSAGE)
    if refresh_token not in (principal.get("refresh_tokens") or []):
        logger.warning("Refresh token not on file", extra={"user_id": str(principal["_id"])})
        raise AuthenticationError(INVALID_REFRESH_TOKEN_MESSAGE)
    if principal.get("is_suspended"):
        raise AuthenticationError(ACCOUNT_SUSPENDED_MESSAGE)

    access_token, new_refresh = await issue_tokens(collection, principal, old_token=refresh_token, touch_login=False)
    return principal, access_token, new_refresh


async def revoke_refresh_token(collection: AsyncIOMotorCollection, principal_id, refresh_token: Optional[str]):
    if refresh_token:
        await collection.update_one({"_id": principal_id}, {"$pull": {"refresh_tokens": refresh_token}})


def principal_collection(principal: Dict[str, Any]) -> AsyncIOMotorCollection:
    """Sellers live in their own collection; everyone else is a user."""
    if principal.get("role") == ROLE_SELLER:
        return get_sellers_collection()
    return get_users_collection()


async def logout_user(user: Dict[str, Any], refresh_token: Optional[str]):
    await revoke_refresh_token(principal_collection(user), user["_id"], refresh_token)
    logger.info("User logged out", extra={"user_id": str(user["_id"])})


async def get_me(user: Dict[str, Any]) -> Dict[str, Any]:
    fresh = await principal_collection(user).find_one({"_id": user["_id"]})
    if fresh is None:
        raise ResourceNotFoundError("User not found")
    if user.get("role") == ROLE_SELLER:
        fresh["role"] = ROLE_SELLER
    return fresh


async def ensure_email_available(collection: AsyncIOMotorCollection, email: str, current_id) -> None:
    existing = await collection.find_one({"email": email.lower(), "_id": {"$ne": current_id}})
    if existing:
        raise BadRequestError("Email is already taken")


async def update_password(user: Dict[str, Any], current_password: str, new_password: str) -> TokenResult:
    users = get_users_collection()
    fresh = await users.find_one({"_id": user["_id"]})
    if not fresh or not verify_password(current_password, fresh.get("password")):
        raise AuthenticationError("Current password is incorrect")

    password_hash = hash_password(new_password)
    await users.update_one({"_id": fresh["_id"]}, {"$set": {"password": password_hash, "updated_at": utcnow()}})
    fresh["password"] = password_hash
    access_token, refresh_token = await issue_tokens(users, fresh)
    return fresh, access_token, refresh_token


async def forgot_password(email: str) -> str:
    """
    Stores the sha256 of a fresh reset token and returns the raw token.
    """
    users = get_users_collection()
    user = await users.find_one({"email": email.lower()})
    if not user:
        raise ResourceNotFoundError("No user found with this email")

    raw, hashed, expires_at = generate_reset_token()
    await users.update_one(
        {"_id": user["_id"]},
        {"$set": {"reset_password_token": hashed, "reset_password_expire": expires_at}}
    )
    logger.info("Password reset requested", extra={"user_id": str(user["_id"])})
    return raw


async def reset_password(raw_token: str, new_password: str) -> TokenResult:
    users = get_users_collection()
    user = await users.find_one({
        "reset_password_token": hash_reset_token(raw_token),
        "reset_password_expire": {"$gt": utcnow()},
    })
    if not user:
        raise BadRequestError("Invalid or expired reset token")

    password_hash = hash_password(new_password)
    await users.update_one(
        {"_id": user["_id"]},
        {"$set": {
            "password": password_hash,
            "reset_password_token": None,
            "reset_password_expire": None,
            "updated_at": utcnow(),
        }}
    )
    user["password"] = password_hash
    access_token, refresh_token = await issue_tokens(users, user)
    return user, access_token, refresh_token
