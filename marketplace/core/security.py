"""
marketplace/core/security.py

Purpose: Credentials and tokens

- bcrypt password hashing via passlib
- Access / refresh JWT signing and verification
- Refresh token list rotation (bounded)
- Password reset token generation
"""

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from jose import jwt
from passlib.context import CryptContext

from marketplace.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def _encode(claims: Dict[str, Any], secret: str, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    now = datetime.utcnow()
    to_encode["iat"] = now
    to_encode["exp"] = now + expires_delta
    # jti keeps two tokens minted in the same second distinct
    to_encode["jti"] = uuid.uuid4().hex
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(principal_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        {"id": str(principal_id), "role": role},
        settings.JWT_SECRET,
        expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    )


def create_refresh_token(principal_id: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        {"id": str(principal_id), "type": "refresh"},
        settings.JWT_REFRESH_SECRET,
        expires_delta or timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
    )


def create_token_pair(principal_id: str, role: str) -> Tuple[str, str]:
    return create_access_token(principal_id, role), create_refresh_token(principal_id)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Raises:
        JWTError / ExpiredSignatureError: If the token is invalid or expired
    """
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.JWT_REFRESH_SECRET, algorithms=[settings.JWT_ALGORITHM])


def rotate_refresh_tokens(
    tokens: Optional[List[str]],
    new_token: str,
    old_token: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[str]:
    """
    Drops `old_token` (if given), appends `new_token` and keeps only the most recent `limit` entries.

    Args:
        tokens: Currently stored refresh tokens, oldest first
        new_token: Freshly issued refresh token
        old_token: Token being exchanged, if this is a rotation
        limit: Maximum list length (defaults to MAX_REFRESH_TOKENS)

    Returns:
        New token list to persist
    """
    limit = limit or settings.MAX_REFRESH_TOKENS
    remaining = [t for t in (tokens or []) if t != old_token]
    remaining.append(new_token)
    return remaining[-limit:]


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str, datetime]:
    """
    Creates a password reset token.

    Returns:
        (raw token for the user, sha256 hash to store, expiry timestamp)
    """
    raw = secrets.token_hex(20)
    expires_at = datetime.utcnow() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    return raw, hash_reset_token(raw), expires_at
