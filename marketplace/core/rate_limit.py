"""
marketplace/core/rate_limit.py

Purpose: Sliding-window rate limiting for auth endpoints

- In-memory, per process
- Keyed by client IP plus an optional identifier (e.g. email)
- Disabled unless RATE_LIMIT_ENABLED is set
"""

import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from fastapi import Request

from marketplace.core.config import settings
from marketplace.core.exceptions import RateLimitError
from marketplace.core.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Tracks attempt timestamps per key and rejects once `max_attempts`
    fall within the last `window_seconds`.
    """

    def __init__(self, max_attempts: int, window_seconds: int, enabled: bool = True):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.enabled = enabled
        self._attempts: Dict[str, Deque[float]] = defaultdict(deque)

    def __len__(self) -> int:
        """Number of keys with attempts inside the window."""
        return len(self._attempts)

    def _prune(self, key: str, now: float) -> Deque[float]:
        attempts = self._attempts.get(key)
        if attempts is None:
            return deque()
        while attempts and now - attempts[0] >= self.window_seconds:
            attempts.popleft()
        if not attempts:
            del self._attempts[key]
        return attempts

    def hit(self, key: str, now: Optional[float] = None) -> bool:
        """
        Records an attempt.

        Returns:
            True if allowed, False if the key is over its limit
        """
        if not self.enabled:
            return True
        now = time.monotonic() if now is None else now
        if len(self._prune(key, now)) >= self.max_attempts:
            return False
        self._attempts[key].append(now)
        return True

    def remaining(self, key: str, now: Optional[float] = None) -> int:
        now = time.monotonic() if now is None else now
        return max(0, self.max_attempts - len(self._prune(key, now)))

    def reset(self, key: Optional[str] = None):
        if key is None:
            self._attempts.clear()
        else:
            self._attempts.pop(key, None)


auth_limiter = RateLimiter(
    max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def limit_auth_attempts(request: Request):
    """
    Dependency applied to the auth routers.
    """
    client = request.client.host if request.client else "unknown"
    key = f"{client}:{request.url.path}"
    if not auth_limiter.hit(key):
        logger.warning(f"Rate limit exceeded for {key}")
        raise RateLimitError()
