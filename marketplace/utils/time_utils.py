"""
marketplace/utils/time_utils.py

Purpose: Time and expiry helpers

- Token and reset-link expiry checks
- Analytics period windows
- Millisecond timestamps for order numbers
"""

from datetime import datetime, timedelta
from typing import Optional

from marketplace.utils.constants import ANALYTICS_PERIODS


def utcnow() -> datetime:
    # Naive UTC, matching what pymongo returns without tz_aware
    return datetime.utcnow()


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Checks whether an expiry timestamp has passed. Missing timestamps count as expired.
    """
    if not expires_at:
        return True
    return (now or utcnow()) > expires_at


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """
    Start of an analytics window. Unknown periods fall back to 30 days.
    """
    days = ANALYTICS_PERIODS.get(period, ANALYTICS_PERIODS["30d"])
    return (now or utcnow()) - timedelta(days=days)


def timestamp_ms(now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    return int((now - datetime(1970, 1, 1)).total_seconds() * 1000)


def format_timestamp(dt: Optional[datetime], format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """
    Formats a datetime object to string.
    """
    if not dt:
        return "N/A"
    return dt.strftime(format_str)
