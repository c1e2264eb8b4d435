"""
MonthKey helpers.

A MonthKey is the canonical "YYYY-MM" string for a calendar month. Keys are
plain strings so they sort chronologically and serialize as-is; these
helpers validate them and convert to and from datetimes.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timezone

from cadence.errors import ValidationError

MonthKey = str

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month_key(key: str) -> tuple[int, int]:
    """Return (year, month) for a "YYYY-MM" key.

    Raises:
        ValidationError: If the key is not a well-formed month key
    """
    match = _MONTH_KEY_RE.match(key or "")
    if not match:
        raise ValidationError(f"Malformed month key: {key!r} (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise ValidationError(f"Malformed month key: {key!r} (month out of range)")
    return year, month


def validate_month_key(key: str) -> MonthKey:
    parse_month_key(key)
    return key


def naive_utc(value: datetime) -> datetime:
    """Timezone-aware datetimes become naive UTC; naive ones pass through.

    The engine compares dates against naive month bounds, so every stored
    instant is naive.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=None)
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def month_key_for(value: date | datetime) -> MonthKey:
    return f"{value.year:04d}-{value.month:02d}"


def month_index(key: str) -> int:
    """Absolute month number, used for anchor arithmetic."""
    year, month = parse_month_key(key)
    return year * 12 + (month - 1)


def shift_month(key: str, months: int) -> MonthKey:
    index = month_index(key) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def days_in_month(key: str) -> int:
    year, month = parse_month_key(key)
    return calendar.monthrange(year, month)[1]


def month_start(key: str) -> datetime:
    """First instant of the month."""
    year, month = parse_month_key(key)
    return datetime(year, month, 1)


def month_end(key: str) -> datetime:
    """Last instant of the month."""
    year, month = parse_month_key(key)
    return datetime(year, month, days_in_month(key), 23, 59, 59, 999999)


__all__ = [
    "MonthKey",
    "parse_month_key",
    "validate_month_key",
    "month_key_for",
    "month_index",
    "shift_month",
    "days_in_month",
    "month_start",
    "month_end",
    "naive_utc",
]
