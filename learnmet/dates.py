"""Lenient date parsing for records that arrive from loosely typed stores."""

from datetime import date, datetime, time, timezone
from typing import Any, Optional


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce ``value`` to a ``datetime``.

    Accepts datetimes, dates (midnight) and ISO 8601 strings. Anything else,
    including empty or malformed strings, returns ``None`` so callers can skip
    the record.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_utc(value: Any) -> Optional[datetime]:
    parsed = parse_datetime(value)
    return to_utc(parsed) if parsed is not None else None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
