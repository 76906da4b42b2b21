"""
Timestamp normalization for the store boundary.

Imported records carry timestamps in several shapes:
- datetime (naive values are taken as UTC)
- ISO-8601 strings ("2025-01-31T10:00:00Z")
- Firestore exports: {"_seconds": ..., "_nanoseconds": ...} or {"seconds": ...}
- objects exposing to_datetime() / toDate()
- epoch seconds (int/float)

Everything is converted to a timezone-aware UTC datetime here, so rule
and lifecycle code only ever sees one type.
"""

from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Normalize a stored timestamp. Returns None for None.

    Raises:
        ValueError: value is not a recognizable timestamp
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _aware(value)
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return _aware(datetime.fromisoformat(text))
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is not None:
            nanos = value.get("_nanoseconds", value.get("nanoseconds", 0)) or 0
            return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
    for method in ("to_datetime", "toDate"):
        converter = getattr(value, method, None)
        if callable(converter):
            return to_datetime(converter())
    raise ValueError(f"Not a timestamp: {value!r}")
