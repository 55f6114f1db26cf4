"""Shared helpers for resilinked."""

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil.parser import isoparse


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO datetime string (or pass a datetime through).

    PostgREST trims trailing zeros from fractional seconds, which
    datetime.fromisoformat rejects before Python 3.11.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(isoparse(str(value)))
