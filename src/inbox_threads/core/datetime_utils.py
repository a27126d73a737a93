"""Datetime helpers shared across the application."""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Final, Literal

__all__ = [
    "INVALID_TIMESTAMP",
    "InvalidTimestamp",
    "ensure_utc",
    "parse_timestamp",
    "serialize_datetime",
    "utc_now",
]


class InvalidTimestamp(enum.Enum):
    """Marker returned when a timestamp cannot be parsed."""

    INVALID = "invalid"


INVALID_TIMESTAMP: Final = InvalidTimestamp.INVALID


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC, treating naive values as already UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def serialize_datetime(value: datetime | None) -> str | None:
    """Serialise ``value`` to ISO 8601 in UTC."""
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def parse_timestamp(
    raw: object,
) -> datetime | Literal[InvalidTimestamp.INVALID]:
    """Parse an upstream timestamp into an aware UTC ``datetime``.

    Accepts ``datetime`` instances, ISO 8601 strings (including a trailing
    ``Z``), RFC 2822 date strings and numbers holding epoch milliseconds.
    Anything else yields :data:`INVALID_TIMESTAMP` instead of raising.
    """
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, bool):
        return INVALID_TIMESTAMP
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return INVALID_TIMESTAMP
    if not isinstance(raw, str):
        return INVALID_TIMESTAMP

    text = raw.strip()
    if not text:
        return INVALID_TIMESTAMP
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return ensure_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return INVALID_TIMESTAMP
