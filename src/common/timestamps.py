"""Timestamp helpers for registry release times."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

_FRACTION = re.compile(r"\.(\d+)")


def parse_iso8601(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Accepts a trailing 'Z', explicit offsets, naive values (read as UTC) and
    fractional seconds of any precision.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat accepts at most microsecond precision on older interpreters
    text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def from_epoch_ms(timestamp_ms) -> Optional[datetime]:
    """Convert epoch milliseconds into an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(int(timestamp_ms) / 1000.0, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        return None


def to_rfc3339(value: datetime) -> str:
    """Render an aware datetime as RFC 3339 UTC with a 'Z' suffix."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def age_of(released_at: datetime, now: datetime) -> timedelta:
    """Return how long ago released_at was, never negative."""
    age = now - released_at
    return age if age > timedelta(0) else timedelta(0)
