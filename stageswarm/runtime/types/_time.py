"""Time helpers shared by the serdes functions in this package.

Timestamps are stored as timezone-aware UTC datetimes and serialized as
ISO-8601 strings with a ``Z`` suffix.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def _datetime_to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Render a datetime as ISO-8601 with a ``Z`` suffix."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat() + "Z"


def _iso_to_datetime(iso_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix optional) into an aware UTC datetime."""
    if iso_str is None:
        return None
    if iso_str.endswith("Z"):
        iso_str = iso_str[:-1]
    parsed = datetime.fromisoformat(iso_str)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
