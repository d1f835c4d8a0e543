"""UTC time helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def issued_marker() -> str:
    """Return the presence marker stored alongside a freshly issued token."""
    return utc_now().isoformat().replace("+00:00", "Z")
