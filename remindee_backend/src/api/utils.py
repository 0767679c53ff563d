from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Sequence, Union


# PUBLIC_INTERFACE
def pagination_envelope(
    items: Union[Sequence[Any], Iterable[Any]],
    total: int,
    limit: int,
    offset: int,
) -> Dict[str, Any]:
    """
    Build a standard pagination envelope for list endpoints.

    Args:
        items: The list/iterable of items for the current page.
        total: Total number of items available (ignoring pagination).
        limit: The limit used for pagination.
        offset: The offset used for pagination.

    Returns:
        Dict with keys: items, total, limit, offset.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "items": materialized,
        "total": int(total),
        "limit": int(max(limit, 0)),
        "offset": int(max(offset, 0)),
    }


# PUBLIC_INTERFACE
def ensure_aware(value: datetime) -> datetime:
    """
    Return `value` as a timezone-aware datetime.

    Naive datetimes are interpreted as UTC, which matches how the stored
    blobs were written (ISO-8601 with a trailing 'Z').
    """
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# PUBLIC_INTERFACE
def format_instant(value: datetime) -> str:
    """Serialize an instant as UTC ISO-8601 with millisecond precision, e.g. '2025-07-01T10:00:00.000Z'."""
    utc = ensure_aware(value).astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
def utc_now() -> datetime:
    """Sample the real clock. Only the HTTP layer calls this; the engine always receives `now`."""
    return datetime.now(timezone.utc)
