from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from .models import Situation
from .repositories import sort_descending_by_time
from .utils import ensure_aware


# PUBLIC_INTERFACE
def resolve_current(situations: Sequence[Situation], now: datetime) -> Optional[Situation]:
    """
    Return the most recent situation that has already started, or None.

    A situation has started when its instant is at or before `now`. Among
    equal instants the first in store order wins. Nothing is cached: `now`
    moves on between calls.
    """
    now = ensure_aware(now)
    started = [s for s in situations if s.scheduled_at <= now]
    if not started:
        return None
    return sort_descending_by_time(started)[0]


# PUBLIC_INTERFACE
def resolve_current_id(situations: Sequence[Situation], now: datetime) -> Optional[str]:
    """Id of the current situation, see `resolve_current`."""
    current = resolve_current(situations, now)
    return current.id if current is not None else None
