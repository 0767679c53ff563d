from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from .models import Situation, UnfinishedItem
from .resolver import resolve_current_id
from .utils import ensure_aware


# PUBLIC_INTERFACE
def aggregate_unfinished(situations: Sequence[Situation], now: datetime) -> List[UnfinishedItem]:
    """
    Build the review list of open items from situations that have concluded.

    A situation contributes only when it started strictly before `now` and is
    not the current one; current and future situations never contribute.
    Within a contributing situation each open todo is emitted, followed by its
    open sub-todos. Sub-todos are listed even when their parent is completed
    and carry the parent's background color. Output follows store order.
    """
    now = ensure_aware(now)
    current_id = resolve_current_id(situations, now)

    items: List[UnfinishedItem] = []
    for situation in situations:
        if not situation.scheduled_at < now or situation.id == current_id:
            continue
        for todo in situation.todos:
            if not todo.completed:
                items.append(
                    UnfinishedItem(
                        todo=todo,
                        situation_title=situation.title,
                        situation_id=situation.id,
                        background_color=todo.background_color,
                    )
                )
            for sub in todo.sub_todos:
                if not sub.completed:
                    items.append(
                        UnfinishedItem(
                            todo=sub,
                            situation_title=situation.title,
                            situation_id=situation.id,
                            background_color=todo.background_color,
                            is_sub_todo=True,
                            parent_todo_id=todo.id,
                        )
                    )
    return items
