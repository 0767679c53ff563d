from __future__ import annotations

import re
from threading import RLock
from typing import Dict, Iterable, Iterator, Optional

from .models import Situation

SITUATION = "situation"
TODO = "todo"
SUB_TODO = "subtodo"

PREFIXES: Dict[str, str] = {
    SITUATION: "s",
    TODO: "t",
    SUB_TODO: "st",
}

_ID_RE = re.compile(r"^(st|s|t)(\d+)$")


# PUBLIC_INTERFACE
class IdGenerator:
    """
    Issues ids of the form '{prefix}{n}'.

    A single counter is shared by every kind, so 's1', 't2', 'st3' can never
    collide. The generator is passed explicitly to whatever needs fresh ids;
    `seed_from` advances the counter past ids found in loaded state.
    """

    def __init__(self, start: int = 1) -> None:
        self._lock = RLock()
        self._next = max(start, 1)

    @property
    def peek(self) -> int:
        """The number the next call to `next` will use."""
        with self._lock:
            return self._next

    def next(self, kind: str) -> str:
        try:
            prefix = PREFIXES[kind]
        except KeyError:
            raise ValueError(f"Unknown id kind: {kind!r}") from None
        with self._lock:
            n = self._next
            self._next += 1
        return f"{prefix}{n}"

    def situation_id(self) -> str:
        return self.next(SITUATION)

    def todo_id(self) -> str:
        return self.next(TODO)

    def sub_todo_id(self) -> str:
        return self.next(SUB_TODO)

    def seed(self, highest_seen: int) -> None:
        """Ensure the counter is strictly above `highest_seen`. Never moves backwards."""
        with self._lock:
            if highest_seen >= self._next:
                self._next = highest_seen + 1

    def seed_from_ids(self, values: Iterable[Optional[str]]) -> int:
        """
        Seed from explicit id strings, e.g. ids a client supplied for new items.

        None and ids that do not follow the generated pattern are ignored.
        Returns the highest number found, 0 if none.
        """
        highest = max((_id_number(v) or 0 for v in values if v), default=0)
        self.seed(highest)
        return highest

    def seed_from(self, situations: Iterable[Situation]) -> int:
        """
        Seed from every generated id in `situations` (situations, todos, sub-todos).

        Ids that do not follow the generated pattern (imported or hand-written)
        are ignored. Returns the highest number found, 0 if none.
        """
        return self.seed_from_ids(_situation_ids(situations))


def _situation_ids(situations: Iterable[Situation]) -> Iterator[str]:
    for situation in situations:
        yield situation.id
        for todo in situation.todos:
            yield todo.id
            for sub in todo.sub_todos:
                yield sub.id


def _id_number(value: str) -> Optional[int]:
    match = _ID_RE.match(value)
    return int(match.group(2)) if match else None
