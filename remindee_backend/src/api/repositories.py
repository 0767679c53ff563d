from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Iterable, List, Optional, Sequence

from .codec import RawJSON, parse_situations
from .errors import NotFound
from .models import Situation
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def sort_descending_by_time(situations: Iterable[Situation]) -> List[Situation]:
    """
    Return a new list ordered by scheduled time, latest first.

    Python's sort is stable, so situations sharing an instant keep their
    relative store order.
    """
    return sorted(situations, key=lambda s: s.scheduled_at, reverse=True)


# PUBLIC_INTERFACE
class SituationStore:
    """
    Thread-safe ordered collection of situations keyed by unique id.

    The store never sorts on insert; callers
    invoke `sort()` once they are done inserting.
    """

    def __init__(self, situations: Optional[Iterable[Situation]] = None) -> None:
        self._lock = RLock()
        self._items: List[Situation] = []
        for s in situations or []:
            self.insert(s)

    # -------------------- loading --------------------
    @staticmethod
    def load(raw: RawJSON) -> List[Situation]:
        """Deserialize a stored situations blob. Raises ParseError on shape mismatch."""
        return parse_situations(raw)

    # -------------------- mutation --------------------
    def insert(self, situation: Situation) -> None:
        with self._lock:
            if any(s.id == situation.id for s in self._items):
                raise ValueError(f"Duplicate situation id: {situation.id}")
            self._items.append(situation)

    def replace_by_id(self, situation: Situation) -> Situation:
        """Swap in `situation` for the entry with the same id. Raises NotFound if absent."""
        with self._lock:
            for idx, existing in enumerate(self._items):
                if existing.id == situation.id:
                    self._items[idx] = situation
                    return existing
        raise NotFound(f"Situation {situation.id} not found", detail={"situationId": situation.id})

    def replace_all(self, situations: Sequence[Situation]) -> None:
        """Replace the whole collection; situations absent from `situations` are dropped."""
        seen: Dict[str, Situation] = {}
        for s in situations:
            if s.id in seen:
                raise ValueError(f"Duplicate situation id: {s.id}")
            seen[s.id] = s
        with self._lock:
            self._items = list(situations)

    def sort(self) -> None:
        with self._lock:
            self._items = sort_descending_by_time(self._items)

    # -------------------- queries --------------------
    def get(self, situation_id: str) -> Situation:
        with self._lock:
            for s in self._items:
                if s.id == situation_id:
                    return s
        raise NotFound(f"Situation {situation_id} not found", detail={"situationId": situation_id})

    def snapshot(self) -> List[Situation]:
        """Copy-on-read view in store order. Records are frozen, so a shallow copy suffices."""
        with self._lock:
            return list(self._items)

    def sorted_descending_by_time(self) -> List[Situation]:
        return sort_descending_by_time(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# PUBLIC_INTERFACE
class KeyValueStore(ABC):
    """Abstract get/set store of opaque JSON blobs used for persistence."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under `key`, or None if nothing was written yet."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous blob. Raises PersistenceError on failure."""


class InMemoryKeyValueStore(KeyValueStore):
    """
    Thread-safe in-memory blob store suitable for testing and default runtime.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = RLock()
        self._blobs: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._blobs.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._blobs[key] = value


# PUBLIC_INTERFACE
def get_kv_store() -> KeyValueStore:
    """
    Factory to return the configured blob store based on settings.
    - memory: InMemoryKeyValueStore
    - sqlite: SQLiteKeyValueStore
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteKeyValueStore

        logger.info("Using SQLite blob store at %s", settings.sqlite_db_path)
        return SQLiteKeyValueStore(settings.sqlite_db_path)
    return InMemoryKeyValueStore()
