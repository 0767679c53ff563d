"""
Application service: owns the situation store, applies edits and keeps the
two persisted blobs in sync.

Reads hand the engine a snapshot of the store taken under the lock, so a
concurrent writer never changes a list while it is being scanned. Every
mutation re-sorts the store (latest first), then writes the situations blob
and, only once that succeeded, the regenerated past situations blob.
"""
from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import List, Optional

from .aggregator import aggregate_unfinished
from .codec import RawJSON, dump_situations, dump_templates, parse_situations
from .commands import AddSubTodo, AddTodo, Command, apply_command
from .errors import NotFound, ParseError, PersistenceError
from .ids import IdGenerator
from .models import DEFAULT_TODO_COLOR, RestoredSituation, Situation, SubTodo, TemplateEntry, Todo, UnfinishedItem
from .repositories import KeyValueStore, SituationStore, get_kv_store
from .resolver import resolve_current
from .restore import blank_sub_todo, blank_todo, restore as restore_pinned
from .schemas import SituationCreate, SubTodoIn, TodoIn
from .settings import get_settings
from .templates import quick_picks as pick_templates, synthesize, template_list

logger = logging.getLogger(__name__)

SITUATIONS_KEY = "remindee_situations"
PAST_SITUATIONS_KEY = "reminderPastSituations"


# PUBLIC_INTERFACE
class SituationService:
    """
    Facade used by the HTTP layer.

    Args:
        kv: Blob store holding the persisted situations and templates.
        ids: Id source shared by every entity kind.
        seed_ids: Advance `ids` past every id found by `load`/`import_json`.
            When False the counter restarts at 1 in every process and ids
            can repeat across restarts.
        quick_pick_limit: Number of templates returned by `quick_picks`.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        ids: Optional[IdGenerator] = None,
        seed_ids: bool = True,
        quick_pick_limit: int = 4,
    ) -> None:
        self._lock = RLock()
        self.kv = kv
        self.ids = ids or IdGenerator()
        self.seed_ids = seed_ids
        self.quick_pick_limit = quick_pick_limit
        self.store = SituationStore()

    # -------------------- loading --------------------
    def load(self) -> int:
        """
        Read the situations blob into the store and return how many were loaded.

        A blob that fails to parse is logged and treated as an empty store;
        it is left untouched in the blob store until the next write.
        """
        raw = self.kv.get(SITUATIONS_KEY)
        situations: List[Situation] = []
        if raw is not None:
            try:
                situations = SituationStore.load(raw)
            except ParseError as e:
                logger.warning("Stored situations are unreadable, starting empty: %s", e.message)
        with self._lock:
            self.store.replace_all(situations)
            if self.seed_ids:
                highest = self.ids.seed_from(situations)
                logger.debug("Id counter seeded past %d", highest)
        logger.info("Loaded %d situation(s); next id number is %d", len(situations), self.ids.peek)
        return len(situations)

    # -------------------- persistence --------------------
    def _persist(self) -> None:
        snapshot = self.store.snapshot()
        try:
            self.kv.set(SITUATIONS_KEY, dump_situations(snapshot))
            self.kv.set(PAST_SITUATIONS_KEY, dump_templates(template_list(snapshot)))
        except PersistenceError:
            logger.error("Failed to persist %d situation(s)", len(snapshot))
            raise

    # -------------------- queries --------------------
    def list_situations(self) -> List[Situation]:
        return self.store.snapshot()

    def get_situation(self, situation_id: str) -> Situation:
        return self.store.get(situation_id)

    def current_situation(self, now: datetime) -> Optional[Situation]:
        return resolve_current(self.store.snapshot(), now)

    def unfinished(self, now: datetime) -> List[UnfinishedItem]:
        return aggregate_unfinished(self.store.snapshot(), now)

    def templates(self) -> List[TemplateEntry]:
        return template_list(self.store.snapshot())

    def quick_picks(self) -> List[TemplateEntry]:
        return pick_templates(self.store.snapshot(), self.quick_pick_limit)

    def restore(self, title: str) -> RestoredSituation:
        """
        Pre-populate a new situation from the latest situation titled `title`.

        When nothing was pinned, a single blank todo is substituted so the
        new situation always starts with one editable row.
        """
        template = synthesize(self.store.snapshot()).get(title)
        if template is None:
            raise NotFound(f"No past situation titled {title!r}", detail={"title": title})
        restored = restore_pinned(template, self.ids)
        if not restored.todos:
            restored = restored.model_copy(update={"todos": [blank_todo(self.ids)]})
        return restored

    # -------------------- mutation --------------------
    def _todo_from(self, data: TodoIn) -> Todo:
        return Todo(
            id=data.id or self.ids.todo_id(),
            title=data.title,
            completed=data.completed,
            background_color=data.background_color,
            sub_todos=[self._sub_todo_from(st) for st in data.sub_todos],
            is_pinned=data.is_pinned,
        )

    def _sub_todo_from(self, data: SubTodoIn) -> SubTodo:
        return SubTodo(
            id=data.id or self.ids.sub_todo_id(),
            title=data.title,
            completed=data.completed,
            is_pinned=data.is_pinned,
        )

    def _situation_from(self, situation_id: str, data: SituationCreate, default_at: datetime) -> Situation:
        return Situation(
            id=situation_id,
            title=data.title,
            detail=data.detail,
            location=data.location,
            weather=data.weather,
            scheduled_at=data.scheduled_at or default_at,
            todos=[self._todo_from(t) for t in data.todos],
            is_predicted=data.is_predicted,
        )

    def create_situation(self, data: SituationCreate, now: datetime) -> Situation:
        """
        Insert a new situation. `now` is used when the payload has no instant.

        Todo and sub-todo ids supplied by the client are kept; the id counter is
        moved past them before any id is generated, so later ids never repeat them.
        """
        with self._lock:
            self.ids.seed_from_ids(data.given_ids())
            situation = self._situation_from(self.ids.situation_id(), data, now)
            self.store.insert(situation)
            self.store.sort()
            self._persist()
        logger.info("Created situation %s (%s)", situation.id, situation.title)
        return situation

    def replace_situation(self, situation_id: str, data: SituationCreate) -> Situation:
        """
        Replace every field of an existing situation, keeping its instant when
        the payload has none. Raises NotFound if absent.
        """
        with self._lock:
            existing = self.store.get(situation_id)
            self.ids.seed_from_ids(data.given_ids())
            situation = self._situation_from(situation_id, data, existing.scheduled_at)
            self.store.replace_by_id(situation)
            self.store.sort()
            self._persist()
        return situation

    def dispatch(self, command: Command) -> Situation:
        """Apply an edit command and return the edited situation."""
        with self._lock:
            try:
                updated = apply_command(self.store.snapshot(), command)
            except NotFound as e:
                logger.info("%s rejected: %s", type(command).__name__, e.message)
                raise
            self.store.replace_all(updated)
            self.store.sort()
            self._persist()
            return self.store.get(command.situation_id)

    def add_todo(self, situation_id: str, title: str = "", background_color: Optional[str] = None) -> Situation:
        todo = blank_todo(self.ids, title, background_color or DEFAULT_TODO_COLOR)
        return self.dispatch(AddTodo(situation_id=situation_id, todo=todo))

    def add_sub_todo(self, situation_id: str, todo_id: str, title: str = "") -> Situation:
        return self.dispatch(AddSubTodo(situation_id=situation_id, todo_id=todo_id, sub_todo=blank_sub_todo(self.ids, title)))

    # -------------------- import / export --------------------
    def export_json(self) -> str:
        return dump_situations(self.store.snapshot())

    def import_json(self, raw: RawJSON) -> int:
        """
        Replace the whole store with the situations in `raw`.

        Raises ParseError and leaves the store untouched when `raw` is invalid.
        """
        situations = parse_situations(raw)
        with self._lock:
            self.store.replace_all(situations)
            if self.seed_ids:
                self.ids.seed_from(situations)
            self._persist()
        logger.info("Imported %d situation(s)", len(situations))
        return len(situations)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_service() -> SituationService:
    """
    Return the process-wide service, built from settings and loaded on first use.
    """
    settings = get_settings()
    service = SituationService(
        get_kv_store(),
        IdGenerator(),
        seed_ids=settings.seed_ids_from_state,
        quick_pick_limit=settings.quick_pick_limit,
    )
    service.load()
    return service
