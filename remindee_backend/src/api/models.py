from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from .utils import ensure_aware, format_instant

DEFAULT_TODO_COLOR = "#ffffff"
DEFAULT_WEATHER = "sunny"
TODO_COLORS = ("#ffffff", "#e3f2fd", "#e8f5e8", "#fff3e0", "#ffebee", "#f3e5f5", "#e0f2f1")


class _Record(BaseModel):
    """
    Base for every persisted record.

    Attributes are snake_case in Python and camelCase on the wire
    (isPinned, backgroundColor, subTodos...). Records are frozen; every
    mutation produces a copy through `model_copy(update=...)`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# PUBLIC_INTERFACE
class SubTodo(_Record):
    """
    A leaf checklist item owned by exactly one Todo.

    Fields:
    - id: Generated id ('st' prefix)
    - title: Free text, may be empty while being edited
    - completed: Completion flag
    - is_pinned: Carried over when the parent situation is restored from a template
    """

    id: str
    title: str
    completed: bool
    is_pinned: bool


# PUBLIC_INTERFACE
class Todo(_Record):
    """
    A checklist item owned by exactly one Situation.

    `sub_todos` keeps insertion order through every transform.
    """

    id: str
    title: str
    completed: bool
    background_color: str
    sub_todos: List[SubTodo]
    is_pinned: bool


# PUBLIC_INTERFACE
class Situation(_Record):
    """
    An expected context anchored at an instant, e.g. "office at 15:00".

    Fields:
    - id: Generated id ('s' prefix), unique within the store
    - title: Name of the context; also the template key
    - detail / location / weather: Free text passed through untouched
    - scheduled_at: The instant (wire name 'datetime'); not unique
    - todos: Ordered checklist
    - is_predicted: Marks situations proposed rather than entered by the user
    """

    id: str
    title: str
    detail: str
    location: str
    weather: str
    scheduled_at: datetime = Field(..., alias="datetime")
    todos: List[Todo]
    is_predicted: bool = False

    @field_validator("scheduled_at", mode="after")
    @classmethod
    def _aware_scheduled_at(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_serializer("scheduled_at", when_used="json")
    def _serialize_scheduled_at(self, v: datetime) -> str:
        return format_instant(v)


# PUBLIC_INTERFACE
class TemplateEntry(Situation):
    """
    The most recent situation for a given title plus a usage counter.

    Derived from the store by the template synthesizer; never edited in place.
    """

    count: int = Field(..., ge=1)
    last_used: datetime

    @field_validator("last_used", mode="after")
    @classmethod
    def _aware_last_used(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_serializer("last_used", when_used="json")
    def _serialize_last_used(self, v: datetime) -> str:
        return format_instant(v)


# PUBLIC_INTERFACE
class UnfinishedItem(_Record):
    """One row of the review list: an open todo or sub-todo from a concluded situation."""

    todo: Union[Todo, SubTodo]
    situation_title: str
    situation_id: str
    background_color: str
    is_sub_todo: bool = False
    parent_todo_id: Optional[str] = None


# PUBLIC_INTERFACE
class RestoredSituation(_Record):
    """Fields used to pre-populate a new situation from a template."""

    title: str
    detail: str = ""
    location: str = ""
    todos: List[Todo] = Field(default_factory=list)
