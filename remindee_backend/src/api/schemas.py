from __future__ import annotations

from datetime import datetime
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import DEFAULT_TODO_COLOR, DEFAULT_WEATHER, TODO_COLORS, Situation
from .utils import ensure_aware

_COLOR_DESCRIPTION = f"Row color; the palette offers {', '.join(TODO_COLORS)}, any string is accepted"


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_title(v: Optional[str]) -> Optional[str]:
    """Strip whitespace and enforce 1..200 length."""
    if v is None:
        return v
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


def _aware(v: Optional[datetime]) -> Optional[datetime]:
    return ensure_aware(v) if v is not None else None


# PUBLIC_INTERFACE
class SubTodoIn(_Payload):
    """
    Sub-todo as sent by a client. `id` is kept when given (e.g. from a
    restored template) and generated otherwise.
    """

    id: Optional[str] = Field(default=None, description="Existing id; generated when omitted")
    title: str = Field(default="", description="Sub-todo text")
    completed: bool = Field(default=False, description="Completion flag")
    is_pinned: bool = Field(default=False, description="Carry over when restoring from a template")


# PUBLIC_INTERFACE
class TodoIn(_Payload):
    """Todo as sent by a client; ids are generated where missing."""

    id: Optional[str] = Field(default=None, description="Existing id; generated when omitted")
    title: str = Field(default="", description="Todo text")
    completed: bool = Field(default=False, description="Completion flag")
    background_color: str = Field(default=DEFAULT_TODO_COLOR, description=_COLOR_DESCRIPTION)
    sub_todos: List[SubTodoIn] = Field(default_factory=list, description="Ordered sub-todos")
    is_pinned: bool = Field(default=False, description="Carry over when restoring from a template")


# PUBLIC_INTERFACE
class SituationCreate(_Payload):
    """
    Schema for creating a situation, and for replacing one with PUT.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Office",
                "detail": "Weekly sync",
                "location": "HQ 3F",
                "datetime": "2025-07-01T06:00:00.000Z",
                "todos": [
                    {"title": "Bring laptop", "isPinned": True, "subTodos": [{"title": "Charger", "isPinned": True}]}
                ],
            }
        },
    )

    title: str = Field(..., description="Name of the context", min_length=1, max_length=200)
    detail: str = Field(default="", description="Free-form notes")
    location: str = Field(default="", description="Where the situation takes place")
    weather: str = Field(default=DEFAULT_WEATHER, description="Expected weather keyword")
    scheduled_at: Optional[datetime] = Field(
        default=None,
        alias="datetime",
        description="Instant of the situation (ISO-8601). Defaults to the time of the request",
    )
    todos: List[TodoIn] = Field(default_factory=list, description="Ordered checklist")
    is_predicted: bool = Field(default=False, description="Proposed rather than entered by the user")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if v is None:
            raise ValueError("title is required")
        return _validate_title(v)

    @field_validator("detail")
    @classmethod
    def strip_detail(cls, v: str) -> str:
        return v.strip()

    @field_validator("scheduled_at")
    @classmethod
    def aware_scheduled_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _aware(v)

    @field_validator("todos")
    @classmethod
    def unique_item_ids(cls, v: List[TodoIn]) -> List[TodoIn]:
        """Todo and sub-todo ids given by the client must not repeat within the situation."""
        seen = set()
        for item_id in _given_ids(v):
            if item_id in seen:
                raise ValueError(f"duplicate todo or sub-todo id: {item_id}")
            seen.add(item_id)
        return v

    def given_ids(self) -> List[str]:
        """Ids the client supplied for todos and sub-todos, in payload order."""
        return list(_given_ids(self.todos))


def _given_ids(todos: List[TodoIn]) -> Iterator[str]:
    for todo in todos:
        if todo.id:
            yield todo.id
        for sub in todo.sub_todos:
            if sub.id:
                yield sub.id


# PUBLIC_INTERFACE
class SituationUpdate(_Payload):
    """
    Schema for partially updating a situation's own fields.
    All fields are optional; only provided fields will be updated.
    """

    title: Optional[str] = Field(default=None, description="Name of the context", min_length=1, max_length=200)
    detail: Optional[str] = Field(default=None, description="Free-form notes")
    location: Optional[str] = Field(default=None, description="Where the situation takes place")
    weather: Optional[str] = Field(default=None, description="Expected weather keyword")
    scheduled_at: Optional[datetime] = Field(default=None, alias="datetime", description="New instant")
    is_predicted: Optional[bool] = Field(default=None, description="Proposed rather than entered by the user")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _validate_title(v)

    @field_validator("scheduled_at")
    @classmethod
    def aware_scheduled_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _aware(v)


# PUBLIC_INTERFACE
class TodoCreate(_Payload):
    """Schema for appending a todo to a situation."""

    title: str = Field(default="", description="Todo text")
    background_color: str = Field(default=DEFAULT_TODO_COLOR, description=_COLOR_DESCRIPTION)


# PUBLIC_INTERFACE
class TodoUpdate(_Payload):
    """Schema for editing a todo; only provided fields are applied."""

    title: Optional[str] = Field(default=None, description="Todo text")
    background_color: Optional[str] = Field(default=None, description=_COLOR_DESCRIPTION)


# PUBLIC_INTERFACE
class SubTodoCreate(_Payload):
    title: str = Field(default="", description="Sub-todo text")


# PUBLIC_INTERFACE
class SubTodoUpdate(_Payload):
    title: str = Field(..., description="Sub-todo text")


# PUBLIC_INTERFACE
class RestoreRequest(_Payload):
    """Pick the template to restore by its situation title."""

    title: str = Field(..., description="Title of a past situation", min_length=1)


# PUBLIC_INTERFACE
class CurrentSituationOut(_Payload):
    """The resolver's answer at the given instant; `situation` is null when nothing has started."""

    now: datetime = Field(..., description="Reference instant used for the computation")
    situation_id: Optional[str] = Field(default=None, description="Id of the current situation")
    situation: Optional[Situation] = Field(default=None, description="The current situation itself")
