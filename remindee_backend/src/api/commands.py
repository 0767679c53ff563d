"""
Edits to situations expressed as commands and applied by a pure reducer.

`apply_command(situations, command)` returns a new list in the same order and
never touches its input: records are frozen and every change goes through
`model_copy`. Commands that add items carry the already-generated ids, so the
reducer itself needs no id source. Unknown situation, todo or sub-todo ids
raise NotFound.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .errors import NotFound
from .models import Situation, SubTodo, Todo
from .utils import ensure_aware


@dataclass(frozen=True)
class ToggleComplete:
    """Flip `completed` on a todo, or on one of its sub-todos when `sub_todo_id` is set."""
    situation_id: str
    todo_id: str
    sub_todo_id: Optional[str] = None


@dataclass(frozen=True)
class TogglePin:
    """Flip `is_pinned` on a todo, or on one of its sub-todos when `sub_todo_id` is set."""
    situation_id: str
    todo_id: str
    sub_todo_id: Optional[str] = None


@dataclass(frozen=True)
class EditSituation:
    situation_id: str
    title: Optional[str] = None
    detail: Optional[str] = None
    location: Optional[str] = None
    weather: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    is_predicted: Optional[bool] = None


@dataclass(frozen=True)
class EditTodo:
    situation_id: str
    todo_id: str
    title: Optional[str] = None
    background_color: Optional[str] = None


@dataclass(frozen=True)
class EditSubTodo:
    situation_id: str
    todo_id: str
    sub_todo_id: str
    title: str


@dataclass(frozen=True)
class AddTodo:
    situation_id: str
    todo: Todo


@dataclass(frozen=True)
class AddSubTodo:
    situation_id: str
    todo_id: str
    sub_todo: SubTodo


Command = Union[ToggleComplete, TogglePin, EditSituation, EditTodo, EditSubTodo, AddTodo, AddSubTodo]


def _changes(**fields: Any) -> Dict[str, Any]:
    """Drop fields left as None so only provided values are applied."""
    return {k: v for k, v in fields.items() if v is not None}


def _map_situation(
    situations: Sequence[Situation], situation_id: str, fn: Callable[[Situation], Situation]
) -> List[Situation]:
    out: List[Situation] = []
    found = False
    for s in situations:
        if s.id == situation_id:
            out.append(fn(s))
            found = True
        else:
            out.append(s)
    if not found:
        raise NotFound(f"Situation {situation_id} not found", detail={"situationId": situation_id})
    return out


def _map_todo(situation: Situation, todo_id: str, fn: Callable[[Todo], Todo]) -> Situation:
    todos: List[Todo] = []
    found = False
    for t in situation.todos:
        if t.id == todo_id:
            todos.append(fn(t))
            found = True
        else:
            todos.append(t)
    if not found:
        raise NotFound(
            f"Todo {todo_id} not found in situation {situation.id}",
            detail={"situationId": situation.id, "todoId": todo_id},
        )
    return situation.model_copy(update={"todos": todos})


def _map_sub_todo(todo: Todo, sub_todo_id: str, fn: Callable[[SubTodo], SubTodo]) -> Todo:
    subs: List[SubTodo] = []
    found = False
    for st in todo.sub_todos:
        if st.id == sub_todo_id:
            subs.append(fn(st))
            found = True
        else:
            subs.append(st)
    if not found:
        raise NotFound(
            f"Sub-todo {sub_todo_id} not found in todo {todo.id}",
            detail={"todoId": todo.id, "subTodoId": sub_todo_id},
        )
    return todo.model_copy(update={"sub_todos": subs})


def _toggle(situations: Sequence[Situation], cmd: Union[ToggleComplete, TogglePin], field: str) -> List[Situation]:
    def flip(item):
        return item.model_copy(update={field: not getattr(item, field)})

    def on_todo(todo: Todo) -> Todo:
        if cmd.sub_todo_id is None:
            return flip(todo)
        return _map_sub_todo(todo, cmd.sub_todo_id, flip)

    return _map_situation(situations, cmd.situation_id, lambda s: _map_todo(s, cmd.todo_id, on_todo))


# PUBLIC_INTERFACE
def apply_command(situations: Sequence[Situation], command: Command) -> List[Situation]:
    """Return a new situation list with `command` applied. Raises NotFound for unknown ids."""
    if isinstance(command, ToggleComplete):
        return _toggle(situations, command, "completed")

    if isinstance(command, TogglePin):
        return _toggle(situations, command, "is_pinned")

    if isinstance(command, EditSituation):
        update = _changes(
            title=command.title,
            detail=command.detail,
            location=command.location,
            weather=command.weather,
            scheduled_at=ensure_aware(command.scheduled_at) if command.scheduled_at else None,
            is_predicted=command.is_predicted,
        )
        return _map_situation(situations, command.situation_id, lambda s: s.model_copy(update=update))

    if isinstance(command, EditTodo):
        update = _changes(title=command.title, background_color=command.background_color)
        return _map_situation(
            situations,
            command.situation_id,
            lambda s: _map_todo(s, command.todo_id, lambda t: t.model_copy(update=update)),
        )

    if isinstance(command, EditSubTodo):
        def rename(todo: Todo) -> Todo:
            return _map_sub_todo(todo, command.sub_todo_id, lambda st: st.model_copy(update={"title": command.title}))

        return _map_situation(situations, command.situation_id, lambda s: _map_todo(s, command.todo_id, rename))

    if isinstance(command, AddTodo):
        return _map_situation(
            situations,
            command.situation_id,
            lambda s: s.model_copy(update={"todos": [*s.todos, command.todo]}),
        )

    if isinstance(command, AddSubTodo):
        return _map_situation(
            situations,
            command.situation_id,
            lambda s: _map_todo(
                s, command.todo_id, lambda t: t.model_copy(update={"sub_todos": [*t.sub_todos, command.sub_todo]})
            ),
        )

    raise TypeError(f"Unsupported command: {type(command).__name__}")
