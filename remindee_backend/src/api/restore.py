from __future__ import annotations

from typing import List

from .ids import IdGenerator
from .models import DEFAULT_TODO_COLOR, RestoredSituation, Situation, SubTodo, Todo


# PUBLIC_INTERFACE
def restore(template: Situation, ids: IdGenerator) -> RestoredSituation:
    """
    Select the items of `template` worth carrying into a new situation.

    Title, detail and location are copied verbatim. A todo is carried over
    when it is pinned itself or when at least one of its sub-todos is pinned;
    only pinned sub-todos come along. Every copy gets a fresh id and starts
    uncompleted; colors and order are preserved.

    The result may hold no todos at all. Callers that need a non-empty
    checklist substitute `blank_todo` themselves.
    """
    todos: List[Todo] = []
    for todo in template.todos:
        pinned = [sub for sub in todo.sub_todos if sub.is_pinned]
        if not (todo.is_pinned or pinned):
            continue
        todo_id = ids.todo_id()
        kept = [sub.model_copy(update={"id": ids.sub_todo_id(), "completed": False}) for sub in pinned]
        todos.append(todo.model_copy(update={"id": todo_id, "completed": False, "sub_todos": kept}))
    return RestoredSituation(
        title=template.title,
        detail=template.detail,
        location=template.location,
        todos=todos,
    )


# PUBLIC_INTERFACE
def blank_todo(ids: IdGenerator, title: str = "", background_color: str = DEFAULT_TODO_COLOR) -> Todo:
    """An empty, unpinned todo with a fresh id."""
    return Todo(
        id=ids.todo_id(),
        title=title,
        completed=False,
        background_color=background_color,
        sub_todos=[],
        is_pinned=False,
    )


# PUBLIC_INTERFACE
def blank_sub_todo(ids: IdGenerator, title: str = "") -> SubTodo:
    return SubTodo(id=ids.sub_todo_id(), title=title, completed=False, is_pinned=False)
