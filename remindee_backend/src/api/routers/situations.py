from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from ..commands import EditSituation, EditSubTodo, EditTodo, ToggleComplete, TogglePin
from ..models import Situation
from ..schemas import SituationCreate, SituationUpdate, SubTodoCreate, SubTodoUpdate, TodoCreate, TodoUpdate
from ..service import SituationService, get_service
from ..utils import pagination_envelope, utc_now

router = APIRouter(
    prefix="/api/v1/situations",
    tags=["situations"],
)


class PaginationEnvelope(BaseModel):
    """
    Envelope for paginated list responses.
    """
    items: List[Situation] = Field(..., description="Situations, latest first")
    total: int = Field(..., description="Total number of situations in the store")
    limit: int = Field(..., description="Limit applied to the query")
    offset: int = Field(..., description="Offset applied to the query")


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=PaginationEnvelope,
    summary="List Situations",
    description="List situations in store order (latest first) with limit/offset pagination.",
)
def list_situations(
    limit: int = Query(50, ge=0, le=1000, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    service: SituationService = Depends(get_service),
) -> PaginationEnvelope:
    """
    List situations with pagination.
    """
    items = service.list_situations()
    envelope = pagination_envelope(
        items=items[offset : offset + limit],
        total=len(items),
        limit=limit,
        offset=offset,
    )
    return PaginationEnvelope(**envelope)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=Situation,
    status_code=status.HTTP_201_CREATED,
    summary="Create Situation",
    description=(
        "Create a situation. Missing todo and sub-todo ids are generated; "
        "a missing 'datetime' defaults to the time of the request."
    ),
    responses={
        201: {"description": "Situation created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_situation(payload: SituationCreate, service: SituationService = Depends(get_service)) -> Situation:
    return service.create_situation(payload, utc_now())


# PUBLIC_INTERFACE
@router.get(
    "/{situation_id}",
    response_model=Situation,
    summary="Get Situation",
    responses={404: {"description": "Situation not found"}},
)
def get_situation(situation_id: str, service: SituationService = Depends(get_service)) -> Situation:
    return service.get_situation(situation_id)


# PUBLIC_INTERFACE
@router.put(
    "/{situation_id}",
    response_model=Situation,
    summary="Replace Situation",
    description="Replace a situation by id. Unknown ids are rejected with 404, never appended.",
    responses={404: {"description": "Situation not found"}},
)
def put_situation(
    situation_id: str, payload: SituationCreate, service: SituationService = Depends(get_service)
) -> Situation:
    return service.replace_situation(situation_id, payload)


# PUBLIC_INTERFACE
@router.patch(
    "/{situation_id}",
    response_model=Situation,
    summary="Update Situation",
    description="Partially update title, detail, location, weather, datetime or isPredicted.",
    responses={404: {"description": "Situation not found"}},
)
def patch_situation(
    situation_id: str, payload: SituationUpdate, service: SituationService = Depends(get_service)
) -> Situation:
    return service.dispatch(
        EditSituation(
            situation_id=situation_id,
            title=payload.title,
            detail=payload.detail.strip() if payload.detail is not None else None,
            location=payload.location,
            weather=payload.weather,
            scheduled_at=payload.scheduled_at,
            is_predicted=payload.is_predicted,
        )
    )


# PUBLIC_INTERFACE
@router.post(
    "/{situation_id}/todos",
    response_model=Situation,
    status_code=status.HTTP_201_CREATED,
    summary="Add Todo",
    responses={404: {"description": "Situation not found"}},
)
def add_todo(
    situation_id: str, payload: TodoCreate, service: SituationService = Depends(get_service)
) -> Situation:
    return service.add_todo(situation_id, payload.title, payload.background_color)


# PUBLIC_INTERFACE
@router.patch(
    "/{situation_id}/todos/{todo_id}",
    response_model=Situation,
    summary="Update Todo",
    description="Edit a todo's title and/or background color.",
    responses={404: {"description": "Situation or todo not found"}},
)
def patch_todo(
    situation_id: str, todo_id: str, payload: TodoUpdate, service: SituationService = Depends(get_service)
) -> Situation:
    return service.dispatch(
        EditTodo(
            situation_id=situation_id,
            todo_id=todo_id,
            title=payload.title,
            background_color=payload.background_color,
        )
    )


# PUBLIC_INTERFACE
@router.post(
    "/{situation_id}/todos/{todo_id}/toggle-complete",
    response_model=Situation,
    summary="Toggle Todo Completion",
    responses={404: {"description": "Situation or todo not found"}},
)
def toggle_todo_complete(
    situation_id: str, todo_id: str, service: SituationService = Depends(get_service)
) -> Situation:
    return service.dispatch(ToggleComplete(situation_id=situation_id, todo_id=todo_id))


# PUBLIC_INTERFACE
@router.post(
    "/{situation_id}/todos/{todo_id}/toggle-pin",
    response_model=Situation,
    summary="Toggle Todo Pin",
    responses={404: {"description": "Situation or todo not found"}},
)
def toggle_todo_pin(situation_id: str, todo_id: str, service: SituationService = Depends(get_service)) -> Situation:
    return service.dispatch(TogglePin(situation_id=situation_id, todo_id=todo_id))


# PUBLIC_INTERFACE
@router.post(
    "/{situation_id}/todos/{todo_id}/subtodos",
    response_model=Situation,
    status_code=status.HTTP_201_CREATED,
    summary="Add Sub-todo",
    responses={404: {"description": "Situation or todo not found"}},
)
def add_sub_todo(
    situation_id: str, todo_id: str, payload: SubTodoCreate, service: SituationService = Depends(get_service)
) -> Situation:
    return service.add_sub_todo(situation_id, todo_id, payload.title)


# PUBLIC_INTERFACE
@router.patch(
    "/{situation_id}/todos/{todo_id}/subtodos/{sub_todo_id}",
    response_model=Situation,
    summary="Update Sub-todo",
    responses={404: {"description": "Situation, todo or sub-todo not found"}},
)
def patch_sub_todo(
    situation_id: str,
    todo_id: str,
    sub_todo_id: str,
    payload: SubTodoUpdate,
    service: SituationService = Depends(get_service),
) -> Situation:
    return service.dispatch(
        EditSubTodo(situation_id=situation_id, todo_id=todo_id, sub_todo_id=sub_todo_id, title=payload.title)
    )


# PUBLIC_INTERFACE
@router.post(
    "/{situation_id}/todos/{todo_id}/subtodos/{sub_todo_id}/toggle-complete",
    response_model=Situation,
    summary="Toggle Sub-todo Completion",
    responses={404: {"description": "Situation, todo or sub-todo not found"}},
)
def toggle_sub_todo_complete(
    situation_id: str, todo_id: str, sub_todo_id: str, service: SituationService = Depends(get_service)
) -> Situation:
    return service.dispatch(ToggleComplete(situation_id=situation_id, todo_id=todo_id, sub_todo_id=sub_todo_id))


# PUBLIC_INTERFACE
@router.post(
    "/{situation_id}/todos/{todo_id}/subtodos/{sub_todo_id}/toggle-pin",
    response_model=Situation,
    summary="Toggle Sub-todo Pin",
    responses={404: {"description": "Situation, todo or sub-todo not found"}},
)
def toggle_sub_todo_pin(
    situation_id: str, todo_id: str, sub_todo_id: str, service: SituationService = Depends(get_service)
) -> Situation:
    return service.dispatch(TogglePin(situation_id=situation_id, todo_id=todo_id, sub_todo_id=sub_todo_id))
