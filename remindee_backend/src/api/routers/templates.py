from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..models import RestoredSituation, TemplateEntry
from ..schemas import RestoreRequest
from ..service import SituationService, get_service

router = APIRouter(
    prefix="/api/v1/templates",
    tags=["templates"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TemplateEntry],
    summary="List Templates",
    description="One entry per situation title, most recently used first, with a usage count.",
)
def list_templates(service: SituationService = Depends(get_service)) -> List[TemplateEntry]:
    return service.templates()


# PUBLIC_INTERFACE
@router.get(
    "/quick-picks",
    response_model=List[TemplateEntry],
    summary="Quick Pick Templates",
    description="The first few templates, offered as shortcuts when creating a situation.",
)
def quick_pick_templates(service: SituationService = Depends(get_service)) -> List[TemplateEntry]:
    return service.quick_picks()


# PUBLIC_INTERFACE
@router.post(
    "/restore",
    response_model=RestoredSituation,
    summary="Restore From Template",
    description=(
        "Pre-populate a new situation from the latest situation with the given title. "
        "Only pinned todos, and todos with a pinned sub-todo, are carried over, with fresh ids. "
        "When nothing is pinned a single blank todo is returned. Nothing is saved."
    ),
    responses={404: {"description": "No past situation with this title"}},
)
def restore_template(payload: RestoreRequest, service: SituationService = Depends(get_service)) -> RestoredSituation:
    return service.restore(payload.title)
