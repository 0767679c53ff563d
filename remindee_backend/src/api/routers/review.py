from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..models import UnfinishedItem
from ..schemas import CurrentSituationOut
from ..service import SituationService, get_service
from ..utils import ensure_aware, utc_now

router = APIRouter(
    prefix="/api/v1/review",
    tags=["review"],
)


def _reference_time(now: Optional[datetime]) -> datetime:
    """The clock is sampled once per request; every computation in it uses this instant."""
    return ensure_aware(now) if now is not None else utc_now()


# PUBLIC_INTERFACE
@router.get(
    "/current",
    response_model=CurrentSituationOut,
    summary="Current Situation",
    description="The most recent situation that has started at `now` (defaults to the server clock).",
)
def current_situation(
    now: Optional[datetime] = Query(None, description="Reference instant (ISO-8601)"),
    service: SituationService = Depends(get_service),
) -> CurrentSituationOut:
    at = _reference_time(now)
    current = service.current_situation(at)
    return CurrentSituationOut(now=at, situation_id=current.id if current else None, situation=current)


# PUBLIC_INTERFACE
@router.get(
    "/unfinished",
    response_model=List[UnfinishedItem],
    summary="Unfinished Todos",
    description=(
        "Open todos and sub-todos of situations that concluded before `now`. "
        "The current situation and future situations are excluded."
    ),
)
def unfinished_todos(
    now: Optional[datetime] = Query(None, description="Reference instant (ISO-8601)"),
    service: SituationService = Depends(get_service),
) -> List[UnfinishedItem]:
    return service.unfinished(_reference_time(now))
