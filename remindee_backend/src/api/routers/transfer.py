from __future__ import annotations

import json
from typing import Any, List

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response

from ..service import SituationService, get_service

router = APIRouter(
    prefix="/api/v1/data",
    tags=["data"],
)


# PUBLIC_INTERFACE
@router.get(
    "/export",
    summary="Export Situations",
    description="Download every situation as the JSON array used for persistence.",
    response_class=Response,
    responses={200: {"content": {"application/json": {}}, "description": "Situations JSON array"}},
)
def export_situations(service: SituationService = Depends(get_service)) -> Response:
    return Response(
        content=service.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="remindee_situations.json"'},
    )


# PUBLIC_INTERFACE
@router.post(
    "/import",
    summary="Import Situations",
    description=(
        "Replace every situation with the JSON array in the request body. "
        "An array whose records do not match the situation shape is rejected with 400 and nothing changes."
    ),
    responses={400: {"description": "Body is not a valid situations array"}},
)
def import_situations(
    situations: List[Any] = Body(..., media_type="application/json", description="Situations JSON array"),
    service: SituationService = Depends(get_service),
) -> dict:
    count = service.import_json(json.dumps(situations))
    return {"imported": count}
