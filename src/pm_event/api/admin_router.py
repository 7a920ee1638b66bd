# src/pm_event/api/admin_router.py
"""Admin event management. Every route requires a bearer token with role=admin."""
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.application.service import ResolutionService
from src.pm_common.database import get_db_session
from src.pm_common.enums import LifecycleAction
from src.pm_event.application.schemas import (
    EventCreateRequest,
    EventResponse,
    OutcomeCreateRequest,
    OutcomeResponse,
    ResolveRequest,
)
from src.pm_event.application.service import EventApplicationService
from src.pm_gateway.auth.dependencies import require_admin

router = APIRouter(
    prefix="/admin/events",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)

_service = EventApplicationService()
_resolution = ResolutionService()


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    body: EventCreateRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> EventResponse:
    return await _service.create_event(db, body)


@router.post("/{event_ref}/outcomes", response_model=OutcomeResponse, status_code=201)
async def add_outcome(
    event_ref: str,
    body: OutcomeCreateRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> OutcomeResponse:
    return await _service.add_outcome(db, event_ref, body)


@router.post("/{event_ref}/open", status_code=204)
async def open_event(
    event_ref: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Response:
    await _service.transition(db, event_ref, LifecycleAction.OPEN)
    return Response(status_code=204)


@router.post("/{event_ref}/pause", status_code=204)
async def pause_event(
    event_ref: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Response:
    await _service.transition(db, event_ref, LifecycleAction.PAUSE)
    return Response(status_code=204)


@router.post("/{event_ref}/close", status_code=204)
async def close_event(
    event_ref: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Response:
    await _service.transition(db, event_ref, LifecycleAction.CLOSE)
    return Response(status_code=204)


@router.post("/{event_ref}/resolve", status_code=204, response_model=None)
async def resolve_event(
    event_ref: str,
    body: ResolveRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Response:
    """204 on a committed resolution; 200 with a JSON boolean for dry_run."""
    valid = await _resolution.resolve(
        db, event_ref, body.event_outcome_id, body.ends_at, dry_run=body.dry_run
    )
    if body.dry_run:
        return JSONResponse(content=valid, status_code=200)
    return Response(status_code=204)
