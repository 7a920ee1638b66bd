"""Public event endpoint.

GET /events/{event_ref} event with its outcomes; event_ref is the object id or code.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_event.application.schemas import EventResponse
from src.pm_event.application.service import EventApplicationService

router = APIRouter(prefix="/events", tags=["events"])

_service = EventApplicationService()


@router.get("/{event_ref}", response_model=EventResponse)
async def get_event(
    event_ref: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> EventResponse:
    return await _service.get_event(db, event_ref)
