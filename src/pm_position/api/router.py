"""Position listing endpoints: both require JWT authentication.

GET /wagers/events/{event_ref}           caller's positions on one event, grouped open/closed
GET /dashboard/wager-position-events     caller's positions across events
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_gateway.auth.dependencies import get_current_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_position.application.schemas import (
    DashboardEventGroup,
    DashboardPage,
    PositionGroup,
)
from src.pm_position.application.service import PositionApplicationService

router = APIRouter(tags=["positions"])

_service = PositionApplicationService()


@router.get("/wagers/events/{event_ref}", response_model=list[PositionGroup])
async def list_event_positions(
    event_ref: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> list[PositionGroup]:
    return await _service.list_for_event(db, str(current_user.id), event_ref)


@router.get(
    "/dashboard/wager-position-events",
    response_model=list[DashboardEventGroup] | DashboardPage,
)
async def dashboard_positions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: Literal["active", "inactive"] = Query("active"),
    pagination: bool = Query(True),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> list[DashboardEventGroup] | DashboardPage:
    return await _service.dashboard(
        db, str(current_user.id), status == "active", pagination, page, limit
    )
