# src/pm_wager/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_gateway.auth.dependencies import get_current_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_wager.application import service as svc
from src.pm_wager.application.schemas import PlaceWagerRequest, PlaceWagerResponse
from src.pm_wager.engine.engine import WagerEngine

router = APIRouter(prefix="/wagers", tags=["wagers"])


@router.post("", response_model=PlaceWagerResponse, status_code=201)
async def place_wager(
    req: PlaceWagerRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    engine: Annotated[WagerEngine, Depends(svc.get_wager_engine)],
) -> PlaceWagerResponse:
    return await svc.place_wager(req, str(current_user.id), db, engine)
