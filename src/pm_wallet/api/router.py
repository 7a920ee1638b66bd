"""pm_wallet REST API: both endpoints require JWT authentication.

GET /wallets                              the three balances
GET /wallets/{wallet_type}/transactions   most recent entries first
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import WalletType
from src.pm_gateway.auth.dependencies import get_current_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_wallet.application.schemas import WalletsResponse, WalletTransactionsResponse
from src.pm_wallet.application.service import WalletApplicationService

router = APIRouter(prefix="/wallets", tags=["wallets"])

_service = WalletApplicationService()


@router.get("", response_model=WalletsResponse)
async def list_wallets(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> WalletsResponse:
    return await _service.list_wallets(db, str(current_user.id))


@router.get("/{wallet_type}/transactions", response_model=WalletTransactionsResponse)
async def list_transactions(
    wallet_type: WalletType,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(50, ge=1, le=200),
) -> WalletTransactionsResponse:
    return await _service.list_transactions(db, str(current_user.id), wallet_type, limit)
