"""Dev-script API router: mint user tokens and fund wallets for testing.

Both endpoints require an admin bearer token. request_id is read from
request.state (injected by RequestLogMiddleware) for log correlation.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.amounts import to_cents
from src.pm_common.database import get_db_session
from src.pm_gateway.auth.dependencies import require_admin
from src.pm_gateway.user.schemas import (
    CreditWalletRequest,
    GenerateUserTokenRequest,
    GenerateUserTokenResponse,
)
from src.pm_gateway.user.service import UserService
from src.pm_wallet.application.schemas import WalletsResponse
from src.pm_wallet.application.service import WalletApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/dev-scripts",
    tags=["dev-scripts"],
    dependencies=[Depends(require_admin)],
)
_service = UserService()
_wallets = WalletApplicationService()


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


@router.post(
    "/generate-user-token",
    status_code=status.HTTP_200_OK,
    response_model=GenerateUserTokenResponse,
    summary="Create the user if needed and issue an access token",
)
async def generate_user_token(
    request: Request,
    body: GenerateUserTokenRequest,
    db: AsyncSession = Depends(get_db_session),
) -> GenerateUserTokenResponse:
    user, token = await _service.issue_token(db, body.email)
    logger.info("Issued dev token for user %s (%s)", user.id, _get_request_id(request))
    return GenerateUserTokenResponse(token=token, user_id=str(user.id), email=user.email)


@router.post(
    "/credit-wallet",
    status_code=status.HTTP_200_OK,
    response_model=WalletsResponse,
    summary="Credit one of a user's wallets",
)
async def credit_wallet(
    request: Request,
    body: CreditWalletRequest,
    db: AsyncSession = Depends(get_db_session),
) -> WalletsResponse:
    user = await _service.find_by_email(db, body.email)
    amount = to_cents(body.amount)
    wallets = await _wallets.credit(db, str(user.id), body.wallet_type, amount)
    logger.info(
        "Credited %d cents to %s wallet of user %s (%s)",
        amount,
        body.wallet_type.value,
        user.id,
        _get_request_id(request),
    )
    return wallets
