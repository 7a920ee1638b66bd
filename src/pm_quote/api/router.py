"""pm_quote REST endpoints (public).

POST /quotes             price a proposed wager
GET  /quotes/{quote_id}  fetch a quote while it is still valid
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_quote.application.schemas import QuoteRequest, QuoteResponse
from src.pm_quote.application.service import QuoteApplicationService
from src.pm_quote.infrastructure.quote_cache import QuoteCacheProtocol, get_quote_cache

router = APIRouter(prefix="/quotes", tags=["quotes"])

_service = QuoteApplicationService()


@router.post("", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
async def create_quote(
    body: QuoteRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[QuoteCacheProtocol, Depends(get_quote_cache)],
) -> QuoteResponse:
    return await _service.create_quote(db, cache, body)


@router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote(
    quote_id: str,
    cache: Annotated[QuoteCacheProtocol, Depends(get_quote_cache)],
) -> QuoteResponse:
    return await _service.get_quote(cache, quote_id)
