"""QuoteApplicationService: non-binding, time-limited wager previews.

Quotes take no lock and commit nothing to the ledger. A later wager is re-priced
under the event lock and rejected if its max_payout is no longer achievable.
"""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.amounts import from_cents, to_cents
from src.pm_common.datetime_utils import utc_now
from src.pm_common.errors import (
    EventNotFoundError,
    EventNotTradableError,
    OutcomeNotFoundError,
    QuoteNotFoundError,
)
from src.pm_common.id_generator import generate_id
from src.pm_event.domain.ledger import outcome_state
from src.pm_event.domain.lifecycle import is_tradable
from src.pm_event.domain.repository import EventRepositoryProtocol
from src.pm_event.infrastructure.persistence import EventRepository
from src.pm_quote.application.schemas import QuoteRequest, QuoteResponse
from src.pm_quote.domain.bounds import bounds_policy_for, check_bounds, resolve_amounts
from src.pm_quote.domain.pricing import price
from src.pm_quote.infrastructure.quote_cache import QuoteCacheProtocol


def _optional_cents(value: object) -> int | None:
    return to_cents(value) if value is not None else None  # type: ignore[arg-type]


class QuoteApplicationService:
    def __init__(
        self,
        repo: EventRepositoryProtocol | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self._repo: EventRepositoryProtocol = repo or EventRepository()
        self._ttl = settings.QUOTE_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    async def create_quote(
        self, db: AsyncSession, cache: QuoteCacheProtocol, req: QuoteRequest
    ) -> QuoteResponse:
        event_id = await self._repo.resolve_event_id(db, req.event_id)
        event = await self._repo.get_event(db, event_id) if event_id else None
        if event is None:
            raise EventNotFoundError(req.event_id)
        if not is_tradable(event):
            raise EventNotTradableError(event.code, event.status.value)
        outcome = event.find_outcome(req.event_outcome_id)
        if outcome is None:
            raise OutcomeNotFoundError(req.event_outcome_id)

        pledge = to_cents(req.pledge)
        wager, loan = resolve_amounts(
            pledge, req.leverage, _optional_cents(req.wager), _optional_cents(req.loan)
        )
        state = outcome_state(event, outcome)
        check_bounds(state, pledge, wager, req.leverage, bounds_policy_for(req.force_leverage))
        priced = price(state, pledge, wager)

        now = utc_now()
        quote = QuoteResponse(
            id=generate_id(),
            event_id=event.id,
            event_code=event.code,
            event_outcome_id=outcome.id,
            outcome_code=outcome.code,
            pledge=from_cents(pledge),
            leverage=float(req.leverage),
            wager=from_cents(wager),
            loan=from_cents(loan),
            force_leverage=req.force_leverage,
            indicative_payout=from_cents(priced.indicative_payout),
            before_pledge=from_cents(priced.before_pledge),
            before_wager=from_cents(priced.before_wager),
            after_pledge=from_cents(priced.after_pledge),
            after_wager=from_cents(priced.after_wager),
            estimated_probability_before=priced.estimated_probability_before,
            estimated_probability_after=priced.estimated_probability_after,
            stop_probability=priced.stop_probability,
            created_at=now.isoformat(),
            expires_at=(now + timedelta(seconds=self._ttl)).isoformat(),
        )
        await cache.put(quote.id, quote.model_dump_json(), self._ttl)
        return quote

    async def get_quote(self, cache: QuoteCacheProtocol, quote_id: str) -> QuoteResponse:
        payload = await cache.get(quote_id)
        if payload is None:
            raise QuoteNotFoundError(quote_id)
        return QuoteResponse.model_validate_json(payload)
