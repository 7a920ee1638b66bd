"""EventApplicationService: admin event management and public event lookup.

Lifecycle transitions run under the same per-event lock as wager commits, so a
close can never interleave with a wager that already passed its tradable check.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.amounts import to_cents
from src.pm_common.datetime_utils import as_utc, utc_now
from src.pm_common.enums import EventStatus, LifecycleAction
from src.pm_common.errors import (
    DuplicateEventError,
    EventNotEditableError,
    EventNotFoundError,
    RequestValidationFailed,
)
from src.pm_common.id_generator import generate_id
from src.pm_event.application.schemas import (
    EventCreateRequest,
    EventResponse,
    OutcomeCreateRequest,
    OutcomeResponse,
)
from src.pm_event.domain.ledger import outcome_code, recompute_probabilities
from src.pm_event.domain.lifecycle import accepts_outcomes, apply_transition
from src.pm_event.domain.models import Event, Outcome, TraderInfo
from src.pm_event.domain.repository import EventRepositoryProtocol
from src.pm_event.infrastructure.persistence import EventRepository
from src.pm_wager.application.service import get_wager_engine
from src.pm_wager.engine.engine import WagerEngine

logger = logging.getLogger(__name__)


def _trader_info(req: OutcomeCreateRequest) -> TraderInfo:
    """Per-outcome bounds: request overrides, settings defaults otherwise."""
    info = TraderInfo(
        min_pledge=(
            to_cents(req.min_pledge) if req.min_pledge is not None else settings.DEFAULT_MIN_PLEDGE
        ),
        max_pledge=(
            to_cents(req.max_pledge) if req.max_pledge is not None else settings.DEFAULT_MAX_PLEDGE
        ),
        max_leverage=(
            req.max_leverage if req.max_leverage is not None else settings.DEFAULT_MAX_LEVERAGE
        ),
        min_cash_proportion_for_pool=(
            req.min_cash_proportion_for_pool
            if req.min_cash_proportion_for_pool is not None
            else settings.DEFAULT_MIN_CASH_PROPORTION
        ),
        starting_wager=(
            to_cents(req.starting_wager)
            if req.starting_wager is not None
            else settings.DEFAULT_STARTING_WAGER
        ),
    )
    if info.min_pledge > info.max_pledge:
        raise RequestValidationFailed(
            f"min_pledge {info.min_pledge} exceeds max_pledge {info.max_pledge} (cents)"
        )
    return info


class EventApplicationService:
    def __init__(
        self,
        repo: EventRepositoryProtocol | None = None,
        engine: WagerEngine | None = None,
    ) -> None:
        self._repo: EventRepositoryProtocol = repo or EventRepository()
        self._engine = engine

    def _lock_owner(self) -> WagerEngine:
        if self._engine is None:
            # Process-wide engine: its per-event locks must be shared with wagers
            self._engine = get_wager_engine()
        return self._engine

    async def _load(self, db: AsyncSession, event_ref: str, for_update: bool = False) -> Event:
        event_id = await self._repo.resolve_event_id(db, event_ref)
        event = await self._repo.get_event(db, event_id, for_update) if event_id else None
        if event is None:
            raise EventNotFoundError(event_ref)
        return event

    async def create_event(self, db: AsyncSession, req: EventCreateRequest) -> EventResponse:
        try:
            conflict = await self._repo.find_conflict(db, req.name, req.ticker)
            if conflict == "name":
                raise DuplicateEventError("name", req.name)
            if conflict == "ticker":
                raise DuplicateEventError("ticker", req.ticker)

            number = await self._repo.next_code_number(db)
            event = Event(
                id=generate_id(),
                code=f"{settings.EVENT_CODE_PREFIX}-{number:06d}",
                ticker=req.ticker,
                name=req.name,
                name_jp=req.name_jp,
                description=req.description,
                description_jp=req.description_jp,
                rules=req.rules,
                timezone=req.timezone,
                event_images_url=list(req.event_images_url),
                status=EventStatus.CREATED,
                ends_at=as_utc(req.ends_at),
            )
            event = await self._repo.insert_event(db, event)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Event %s created: ticker=%s name=%r", event.code, event.ticker, event.name)
        return EventResponse.from_domain(event)

    async def add_outcome(
        self, db: AsyncSession, event_ref: str, req: OutcomeCreateRequest
    ) -> OutcomeResponse:
        event = await self._load(db, event_ref)
        async with self._lock_owner().lock_for(event.id):
            try:
                event = await self._load(db, event.id, for_update=True)
                if not accepts_outcomes(event):
                    raise EventNotEditableError(event.code, event.status.value)

                index = len(event.outcomes)
                outcome = Outcome(
                    id=generate_id(),
                    event_id=event.id,
                    code=outcome_code(index),
                    name=req.name,
                    name_jp=req.name_jp,
                    sort_order=index,
                    trader_info=_trader_info(req),
                )
                event.outcomes.append(outcome)
                recompute_probabilities(event.outcomes)
                outcome = await self._repo.insert_outcome(db, outcome)
                await self._repo.save_ledger(db, event)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info("Outcome %s added to event %s: %r", outcome.code, event.code, outcome.name)
        return OutcomeResponse.from_domain(outcome)

    async def get_event(self, db: AsyncSession, event_ref: str) -> EventResponse:
        return EventResponse.from_domain(await self._load(db, event_ref))

    async def transition(
        self, db: AsyncSession, event_ref: str, action: LifecycleAction
    ) -> EventResponse:
        """Apply open / pause / close. Resolution goes through ResolutionService."""
        event = await self._load(db, event_ref)
        async with self._lock_owner().lock_for(event.id):
            try:
                event = await self._load(db, event.id, for_update=True)
                previous = event.status
                apply_transition(event, action, utc_now())
                await self._repo.update_lifecycle(db, event)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info(
            "Event %s %s: %s -> %s", event.code, action.value, previous.value, event.status.value
        )
        return EventResponse.from_domain(event)
