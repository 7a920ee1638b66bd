"""WagerEngine: stateful orchestrator for per-event wager commits.

All mutations of one event (wager commits, lifecycle transitions, resolution)
run under that event's asyncio.Lock in this process and under the event row's
SELECT ... FOR UPDATE in PostgreSQL, inside a single DB transaction.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import CloseReason, PositionClass, WalletEntryType
from src.pm_common.errors import (
    EventNotFoundError,
    EventNotTradableError,
    OutcomeNotFoundError,
    SlippageExceededError,
    WalletNotFoundError,
)
from src.pm_common.id_generator import generate_id
from src.pm_event.domain.ledger import apply_wager, outcome_state
from src.pm_event.domain.lifecycle import is_tradable
from src.pm_event.domain.models import Event
from src.pm_event.domain.repository import EventRepositoryProtocol
from src.pm_event.infrastructure.persistence import EventRepository
from src.pm_position.domain.margin import close_position, find_margin_calls, open_or_increase
from src.pm_position.domain.models import Position
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository
from src.pm_quote.domain.bounds import (
    bounds_policy_for,
    check_bounds,
    position_class_for,
    resolve_amounts,
)
from src.pm_quote.domain.pricing import price
from src.pm_wager.domain.models import Wager
from src.pm_wager.domain.repository import WagerRepositoryProtocol
from src.pm_wager.infrastructure.persistence import WagerRepository
from src.pm_wallet.domain.allocator import DEBIT_ORDER, allocate
from src.pm_wallet.domain.repository import WalletRepositoryProtocol
from src.pm_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WagerCommand:
    """A wager request after unit conversion. Amounts in cents."""

    event_ref: str
    outcome_ref: str
    wallet_id: str
    pledge: int
    leverage: Decimal
    force_leverage: bool = False
    wager: int | None = None
    loan: int | None = None
    max_payout: int | None = None


@dataclass
class WagerResult:
    wager: Wager
    position: Position
    event: Event
    margin_called: list[Position] = field(default_factory=list)


class WagerEngine:
    def __init__(
        self,
        event_repo: EventRepositoryProtocol | None = None,
        position_repo: PositionRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        wager_repo: WagerRepositoryProtocol | None = None,
        margin_buffer_bps: int | None = None,
    ) -> None:
        self._events: EventRepositoryProtocol = event_repo or EventRepository()
        self._positions: PositionRepositoryProtocol = position_repo or PositionRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._wagers: WagerRepositoryProtocol = wager_repo or WagerRepository()
        self._margin_buffer_bps = (
            settings.MARGIN_BUFFER_BPS if margin_buffer_bps is None else margin_buffer_bps
        )
        self._event_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock_for(self, event_id: str) -> asyncio.Lock:
        """Per-event lock shared by wagers, lifecycle transitions and resolution."""
        return self._event_locks[event_id]

    def forget_event(self, event_id: str) -> None:
        """Drop the lock of an event that can no longer change."""
        self._event_locks.pop(event_id, None)

    async def resolve_event_id(self, db: AsyncSession, event_ref: str) -> str:
        event_id = await self._events.resolve_event_id(db, event_ref)
        if event_id is None:
            raise EventNotFoundError(event_ref)
        return event_id

    async def place_wager(
        self, db: AsyncSession, user_id: str, cmd: WagerCommand
    ) -> WagerResult:
        """Main entry point. Commits on success, rolls back everything on any error."""
        event_id = await self.resolve_event_id(db, cmd.event_ref)
        async with self.lock_for(event_id):
            try:
                result = await self._place_wager_inner(db, user_id, event_id, cmd)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info(
            "Wager %s accepted: user=%s event=%s outcome=%s pledge=%d wager=%d payout=%d",
            result.wager.id,
            user_id,
            result.event.code,
            result.wager.outcome_id,
            result.wager.pledge,
            result.wager.wager,
            result.wager.payout,
        )
        return result

    async def _place_wager_inner(
        self, db: AsyncSession, user_id: str, event_id: str, cmd: WagerCommand
    ) -> WagerResult:
        # Load event row FOR UPDATE
        event = await self._events.get_event(db, event_id, for_update=True)
        if event is None:
            raise EventNotFoundError(cmd.event_ref)
        if not is_tradable(event):
            raise EventNotTradableError(event.code, event.status.value)
        outcome = event.find_outcome(cmd.outcome_ref)
        if outcome is None:
            raise OutcomeNotFoundError(cmd.outcome_ref)

        # Validate and re-price against current state
        wager_amount, loan = resolve_amounts(cmd.pledge, cmd.leverage, cmd.wager, cmd.loan)
        state = outcome_state(event, outcome)
        check_bounds(
            state, cmd.pledge, wager_amount, cmd.leverage, bounds_policy_for(cmd.force_leverage)
        )
        priced = price(state, cmd.pledge, wager_amount)
        if cmd.max_payout is not None and cmd.max_payout > priced.indicative_payout:
            raise SlippageExceededError(cmd.max_payout, priced.indicative_payout)

        # Funds: wallet_id must be the caller's; waterfall over all three wallets
        wallet = await self._wallets.get_wallet(db, cmd.wallet_id)
        if wallet is None or wallet.user_id != user_id:
            raise WalletNotFoundError(cmd.wallet_id)
        wallets = await self._wallets.get_wallets(db, user_id, for_update=True)
        allocation = allocate({t: w.balance for t, w in wallets.items()}, cmd.pledge)

        is_leveraged = (
            position_class_for(cmd.leverage, cmd.force_leverage) == PositionClass.LEVERAGED
        )
        existing = await self._positions.get_open_position(
            db, user_id, event.id, outcome.id, is_leveraged
        )
        position = open_or_increase(
            existing,
            user_id=user_id,
            event_id=event.id,
            outcome_id=outcome.id,
            is_leveraged=is_leveraged,
            pledge=cmd.pledge,
            wager=wager_amount,
            payout=priced.indicative_payout,
        )

        # Write: debits, ledger, position, wager record
        wager_id = generate_id()
        for wallet_type in DEBIT_ORDER:
            amount = allocation.amount_for(wallet_type)
            if amount > 0:
                await self._wallets.apply_entry(
                    db,
                    wallets[wallet_type],
                    -amount,
                    WalletEntryType.WAGER_DEBIT.value,
                    "wager",
                    wager_id,
                )
        apply_wager(event, outcome.id, cmd.pledge, wager_amount)
        await self._events.save_ledger(db, event)
        position = await self._positions.save(db, position)

        record = Wager(
            id=wager_id,
            user_id=user_id,
            event_id=event.id,
            outcome_id=outcome.id,
            position_id=position.id,
            wallet_id=cmd.wallet_id,
            pledge=cmd.pledge,
            wager=wager_amount,
            loan=loan,
            leverage=cmd.leverage,
            force_leverage=cmd.force_leverage,
            payout=priced.indicative_payout,
            allocation=allocation.as_dict(),
        )
        record = await self._wagers.insert(db, record)

        # Margin sweep on the post-wager state, before this request returns
        called = await self.check_margin_calls(db, event)
        for p in called:
            if p.id == position.id:
                position = p
        return WagerResult(wager=record, position=position, event=event, margin_called=called)

    async def check_margin_calls(self, db: AsyncSession, event: Event) -> list[Position]:
        """Close every open leveraged position of event whose stop has been crossed.

        Caller must hold the event lock and the event row lock.
        """
        open_positions = await self._positions.list_open_for_event(db, event.id)
        crossed = find_margin_calls(event, open_positions, self._margin_buffer_bps)
        now = utc_now()
        closed: list[Position] = []
        for p in crossed:
            close_position(p, CloseReason.MARGINCALLED, now)
            closed.append(await self._positions.save(db, p))
            logger.warning(
                "Margin call: position=%s user=%s event=%s outcome=%s stop=%.6f",
                p.id,
                p.user_id,
                event.code,
                p.outcome_id,
                p.stop_probability,
            )
        return closed
