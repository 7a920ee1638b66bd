"""ResolutionService: closes an event and settles every open position on it.

Runs under the event's engine lock and row lock in one transaction: positions,
profit-wallet credits and the event status change commit together or not at all.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.settlement import settle_positions
from src.pm_common.datetime_utils import as_utc, utc_now
from src.pm_common.enums import CloseReason, LifecycleAction, WalletEntryType, WalletType
from src.pm_common.errors import EventNotFoundError, OutcomeNotFoundError, WalletNotFoundError
from src.pm_event.domain.lifecycle import apply_transition, can_transition, next_status
from src.pm_event.domain.models import Event
from src.pm_event.domain.repository import EventRepositoryProtocol
from src.pm_event.infrastructure.persistence import EventRepository
from src.pm_position.domain.margin import close_position
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository
from src.pm_wager.application.service import get_wager_engine
from src.pm_wager.engine.engine import WagerEngine
from src.pm_wallet.domain.models import Wallet
from src.pm_wallet.domain.repository import WalletRepositoryProtocol
from src.pm_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


@dataclass
class ResolutionSummary:
    won: int = 0
    lost: int = 0
    credited: int = 0     # cents


class ResolutionService:
    def __init__(
        self,
        engine: WagerEngine | None = None,
        event_repo: EventRepositoryProtocol | None = None,
        position_repo: PositionRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
    ) -> None:
        self._engine = engine
        self._events: EventRepositoryProtocol = event_repo or EventRepository()
        self._positions: PositionRepositoryProtocol = position_repo or PositionRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    def _lock_owner(self) -> WagerEngine:
        if self._engine is None:
            self._engine = get_wager_engine()
        return self._engine

    async def _load(self, db: AsyncSession, event_ref: str, for_update: bool = False) -> Event:
        event_id = await self._events.resolve_event_id(db, event_ref)
        event = await self._events.get_event(db, event_id, for_update) if event_id else None
        if event is None:
            raise EventNotFoundError(event_ref)
        return event

    async def resolve(
        self,
        db: AsyncSession,
        event_ref: str,
        outcome_ref: str,
        ends_at: datetime,
        dry_run: bool = False,
    ) -> bool:
        """Resolve event_ref in favour of outcome_ref.

        dry_run only reports whether the resolution would be accepted right now
        and never mutates anything. Returns True once a real resolution commits.
        """
        event = await self._load(db, event_ref)
        if dry_run:
            return (
                can_transition(event, LifecycleAction.RESOLVE)
                and event.find_outcome(outcome_ref) is not None
            )

        async with self._lock_owner().lock_for(event.id):
            try:
                event = await self._load(db, event.id, for_update=True)
                summary = await self._resolve_inner(db, event, outcome_ref, ends_at)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        # resolved is terminal, so the lock is no longer needed
        self._lock_owner().forget_event(event.id)

        logger.info(
            "Event %s resolved: winner=%s won=%d lost=%d credited=%d cents",
            event.code,
            event.winning_outcome_id,
            summary.won,
            summary.lost,
            summary.credited,
        )
        return True

    async def _resolve_inner(
        self, db: AsyncSession, event: Event, outcome_ref: str, ends_at: datetime
    ) -> ResolutionSummary:
        # wrong state is 409 even when the outcome reference is stale
        next_status(event.status, LifecycleAction.RESOLVE)
        winner = event.find_outcome(outcome_ref)
        if winner is None:
            raise OutcomeNotFoundError(outcome_ref)

        now = utc_now()
        apply_transition(event, LifecycleAction.RESOLVE, now)
        event.winning_outcome_id = winner.id
        event.ends_at = as_utc(ends_at)

        positions = {p.id: p for p in await self._positions.list_open_for_event(db, event.id)}
        wallets_by_user: dict[str, dict[WalletType, Wallet]] = {}
        summary = ResolutionSummary()

        for settlement in settle_positions(list(positions.values()), winner.id):
            position = close_position(
                positions[settlement.position_id], settlement.reason, now, settlement.credit
            )
            await self._positions.save(db, position)
            if settlement.reason == CloseReason.WIN:
                summary.won += 1
            else:
                summary.lost += 1

            if settlement.credit > 0:
                if settlement.user_id not in wallets_by_user:
                    wallets_by_user[settlement.user_id] = await self._wallets.get_wallets(
                        db, settlement.user_id, for_update=True
                    )
                wallets = wallets_by_user[settlement.user_id]
                if WalletType.PROFIT not in wallets:
                    raise WalletNotFoundError(f"{settlement.user_id}/{WalletType.PROFIT.value}")
                wallets[WalletType.PROFIT] = await self._wallets.apply_entry(
                    db,
                    wallets[WalletType.PROFIT],
                    settlement.credit,
                    WalletEntryType.SETTLEMENT_PAYOUT.value,
                    "position",
                    settlement.position_id,
                )
                summary.credited += settlement.credit

        await self._events.update_lifecycle(db, event)
        return summary
