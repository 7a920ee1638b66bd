"""Tests for ResolutionService: settlement, profit credits and dry runs."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fakes import FakeEventRepository, FakePositionRepository, FakeWalletRepository, make_event

from src.pm_clearing.application.service import ResolutionService
from src.pm_common.enums import (
    CloseReason,
    EventStatus,
    PositionType,
    WalletEntryType,
    WalletType,
)
from src.pm_common.errors import (
    EventNotFoundError,
    InvalidTransitionError,
    OutcomeNotFoundError,
    WalletNotFoundError,
)
from src.pm_event.domain.models import Event
from src.pm_position.domain.margin import close_position, open_or_increase
from src.pm_position.domain.models import Position
from src.pm_wager.engine.engine import WagerEngine

ENDS_AT = datetime(2030, 2, 1, 9, 0, tzinfo=UTC)


def _position(event: Event, user_id: str, code: str, pledge: int, wager: int, payout: int) -> Position:
    outcome = event.find_outcome(code)
    assert outcome is not None
    return open_or_increase(
        None,
        user_id=user_id,
        event_id=event.id,
        outcome_id=outcome.id,
        is_leveraged=wager > pledge,
        pledge=pledge,
        wager=wager,
        payout=payout,
    )


class _World:
    def __init__(self, status: EventStatus = EventStatus.CLOSED) -> None:
        self.event = make_event(status=status)
        self.winner = self.event.outcomes[0]
        self.leveraged_win = _position(self.event, "u1", "A", 1000, 5000, 9375)
        self.plain_loss = _position(self.event, "u2", "B", 2000, 2000, 3800)
        self.called = close_position(
            _position(self.event, "u3", "A", 1000, 8000, 14_000),
            CloseReason.MARGINCALLED,
            datetime(2026, 10, 1, tzinfo=UTC),
        )
        self.events = FakeEventRepository(self.event)
        self.positions = FakePositionRepository(self.leveraged_win, self.plain_loss, self.called)
        self.wallets = FakeWalletRepository()
        for user_id in ("u1", "u2", "u3"):
            self.wallets.fund(user_id)
        self.engine = WagerEngine(event_repo=self.events)
        self.service = ResolutionService(
            engine=self.engine,
            event_repo=self.events,
            position_repo=self.positions,
            wallet_repo=self.wallets,
        )
        self.db = AsyncMock()


class TestResolve:
    async def test_settles_positions(self) -> None:
        w = _World()
        assert await w.service.resolve(w.db, w.event.code, "A", ENDS_AT) is True

        stored = w.events.events[w.event.id]
        assert stored.status == EventStatus.RESOLVED
        assert stored.winning_outcome_id == w.winner.id
        assert stored.ends_at == ENDS_AT
        assert stored.resolved_at is not None

        win = w.positions.positions[w.leveraged_win.id]
        assert (win.type, win.last_reason, win.settled_amount) == (
            PositionType.CLOSED,
            CloseReason.WIN,
            5375,
        )
        loss = w.positions.positions[w.plain_loss.id]
        assert (loss.type, loss.last_reason, loss.settled_amount) == (
            PositionType.CLOSED,
            CloseReason.LOSS,
            0,
        )
        assert w.positions.positions[w.called.id].last_reason == CloseReason.MARGINCALLED
        w.db.commit.assert_awaited_once()

    async def test_credits_profit_wallet(self) -> None:
        w = _World()
        await w.service.resolve(w.db, w.event.code, w.winner.id, ENDS_AT)

        assert w.wallets.balances("u1") == {
            WalletType.TOPUP: 0,
            WalletType.PROFIT: 5375,
            WalletType.BONUS: 0,
        }
        assert w.wallets.balances("u2")[WalletType.PROFIT] == 0
        assert w.wallets.balances("u3")[WalletType.PROFIT] == 0
        [entry] = w.wallets.transactions
        assert entry.entry_type == WalletEntryType.SETTLEMENT_PAYOUT.value
        assert (entry.reference_type, entry.reference_id) == ("position", w.leveraged_win.id)

    async def test_requires_closed_event(self) -> None:
        w = _World(status=EventStatus.OPEN)
        with pytest.raises(InvalidTransitionError) as exc:
            await w.service.resolve(w.db, w.event.code, "A", ENDS_AT)
        assert exc.value.http_status == 409
        w.db.rollback.assert_awaited_once()
        assert w.events.events[w.event.id].status == EventStatus.OPEN

    async def test_resolve_twice(self) -> None:
        w = _World()
        await w.service.resolve(w.db, w.event.code, "A", ENDS_AT)
        with pytest.raises(InvalidTransitionError):
            await w.service.resolve(w.db, w.event.code, "B", ENDS_AT)
        assert w.events.events[w.event.id].winning_outcome_id == w.winner.id

    async def test_resolve_again_with_unknown_outcome_is_conflict(self) -> None:
        w = _World()
        await w.service.resolve(w.db, w.event.code, "A", ENDS_AT)
        with pytest.raises(InvalidTransitionError) as exc:
            await w.service.resolve(w.db, w.event.code, "Z", ENDS_AT)
        assert exc.value.http_status == 409

    async def test_open_event_with_unknown_outcome_is_conflict(self) -> None:
        w = _World(status=EventStatus.OPEN)
        with pytest.raises(InvalidTransitionError):
            await w.service.resolve(w.db, w.event.code, "Z", ENDS_AT)

    async def test_event_lock_released_after_resolution(self) -> None:
        w = _World()
        w.engine.lock_for(w.event.id)
        await w.service.resolve(w.db, w.event.code, "A", ENDS_AT)
        assert w.event.id not in w.engine._event_locks

    async def test_failed_resolution_keeps_event_lock(self) -> None:
        w = _World(status=EventStatus.OPEN)
        with pytest.raises(InvalidTransitionError):
            await w.service.resolve(w.db, w.event.code, "A", ENDS_AT)
        assert w.event.id in w.engine._event_locks

    async def test_unknown_outcome(self) -> None:
        w = _World()
        with pytest.raises(OutcomeNotFoundError) as exc:
            await w.service.resolve(w.db, w.event.code, "Z", ENDS_AT)
        assert exc.value.http_status == 404

    async def test_unknown_event(self) -> None:
        w = _World()
        with pytest.raises(EventNotFoundError):
            await w.service.resolve(w.db, "DEV-000404", "A", ENDS_AT)

    async def test_missing_profit_wallet(self) -> None:
        w = _World()
        w.wallets.wallets.clear()
        with pytest.raises(WalletNotFoundError):
            await w.service.resolve(w.db, w.event.code, "A", ENDS_AT)
        w.db.rollback.assert_awaited_once()
        w.db.commit.assert_not_awaited()


class TestDryRun:
    async def test_closed_event_would_resolve(self) -> None:
        w = _World()
        assert await w.service.resolve(w.db, w.event.code, "A", ENDS_AT, dry_run=True) is True
        assert w.events.events[w.event.id].status == EventStatus.CLOSED
        assert w.positions.positions[w.leveraged_win.id].is_open
        assert w.wallets.transactions == []
        assert all(not for_update for _, for_update in w.events.get_calls)
        w.db.commit.assert_not_awaited()

    async def test_open_event_would_not(self) -> None:
        w = _World(status=EventStatus.OPEN)
        assert await w.service.resolve(w.db, w.event.code, "A", ENDS_AT, dry_run=True) is False

    async def test_unknown_outcome_would_not(self) -> None:
        w = _World()
        assert await w.service.resolve(w.db, w.event.code, "Z", ENDS_AT, dry_run=True) is False

    async def test_unknown_event_still_404(self) -> None:
        w = _World()
        with pytest.raises(EventNotFoundError):
            await w.service.resolve(w.db, "DEV-000404", "A", ENDS_AT, dry_run=True)
