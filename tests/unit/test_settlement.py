"""Tests for WIN / LOSS settlement of open positions."""

from datetime import UTC, datetime
from decimal import Decimal

from src.pm_common.enums import CloseReason
from src.pm_clearing.domain.settlement import settle_position, settle_positions
from src.pm_position.domain.margin import close_position
from src.pm_position.domain.models import Position


def _position(pid: str, outcome_id: str, *, payout: int = 9375, loan: int = 4000) -> Position:
    return Position(
        id=pid,
        user_id="u1",
        event_id="e1",
        outcome_id=outcome_id,
        is_leveraged=loan > 0,
        pledge=1000,
        wager=1000 + loan,
        loan=loan,
        payout=payout,
        leverage=Decimal(1),
        stop_probability=0.0,
    )


def test_win_credits_payout_minus_loan() -> None:
    s = settle_position(_position("p1", "A"), "A")
    assert s.reason == CloseReason.WIN
    assert s.credit == 5375


def test_plain_win_credits_full_payout() -> None:
    s = settle_position(_position("p1", "A", payout=1972, loan=0), "A")
    assert s.credit == 1972


def test_loss_credits_nothing() -> None:
    s = settle_position(_position("p1", "B"), "A")
    assert s.reason == CloseReason.LOSS
    assert s.credit == 0


def test_credit_never_negative() -> None:
    s = settle_position(_position("p1", "A", payout=3000, loan=4000), "A")
    assert s.credit == 0


def test_margin_called_positions_untouched() -> None:
    called = close_position(
        _position("p2", "A"), CloseReason.MARGINCALLED, datetime(2026, 10, 19, tzinfo=UTC)
    )
    settlements = settle_positions([_position("p1", "A"), called, _position("p3", "B")], "A")
    assert [(s.position_id, s.reason) for s in settlements] == [
        ("p1", CloseReason.WIN),
        ("p3", CloseReason.LOSS),
    ]
    assert called.last_reason == CloseReason.MARGINCALLED
