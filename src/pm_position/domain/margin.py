"""Position manager domain logic: open/increase, stop probability, margin calls.

A position's marked value is payout * p_i. Once p_i <= loan / payout
(the stop probability) the pledge no longer covers the loan and the position is
force-closed as MARGINCALLED. The comparison is exact integer arithmetic on
pools, never on the rounded probability:

    pool_i * payout * 10000 <= loan * (10000 + buffer_bps) * pool
"""

from datetime import datetime

from src.pm_common.amounts import effective_leverage
from src.pm_common.enums import CloseReason, PositionType
from src.pm_common.id_generator import generate_id
from src.pm_event.domain.models import Event
from src.pm_position.domain.models import Position
from src.pm_quote.domain.pricing import stop_probability

_BPS = 10_000


def open_or_increase(
    existing: Position | None,
    *,
    user_id: str,
    event_id: str,
    outcome_id: str,
    is_leveraged: bool,
    pledge: int,
    wager: int,
    payout: int,
) -> Position:
    """Create a position for the bucket or add the increment to the open one."""
    if existing is not None and not existing.is_open:
        raise ValueError(f"Position {existing.id} is closed and cannot be increased")

    if existing is None:
        position = Position(
            id=generate_id(),
            user_id=user_id,
            event_id=event_id,
            outcome_id=outcome_id,
            is_leveraged=is_leveraged,
            pledge=0,
            wager=0,
            loan=0,
            payout=0,
            leverage=effective_leverage(0, 0),
            stop_probability=0.0,
        )
    else:
        position = existing

    position.pledge += pledge
    position.wager += wager
    position.loan = position.wager - position.pledge
    position.payout += payout
    position.leverage = effective_leverage(position.pledge, position.wager)
    position.stop_probability = stop_probability(position.loan, position.payout)
    return position


def is_margin_called(position: Position, pool_i: int, pool: int, buffer_bps: int = 0) -> bool:
    if not position.is_open or position.loan <= 0 or pool <= 0:
        return False
    return pool_i * position.payout * _BPS <= position.loan * (_BPS + buffer_bps) * pool


def find_margin_calls(
    event: Event, positions: list[Position], buffer_bps: int = 0
) -> list[Position]:
    """Open leveraged positions whose outcome probability sits at or below their stop."""
    pools = {o.id: o.trader_info.pool for o in event.outcomes}
    total = event.total_pool
    return [
        p
        for p in positions
        if p.is_leveraged
        and p.outcome_id in pools
        and is_margin_called(p, pools[p.outcome_id], total, buffer_bps)
    ]


def close_position(
    position: Position, reason: CloseReason, now: datetime, settled_amount: int = 0
) -> Position:
    if not position.is_open:
        raise ValueError(f"Position {position.id} is already closed")
    position.type = PositionType.CLOSED
    position.last_reason = reason
    position.settled_amount = settled_amount
    position.closed_at = now
    return position
