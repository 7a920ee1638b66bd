"""Event settlement: decide WIN / LOSS per open position and what to credit.

WIN:  payout - loan goes to the profit wallet (the loan is repaid out of payout).
LOSS: pledge and loan are forfeited, nothing is credited.
Positions already closed (MARGINCALLED) are left as they are.
"""

from dataclasses import dataclass

from src.pm_common.enums import CloseReason
from src.pm_position.domain.models import Position


@dataclass(frozen=True)
class Settlement:
    position_id: str
    user_id: str
    reason: CloseReason
    credit: int          # cents, to the profit wallet


def settle_position(position: Position, winning_outcome_id: str) -> Settlement:
    if position.outcome_id == winning_outcome_id:
        return Settlement(
            position_id=position.id,
            user_id=position.user_id,
            reason=CloseReason.WIN,
            credit=max(position.payout - position.loan, 0),
        )
    return Settlement(
        position_id=position.id,
        user_id=position.user_id,
        reason=CloseReason.LOSS,
        credit=0,
    )


def settle_positions(positions: list[Position], winning_outcome_id: str) -> list[Settlement]:
    return [settle_position(p, winning_outcome_id) for p in positions if p.is_open]
