"""Domain models for pm_position: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import CloseReason, PositionType


@dataclass
class Position:
    """One open bucket per (user, event, outcome, is_leveraged). Amounts in cents, cumulative."""

    id: str
    user_id: str
    event_id: str
    outcome_id: str
    is_leveraged: bool
    pledge: int
    wager: int
    loan: int
    payout: int
    leverage: Decimal
    stop_probability: float
    type: PositionType = PositionType.OPEN
    last_reason: CloseReason | None = None
    settled_amount: int = 0          # cents credited at resolution
    created_at: datetime | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.type == PositionType.OPEN
