"""Domain models for pm_wager: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass
class Wager:
    """Immutable record of one accepted wager. Amounts in cents."""

    id: str
    user_id: str
    event_id: str
    outcome_id: str
    position_id: str
    wallet_id: str
    pledge: int
    wager: int
    loan: int
    leverage: Decimal
    force_leverage: bool
    payout: int
    allocation: dict[str, int] = field(default_factory=dict)   # wallet_type -> cents debited
    created_at: datetime | None = None
