"""Domain models for pm_event: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import EventStatus


@dataclass
class TraderInfo:
    """Per-outcome bounds and ledger aggregates. Amounts in cents."""

    min_pledge: int
    max_pledge: int
    max_leverage: Decimal
    min_cash_proportion_for_pool: Decimal
    starting_wager: int
    total_pledge: int = 0
    total_wager: int = 0
    estimated_probability: float = 0.0

    @property
    def pool(self) -> int:
        return self.starting_wager + self.total_wager


@dataclass
class Outcome:
    id: str
    event_id: str
    code: str            # "A", "B", ... in creation order
    name: str
    name_jp: str | None
    sort_order: int
    trader_info: TraderInfo
    created_at: datetime | None = None


@dataclass
class Event:
    id: str
    code: str            # "DEV-000001"
    ticker: str
    name: str
    name_jp: str | None
    description: str | None
    description_jp: str | None
    rules: str | None
    timezone: str
    event_images_url: list[str]
    status: EventStatus
    ends_at: datetime
    participants_count: int = 0
    volume: int = 0      # cents, cumulative wager
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    resolved_at: datetime | None = None
    winning_outcome_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    outcomes: list[Outcome] = field(default_factory=list)

    def find_outcome(self, ref: str) -> Outcome | None:
        """Look up an outcome by object id or by code ("A")."""
        for outcome in self.outcomes:
            if outcome.id == ref or outcome.code == ref:
                return outcome
        return None

    @property
    def total_pool(self) -> int:
        return sum(o.trader_info.pool for o in self.outcomes)
