"""Pydantic schemas for position listings. Amounts in currency units."""

from pydantic import BaseModel, ConfigDict, Field

from src.pm_common.amounts import from_cents
from src.pm_common.datetime_utils import iso
from src.pm_event.domain.models import Event
from src.pm_position.domain.models import Position


class PositionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    user_id: str
    event_id: str                  # event code, e.g. "DEV-000001"
    event_outcome_id: str
    outcome_code: str | None
    is_leveraged: bool
    pledge: float
    wager: float
    loan: float
    payout: float
    leverage: float
    stop_probability: float
    type: str
    last_reason: str | None
    settled_amount: float
    created_at: str | None
    updated_at: str | None
    closed_at: str | None

    @classmethod
    def from_domain(
        cls, p: Position, event_code: str, outcome_code: str | None
    ) -> "PositionOut":
        return cls(
            id=p.id,
            user_id=p.user_id,
            event_id=event_code,
            event_outcome_id=p.outcome_id,
            outcome_code=outcome_code,
            is_leveraged=p.is_leveraged,
            pledge=from_cents(p.pledge),
            wager=from_cents(p.wager),
            loan=from_cents(p.loan),
            payout=from_cents(p.payout),
            leverage=float(p.leverage),
            stop_probability=p.stop_probability,
            type=p.type.value,
            last_reason=p.last_reason.value if p.last_reason else None,
            settled_amount=from_cents(p.settled_amount),
            created_at=iso(p.created_at),
            updated_at=iso(p.updated_at),
            closed_at=iso(p.closed_at),
        )


class PositionGroup(BaseModel):
    """GET /wagers/events/{ref} returns [open group, closed group], empty groups omitted."""

    type: str
    positions: list[PositionOut]


class EventSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    code: str
    ticker: str
    name: str
    status: str
    ends_at: str | None

    @classmethod
    def from_domain(cls, e: Event) -> "EventSummary":
        return cls(
            id=e.id,
            code=e.code,
            ticker=e.ticker,
            name=e.name,
            status=e.status.value,
            ends_at=iso(e.ends_at),
        )


class DashboardEventGroup(BaseModel):
    event: EventSummary
    total_pledge: float
    total_wager: float
    positions: list[PositionOut]


class DashboardPage(BaseModel):
    items: list[DashboardEventGroup]
    page: int
    limit: int
    total: int
    has_more: bool
