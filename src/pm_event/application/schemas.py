"""Pydantic schemas for pm_event admin and public endpoints.

Bounds and aggregates are stored in cents and exposed in currency units.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.pm_common.amounts import from_cents
from src.pm_common.datetime_utils import is_valid_timezone, iso
from src.pm_event.domain.models import Event, Outcome

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class EventCreateRequest(BaseModel):
    ticker: str = Field(..., min_length=1, max_length=32, pattern=r"^[A-Z0-9]+$")
    name: str = Field(..., min_length=1, max_length=255)
    name_jp: str | None = Field(None, max_length=255)
    description: str | None = None
    description_jp: str | None = None
    rules: str | None = None
    ends_at: datetime
    timezone: str = Field("UTC", min_length=1)
    event_images_url: list[str] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        if not is_valid_timezone(v):
            raise ValueError(f"Unknown timezone: {v}")
        return v


class OutcomeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    name_jp: str | None = Field(None, max_length=255)
    min_pledge: Decimal | None = Field(None, gt=0, decimal_places=2)
    max_pledge: Decimal | None = Field(None, gt=0, decimal_places=2)
    max_leverage: Decimal | None = Field(None, ge=1)
    min_cash_proportion_for_pool: Decimal | None = Field(None, ge=0, le=1)
    starting_wager: Decimal | None = Field(None, gt=0, decimal_places=2)


class ResolveRequest(BaseModel):
    event_outcome_id: str = Field(..., min_length=1)
    ends_at: datetime
    dry_run: bool = False


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TraderInfoOut(BaseModel):
    min_pledge: float
    max_pledge: float
    max_leverage: float
    estimated_probability: float
    min_cash_proportion_for_pool: float
    starting_wager: float
    total_pledge: float
    total_wager: float


class OutcomeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    event_id: str
    code: str
    name: str
    name_jp: str | None
    sort_order: int
    trader_info: TraderInfoOut
    created_at: str | None

    @classmethod
    def from_domain(cls, o: Outcome) -> "OutcomeResponse":
        info = o.trader_info
        return cls(
            id=o.id,
            event_id=o.event_id,
            code=o.code,
            name=o.name,
            name_jp=o.name_jp,
            sort_order=o.sort_order,
            trader_info=TraderInfoOut(
                min_pledge=from_cents(info.min_pledge),
                max_pledge=from_cents(info.max_pledge),
                max_leverage=float(info.max_leverage),
                estimated_probability=info.estimated_probability,
                min_cash_proportion_for_pool=float(info.min_cash_proportion_for_pool),
                starting_wager=from_cents(info.starting_wager),
                total_pledge=from_cents(info.total_pledge),
                total_wager=from_cents(info.total_wager),
            ),
            created_at=iso(o.created_at),
        )


class EventResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    code: str
    ticker: str
    name: str
    name_jp: str | None
    description: str | None
    description_jp: str | None
    rules: str | None
    timezone: str
    event_images_url: list[str]
    status: str
    ends_at: str | None
    participants_count: int
    volume: float
    opened_at: str | None
    closed_at: str | None
    resolved_at: str | None
    winning_outcome_id: str | None
    outcomes: list[OutcomeResponse]
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, e: Event) -> "EventResponse":
        return cls(
            id=e.id,
            code=e.code,
            ticker=e.ticker,
            name=e.name,
            name_jp=e.name_jp,
            description=e.description,
            description_jp=e.description_jp,
            rules=e.rules,
            timezone=e.timezone,
            event_images_url=list(e.event_images_url),
            status=e.status.value,
            ends_at=iso(e.ends_at),
            participants_count=e.participants_count,
            volume=from_cents(e.volume),
            opened_at=iso(e.opened_at),
            closed_at=iso(e.closed_at),
            resolved_at=iso(e.resolved_at),
            winning_outcome_id=e.winning_outcome_id,
            outcomes=[OutcomeResponse.from_domain(o) for o in e.outcomes],
            created_at=iso(e.created_at),
            updated_at=iso(e.updated_at),
        )
