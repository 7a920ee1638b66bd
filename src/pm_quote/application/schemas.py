"""Pydantic schemas for quotes. Amounts on the wire are currency units."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class QuoteRequest(BaseModel):
    event_id: str = Field(..., min_length=1, description="Event object id or code")
    event_outcome_id: str = Field(..., min_length=1, description="Outcome object id or code")
    pledge: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    leverage: Decimal = Field(Decimal(1), ge=1, max_digits=10, decimal_places=4)
    wager: Decimal | None = Field(None, ge=0)
    loan: Decimal | None = Field(None, ge=0)
    force_leverage: bool = False


class QuoteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    event_id: str
    event_code: str
    event_outcome_id: str
    outcome_code: str
    pledge: float
    leverage: float
    wager: float
    loan: float
    force_leverage: bool
    indicative_payout: float
    before_pledge: float
    before_wager: float
    after_pledge: float
    after_wager: float
    estimated_probability_before: float
    estimated_probability_after: float
    stop_probability: float
    created_at: str
    expires_at: str
