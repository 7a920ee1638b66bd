"""Pydantic schemas for wager placement."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.pm_position.application.schemas import PositionOut
from src.pm_quote.application.schemas import QuoteRequest


class PlaceWagerRequest(QuoteRequest):
    wallet_id: str = Field(..., min_length=1)
    max_payout: Decimal | None = Field(
        None, ge=0, description="Reject if the re-priced payout is below this"
    )


class PlaceWagerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    event_id: str
    event_outcome_id: str
    wallet_id: str
    pledge: float
    leverage: float
    wager: float
    loan: float
    force_leverage: bool
    payout: float
    allocation: dict[str, float]
    position: PositionOut
    margin_called_positions: int
    created_at: str | None
