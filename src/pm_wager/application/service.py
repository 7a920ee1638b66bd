# src/pm_wager/application/service.py
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.amounts import from_cents, to_cents
from src.pm_common.datetime_utils import iso
from src.pm_position.application.schemas import PositionOut
from src.pm_wager.application.schemas import PlaceWagerRequest, PlaceWagerResponse
from src.pm_wager.engine.engine import WagerCommand, WagerEngine, WagerResult

_engine: WagerEngine | None = None


def get_wager_engine() -> WagerEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = WagerEngine()
    return _engine


def _to_command(req: PlaceWagerRequest) -> WagerCommand:
    return WagerCommand(
        event_ref=req.event_id,
        outcome_ref=req.event_outcome_id,
        wallet_id=req.wallet_id,
        pledge=to_cents(req.pledge),
        leverage=req.leverage,
        force_leverage=req.force_leverage,
        wager=to_cents(req.wager) if req.wager is not None else None,
        loan=to_cents(req.loan) if req.loan is not None else None,
        max_payout=to_cents(req.max_payout) if req.max_payout is not None else None,
    )


def _build_response(result: WagerResult) -> PlaceWagerResponse:
    w = result.wager
    outcome = result.event.find_outcome(w.outcome_id)
    return PlaceWagerResponse(
        id=w.id,
        event_id=result.event.code,
        event_outcome_id=w.outcome_id,
        wallet_id=w.wallet_id,
        pledge=from_cents(w.pledge),
        leverage=float(w.leverage),
        wager=from_cents(w.wager),
        loan=from_cents(w.loan),
        force_leverage=w.force_leverage,
        payout=from_cents(w.payout),
        allocation={k: from_cents(v) for k, v in w.allocation.items()},
        position=PositionOut.from_domain(
            result.position, result.event.code, outcome.code if outcome else None
        ),
        margin_called_positions=len(result.margin_called),
        created_at=iso(w.created_at),
    )


async def place_wager(
    req: PlaceWagerRequest,
    user_id: str,
    db: AsyncSession,
    engine: WagerEngine | None = None,
) -> PlaceWagerResponse:
    result = await (engine or get_wager_engine()).place_wager(db, user_id, _to_command(req))
    return _build_response(result)
