"""PositionRepository: concrete implementation of PositionRepositoryProtocol.

A partial unique index on (user_id, event_id, outcome_id, is_leveraged)
WHERE type = 'open' keeps at most one open position per bucket.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import CloseReason, PositionType
from src.pm_position.domain.models import Position

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, user_id, event_id, outcome_id, is_leveraged,
    pledge, wager, loan, payout, leverage, stop_probability,
    type, last_reason, settled_amount, created_at, updated_at, closed_at
"""

_GET_OPEN_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM positions
    WHERE user_id = :user_id AND event_id = :event_id
      AND outcome_id = :outcome_id AND is_leveraged = :is_leveraged
      AND type = 'open'
    FOR UPDATE
""")

_UPSERT_SQL = text(f"""
    INSERT INTO positions
        (id, user_id, event_id, outcome_id, is_leveraged,
         pledge, wager, loan, payout, leverage, stop_probability,
         type, last_reason, settled_amount, closed_at)
    VALUES
        (:id, :user_id, :event_id, :outcome_id, :is_leveraged,
         :pledge, :wager, :loan, :payout, :leverage, :stop_probability,
         :type, :last_reason, :settled_amount, :closed_at)
    ON CONFLICT (id) DO UPDATE SET
        pledge = EXCLUDED.pledge,
        wager = EXCLUDED.wager,
        loan = EXCLUDED.loan,
        payout = EXCLUDED.payout,
        leverage = EXCLUDED.leverage,
        stop_probability = EXCLUDED.stop_probability,
        type = EXCLUDED.type,
        last_reason = EXCLUDED.last_reason,
        settled_amount = EXCLUDED.settled_amount,
        closed_at = EXCLUDED.closed_at
    RETURNING {_COLUMNS}
""")

_LIST_OPEN_FOR_EVENT_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM positions
    WHERE event_id = :event_id AND type = 'open'
    ORDER BY id
    FOR UPDATE
""")

_LIST_FOR_USER_EVENT_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM positions
    WHERE user_id = :user_id AND event_id = :event_id
    ORDER BY created_at DESC, id DESC
""")

_LIST_FOR_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM positions
    WHERE user_id = :user_id
      AND (CAST(:type AS TEXT) IS NULL OR type = CAST(:type AS TEXT))
    ORDER BY created_at DESC, id DESC
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_position(row: object) -> Position:
    last_reason = row.last_reason  # type: ignore[attr-defined]
    return Position(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        event_id=row.event_id,  # type: ignore[attr-defined]
        outcome_id=row.outcome_id,  # type: ignore[attr-defined]
        is_leveraged=row.is_leveraged,  # type: ignore[attr-defined]
        pledge=row.pledge,  # type: ignore[attr-defined]
        wager=row.wager,  # type: ignore[attr-defined]
        loan=row.loan,  # type: ignore[attr-defined]
        payout=row.payout,  # type: ignore[attr-defined]
        leverage=row.leverage,  # type: ignore[attr-defined]
        stop_probability=row.stop_probability,  # type: ignore[attr-defined]
        type=PositionType(row.type),  # type: ignore[attr-defined]
        last_reason=CloseReason(last_reason) if last_reason else None,
        settled_amount=row.settled_amount,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        closed_at=row.closed_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PositionRepository:
    async def get_open_position(
        self,
        db: AsyncSession,
        user_id: str,
        event_id: str,
        outcome_id: str,
        is_leveraged: bool,
    ) -> Position | None:
        row = (
            await db.execute(
                _GET_OPEN_SQL,
                {
                    "user_id": user_id,
                    "event_id": event_id,
                    "outcome_id": outcome_id,
                    "is_leveraged": is_leveraged,
                },
            )
        ).fetchone()
        return _row_to_position(row) if row else None

    async def save(self, db: AsyncSession, position: Position) -> Position:
        row = (
            await db.execute(
                _UPSERT_SQL,
                {
                    "id": position.id,
                    "user_id": position.user_id,
                    "event_id": position.event_id,
                    "outcome_id": position.outcome_id,
                    "is_leveraged": position.is_leveraged,
                    "pledge": position.pledge,
                    "wager": position.wager,
                    "loan": position.loan,
                    "payout": position.payout,
                    "leverage": position.leverage,
                    "stop_probability": position.stop_probability,
                    "type": position.type.value,
                    "last_reason": position.last_reason.value if position.last_reason else None,
                    "settled_amount": position.settled_amount,
                    "closed_at": position.closed_at,
                },
            )
        ).fetchone()
        return _row_to_position(row) if row else position

    async def list_open_for_event(
        self, db: AsyncSession, event_id: str
    ) -> list[Position]:
        rows = (await db.execute(_LIST_OPEN_FOR_EVENT_SQL, {"event_id": event_id})).fetchall()
        return [_row_to_position(r) for r in rows]

    async def list_for_user_event(
        self, db: AsyncSession, user_id: str, event_id: str
    ) -> list[Position]:
        rows = (
            await db.execute(
                _LIST_FOR_USER_EVENT_SQL, {"user_id": user_id, "event_id": event_id}
            )
        ).fetchall()
        return [_row_to_position(r) for r in rows]

    async def list_for_user(
        self, db: AsyncSession, user_id: str, open_only: bool | None = None
    ) -> list[Position]:
        if open_only is None:
            type_filter = None
        else:
            type_filter = PositionType.OPEN.value if open_only else PositionType.CLOSED.value
        rows = (
            await db.execute(_LIST_FOR_USER_SQL, {"user_id": user_id, "type": type_filter})
        ).fetchall()
        return [_row_to_position(r) for r in rows]
