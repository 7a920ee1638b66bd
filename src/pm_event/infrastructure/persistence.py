"""EventRepository: concrete implementation of EventRepositoryProtocol.

All queries use raw text() SQL (no ORM).
get_event(for_update=True) takes the event row lock; outcome rows are only ever
written while that lock is held, so they are read without their own lock.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import EventStatus
from src.pm_common.id_generator import is_object_id
from src.pm_event.domain.models import Event, Outcome, TraderInfo

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_EVENT_COLUMNS = """
    id, code, ticker, name, name_jp, description, description_jp, rules,
    timezone, event_images_url, status, ends_at,
    participants_count, volume,
    opened_at, closed_at, resolved_at, winning_outcome_id,
    created_at, updated_at
"""

_GET_EVENT_SQL = text(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = :event_id")

_GET_EVENT_FOR_UPDATE_SQL = text(
    f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = :event_id FOR UPDATE"
)

_GET_OUTCOMES_SQL = text("""
    SELECT id, event_id, code, name, name_jp, sort_order,
           min_pledge, max_pledge, max_leverage, min_cash_proportion_for_pool,
           starting_wager, total_pledge, total_wager, estimated_probability,
           created_at
    FROM event_outcomes
    WHERE event_id = :event_id
    ORDER BY sort_order, id
""")

_RESOLVE_BY_ID_SQL = text("SELECT id FROM events WHERE id = :ref")
_RESOLVE_BY_CODE_SQL = text("SELECT id FROM events WHERE code = :ref")

_NEXT_CODE_SQL = text("SELECT nextval('event_code_seq') AS n")

_FIND_CONFLICT_SQL = text("""
    SELECT
        EXISTS (SELECT 1 FROM events WHERE lower(name) = lower(:name)) AS name_taken,
        EXISTS (SELECT 1 FROM events WHERE ticker = :ticker) AS ticker_taken
""")

_INSERT_EVENT_SQL = text("""
    INSERT INTO events
        (id, code, ticker, name, name_jp, description, description_jp, rules,
         timezone, event_images_url, status, ends_at)
    VALUES
        (:id, :code, :ticker, :name, :name_jp, :description, :description_jp, :rules,
         :timezone, :event_images_url, :status, :ends_at)
    RETURNING created_at, updated_at
""")

_INSERT_OUTCOME_SQL = text("""
    INSERT INTO event_outcomes
        (id, event_id, code, name, name_jp, sort_order,
         min_pledge, max_pledge, max_leverage, min_cash_proportion_for_pool,
         starting_wager, total_pledge, total_wager, estimated_probability)
    VALUES
        (:id, :event_id, :code, :name, :name_jp, :sort_order,
         :min_pledge, :max_pledge, :max_leverage, :min_cash_proportion_for_pool,
         :starting_wager, :total_pledge, :total_wager, :estimated_probability)
    RETURNING created_at
""")

_UPDATE_LIFECYCLE_SQL = text("""
    UPDATE events
    SET status = :status,
        ends_at = :ends_at,
        opened_at = :opened_at,
        closed_at = :closed_at,
        resolved_at = :resolved_at,
        winning_outcome_id = :winning_outcome_id
    WHERE id = :id
""")

_UPDATE_EVENT_AGGREGATES_SQL = text("""
    UPDATE events
    SET participants_count = :participants_count,
        volume = :volume
    WHERE id = :id
""")

_UPDATE_OUTCOME_LEDGER_SQL = text("""
    UPDATE event_outcomes
    SET total_pledge = :total_pledge,
        total_wager = :total_wager,
        estimated_probability = :estimated_probability
    WHERE id = :id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_outcome(row: object) -> Outcome:
    return Outcome(
        id=row.id,  # type: ignore[attr-defined]
        event_id=row.event_id,  # type: ignore[attr-defined]
        code=row.code,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        name_jp=row.name_jp,  # type: ignore[attr-defined]
        sort_order=row.sort_order,  # type: ignore[attr-defined]
        trader_info=TraderInfo(
            min_pledge=row.min_pledge,  # type: ignore[attr-defined]
            max_pledge=row.max_pledge,  # type: ignore[attr-defined]
            max_leverage=row.max_leverage,  # type: ignore[attr-defined]
            min_cash_proportion_for_pool=row.min_cash_proportion_for_pool,  # type: ignore[attr-defined]
            starting_wager=row.starting_wager,  # type: ignore[attr-defined]
            total_pledge=row.total_pledge,  # type: ignore[attr-defined]
            total_wager=row.total_wager,  # type: ignore[attr-defined]
            estimated_probability=row.estimated_probability,  # type: ignore[attr-defined]
        ),
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_event(row: object, outcomes: list[Outcome]) -> Event:
    return Event(
        id=row.id,  # type: ignore[attr-defined]
        code=row.code,  # type: ignore[attr-defined]
        ticker=row.ticker,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        name_jp=row.name_jp,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        description_jp=row.description_jp,  # type: ignore[attr-defined]
        rules=row.rules,  # type: ignore[attr-defined]
        timezone=row.timezone,  # type: ignore[attr-defined]
        event_images_url=list(row.event_images_url or []),  # type: ignore[attr-defined]
        status=EventStatus(row.status),  # type: ignore[attr-defined]
        ends_at=row.ends_at,  # type: ignore[attr-defined]
        participants_count=row.participants_count,  # type: ignore[attr-defined]
        volume=row.volume,  # type: ignore[attr-defined]
        opened_at=row.opened_at,  # type: ignore[attr-defined]
        closed_at=row.closed_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
        winning_outcome_id=row.winning_outcome_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        outcomes=outcomes,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class EventRepository:
    """Concrete repository. The caller owns the transaction."""

    async def next_code_number(self, db: AsyncSession) -> int:
        result = await db.execute(_NEXT_CODE_SQL)
        return int(result.scalar_one())

    async def find_conflict(
        self, db: AsyncSession, name: str, ticker: str
    ) -> str | None:
        row = (await db.execute(_FIND_CONFLICT_SQL, {"name": name, "ticker": ticker})).fetchone()
        if row is None:
            return None
        if row.name_taken:
            return "name"
        if row.ticker_taken:
            return "ticker"
        return None

    async def insert_event(self, db: AsyncSession, event: Event) -> Event:
        result = await db.execute(
            _INSERT_EVENT_SQL,
            {
                "id": event.id,
                "code": event.code,
                "ticker": event.ticker,
                "name": event.name,
                "name_jp": event.name_jp,
                "description": event.description,
                "description_jp": event.description_jp,
                "rules": event.rules,
                "timezone": event.timezone,
                "event_images_url": event.event_images_url,
                "status": event.status.value,
                "ends_at": event.ends_at,
            },
        )
        row = result.fetchone()
        if row is not None:
            event.created_at = row.created_at
            event.updated_at = row.updated_at
        return event

    async def resolve_event_id(self, db: AsyncSession, ref: str) -> str | None:
        sql = _RESOLVE_BY_ID_SQL if is_object_id(ref) else _RESOLVE_BY_CODE_SQL
        result = await db.execute(sql, {"ref": ref})
        row = result.fetchone()
        return row.id if row else None

    async def get_event(
        self, db: AsyncSession, event_id: str, for_update: bool = False
    ) -> Event | None:
        sql = _GET_EVENT_FOR_UPDATE_SQL if for_update else _GET_EVENT_SQL
        row = (await db.execute(sql, {"event_id": event_id})).fetchone()
        if row is None:
            return None
        outcome_rows = (await db.execute(_GET_OUTCOMES_SQL, {"event_id": event_id})).fetchall()
        return _row_to_event(row, [_row_to_outcome(r) for r in outcome_rows])

    async def insert_outcome(self, db: AsyncSession, outcome: Outcome) -> Outcome:
        info = outcome.trader_info
        result = await db.execute(
            _INSERT_OUTCOME_SQL,
            {
                "id": outcome.id,
                "event_id": outcome.event_id,
                "code": outcome.code,
                "name": outcome.name,
                "name_jp": outcome.name_jp,
                "sort_order": outcome.sort_order,
                "min_pledge": info.min_pledge,
                "max_pledge": info.max_pledge,
                "max_leverage": info.max_leverage,
                "min_cash_proportion_for_pool": info.min_cash_proportion_for_pool,
                "starting_wager": info.starting_wager,
                "total_pledge": info.total_pledge,
                "total_wager": info.total_wager,
                "estimated_probability": info.estimated_probability,
            },
        )
        row = result.fetchone()
        if row is not None:
            outcome.created_at = row.created_at
        return outcome

    async def update_lifecycle(self, db: AsyncSession, event: Event) -> None:
        await db.execute(
            _UPDATE_LIFECYCLE_SQL,
            {
                "id": event.id,
                "status": event.status.value,
                "ends_at": event.ends_at,
                "opened_at": event.opened_at,
                "closed_at": event.closed_at,
                "resolved_at": event.resolved_at,
                "winning_outcome_id": event.winning_outcome_id,
            },
        )

    async def save_ledger(self, db: AsyncSession, event: Event) -> None:
        """Flush volume, participants and every outcome's aggregates."""
        await db.execute(
            _UPDATE_EVENT_AGGREGATES_SQL,
            {
                "id": event.id,
                "participants_count": event.participants_count,
                "volume": event.volume,
            },
        )
        for outcome in event.outcomes:
            await db.execute(
                _UPDATE_OUTCOME_LEDGER_SQL,
                {
                    "id": outcome.id,
                    "total_pledge": outcome.trader_info.total_pledge,
                    "total_wager": outcome.trader_info.total_wager,
                    "estimated_probability": outcome.trader_info.estimated_probability,
                },
            )
