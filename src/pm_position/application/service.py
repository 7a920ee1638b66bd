"""PositionApplicationService: read side of the position manager.

Both listings are read-only; no commit/rollback needed.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.amounts import from_cents
from src.pm_common.enums import PositionType
from src.pm_common.errors import EventNotFoundError
from src.pm_event.domain.models import Event
from src.pm_event.domain.repository import EventRepositoryProtocol
from src.pm_event.infrastructure.persistence import EventRepository
from src.pm_position.application.schemas import (
    DashboardEventGroup,
    DashboardPage,
    EventSummary,
    PositionGroup,
    PositionOut,
)
from src.pm_position.domain.models import Position
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository


def _position_out(p: Position, event: Event) -> PositionOut:
    outcome = event.find_outcome(p.outcome_id)
    return PositionOut.from_domain(p, event.code, outcome.code if outcome else None)


class PositionApplicationService:
    def __init__(
        self,
        repo: PositionRepositoryProtocol | None = None,
        event_repo: EventRepositoryProtocol | None = None,
    ) -> None:
        self._repo: PositionRepositoryProtocol = repo or PositionRepository()
        self._events: EventRepositoryProtocol = event_repo or EventRepository()

    async def list_for_event(
        self, db: AsyncSession, user_id: str, event_ref: str
    ) -> list[PositionGroup]:
        event_id = await self._events.resolve_event_id(db, event_ref)
        event = await self._events.get_event(db, event_id) if event_id else None
        if event is None:
            raise EventNotFoundError(event_ref)

        positions = await self._repo.list_for_user_event(db, user_id, event.id)
        groups: list[PositionGroup] = []
        for position_type in (PositionType.OPEN, PositionType.CLOSED):
            members = [_position_out(p, event) for p in positions if p.type == position_type]
            if members:
                groups.append(PositionGroup(type=position_type.value, positions=members))
        return groups

    async def dashboard(
        self,
        db: AsyncSession,
        user_id: str,
        active: bool,
        paginate: bool,
        page: int,
        limit: int,
    ) -> list[DashboardEventGroup] | DashboardPage:
        """Group the caller's open (active) or closed (inactive) positions by event."""
        positions = await self._repo.list_for_user(db, user_id, open_only=active)

        by_event: dict[str, list[Position]] = {}
        for p in positions:
            by_event.setdefault(p.event_id, []).append(p)

        groups: list[DashboardEventGroup] = []
        for event_id, members in by_event.items():
            event = await self._events.get_event(db, event_id)
            if event is None:
                continue
            groups.append(
                DashboardEventGroup(
                    event=EventSummary.from_domain(event),
                    total_pledge=from_cents(sum(p.pledge for p in members)),
                    total_wager=from_cents(sum(p.wager for p in members)),
                    positions=[_position_out(p, event) for p in members],
                )
            )

        if not paginate:
            return groups
        start = (page - 1) * limit
        items = groups[start:start + limit]
        return DashboardPage(
            items=items,
            page=page,
            limit=limit,
            total=len(groups),
            has_more=start + limit < len(groups),
        )
