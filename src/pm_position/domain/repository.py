# src/pm_position/domain/repository.py
"""Repository Protocol for positions."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_position.domain.models import Position


class PositionRepositoryProtocol(Protocol):
    async def get_open_position(
        self,
        db: AsyncSession,
        user_id: str,
        event_id: str,
        outcome_id: str,
        is_leveraged: bool,
    ) -> Position | None: ...

    async def save(self, db: AsyncSession, position: Position) -> Position: ...

    async def list_open_for_event(
        self, db: AsyncSession, event_id: str
    ) -> list[Position]: ...

    async def list_for_user_event(
        self, db: AsyncSession, user_id: str, event_id: str
    ) -> list[Position]: ...

    async def list_for_user(
        self, db: AsyncSession, user_id: str, open_only: bool | None = None
    ) -> list[Position]: ...
