# src/pm_event/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_event.domain.models import Event, Outcome


class EventRepositoryProtocol(Protocol):
    async def next_code_number(self, db: AsyncSession) -> int: ...

    async def find_conflict(
        self, db: AsyncSession, name: str, ticker: str
    ) -> str | None: ...

    async def insert_event(self, db: AsyncSession, event: Event) -> Event: ...

    async def resolve_event_id(self, db: AsyncSession, ref: str) -> str | None: ...

    async def get_event(
        self, db: AsyncSession, event_id: str, for_update: bool = False
    ) -> Event | None: ...

    async def insert_outcome(self, db: AsyncSession, outcome: Outcome) -> Outcome: ...

    async def update_lifecycle(self, db: AsyncSession, event: Event) -> None: ...

    async def save_ledger(self, db: AsyncSession, event: Event) -> None: ...
