# src/pm_wager/domain/repository.py
"""Repository Protocol for the wager log."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_wager.domain.models import Wager


class WagerRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, wager: Wager) -> Wager: ...
