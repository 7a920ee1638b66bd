# src/pm_wallet/domain/repository.py
"""Repository Protocol for wallets and their transaction log."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import WalletType
from src.pm_wallet.domain.models import Wallet, WalletTransaction


class WalletRepositoryProtocol(Protocol):
    async def create_wallets(
        self, db: AsyncSession, user_id: str
    ) -> dict[WalletType, Wallet]: ...

    async def get_wallets(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> dict[WalletType, Wallet]: ...

    async def get_wallet(self, db: AsyncSession, wallet_id: str) -> Wallet | None: ...

    async def apply_entry(
        self,
        db: AsyncSession,
        wallet: Wallet,
        amount: int,
        entry_type: str,
        reference_type: str | None,
        reference_id: str | None,
    ) -> Wallet: ...

    async def list_transactions(
        self, db: AsyncSession, wallet_id: str, limit: int
    ) -> list[WalletTransaction]: ...
