"""WalletApplicationService: wallet listing, transaction log and credits.

Wager debits do not go through here: they run inside the WagerEngine
transaction via the same repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import WalletEntryType, WalletType
from src.pm_wallet.application.schemas import (
    WalletOut,
    WalletsResponse,
    WalletTransactionOut,
    WalletTransactionsResponse,
)
from src.pm_wallet.domain.models import Wallet
from src.pm_wallet.domain.repository import WalletRepositoryProtocol
from src.pm_wallet.infrastructure.persistence import WalletRepository


class WalletApplicationService:
    def __init__(self, repo: WalletRepositoryProtocol | None = None) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    async def _ensure_wallets(self, db: AsyncSession, user_id: str) -> dict[WalletType, Wallet]:
        wallets = await self._repo.get_wallets(db, user_id)
        if len(wallets) == len(WalletType):
            return wallets
        try:
            wallets = await self._repo.create_wallets(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return wallets

    async def list_wallets(self, db: AsyncSession, user_id: str) -> WalletsResponse:
        return WalletsResponse.from_wallets(await self._ensure_wallets(db, user_id))

    async def list_transactions(
        self, db: AsyncSession, user_id: str, wallet_type: WalletType, limit: int
    ) -> WalletTransactionsResponse:
        wallets = await self._ensure_wallets(db, user_id)
        wallet = wallets[wallet_type]
        entries = await self._repo.list_transactions(db, wallet.id, limit)
        return WalletTransactionsResponse(
            wallet=WalletOut.from_domain(wallet),
            transactions=[WalletTransactionOut.from_domain(e) for e in entries],
        )

    async def credit(
        self, db: AsyncSession, user_id: str, wallet_type: WalletType, amount_cents: int
    ) -> WalletsResponse:
        try:
            wallets = await self._repo.create_wallets(db, user_id)
            wallets[wallet_type] = await self._repo.apply_entry(
                db,
                wallets[wallet_type],
                amount_cents,
                WalletEntryType.CREDIT.value,
                "dev_credit",
                None,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WalletsResponse.from_wallets(wallets)
