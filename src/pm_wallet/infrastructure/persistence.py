"""WalletRepository: concrete implementation of WalletRepositoryProtocol.

Balance mutations are atomic PostgreSQL UPDATE ... RETURNING guarded by
balance + amount >= 0; zero rows back means the guard failed.

Transaction ownership: the CALLER commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import WalletType
from src.pm_common.errors import InsufficientFundsError
from src.pm_common.id_generator import generate_id
from src.pm_wallet.domain.models import Wallet, WalletTransaction

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_CREATE_WALLET_SQL = text("""
    INSERT INTO wallets (id, user_id, wallet_type, balance)
    VALUES (:id, :user_id, :wallet_type, 0)
    ON CONFLICT (user_id, wallet_type) DO NOTHING
""")

_GET_WALLETS_SQL = text("""
    SELECT id, user_id, wallet_type, balance, created_at, updated_at
    FROM wallets
    WHERE user_id = :user_id
    ORDER BY wallet_type
""")

# Fixed lock order (by id) across wallets of one user
_GET_WALLETS_FOR_UPDATE_SQL = text("""
    SELECT id, user_id, wallet_type, balance, created_at, updated_at
    FROM wallets
    WHERE user_id = :user_id
    ORDER BY id
    FOR UPDATE
""")

_GET_WALLET_SQL = text("""
    SELECT id, user_id, wallet_type, balance, created_at, updated_at
    FROM wallets
    WHERE id = :wallet_id
""")

_APPLY_AMOUNT_SQL = text("""
    UPDATE wallets
    SET balance = balance + :amount
    WHERE id = :wallet_id AND balance + :amount >= 0
    RETURNING id, user_id, wallet_type, balance, created_at, updated_at
""")

_INSERT_TRANSACTION_SQL = text("""
    INSERT INTO wallet_transactions
        (wallet_id, user_id, entry_type, amount, balance_after,
         reference_type, reference_id)
    VALUES
        (:wallet_id, :user_id, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id)
""")

_LIST_TRANSACTIONS_SQL = text("""
    SELECT id, wallet_id, user_id, entry_type, amount, balance_after,
           reference_type, reference_id, created_at
    FROM wallet_transactions
    WHERE wallet_id = :wallet_id
    ORDER BY id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        wallet_type=WalletType(row.wallet_type),  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_transaction(row: object) -> WalletTransaction:
    return WalletTransaction(
        id=row.id,  # type: ignore[attr-defined]
        wallet_id=row.wallet_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class WalletRepository:
    async def create_wallets(
        self, db: AsyncSession, user_id: str
    ) -> dict[WalletType, Wallet]:
        """Idempotent: creates whichever of the three wallets are missing."""
        for wallet_type in WalletType:
            await db.execute(
                _CREATE_WALLET_SQL,
                {"id": generate_id(), "user_id": user_id, "wallet_type": wallet_type.value},
            )
        return await self.get_wallets(db, user_id)

    async def get_wallets(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> dict[WalletType, Wallet]:
        sql = _GET_WALLETS_FOR_UPDATE_SQL if for_update else _GET_WALLETS_SQL
        rows = (await db.execute(sql, {"user_id": user_id})).fetchall()
        wallets = [_row_to_wallet(r) for r in rows]
        return {w.wallet_type: w for w in wallets}

    async def get_wallet(self, db: AsyncSession, wallet_id: str) -> Wallet | None:
        row = (await db.execute(_GET_WALLET_SQL, {"wallet_id": wallet_id})).fetchone()
        return _row_to_wallet(row) if row else None

    async def apply_entry(
        self,
        db: AsyncSession,
        wallet: Wallet,
        amount: int,
        entry_type: str,
        reference_type: str | None,
        reference_id: str | None,
    ) -> Wallet:
        row = (
            await db.execute(_APPLY_AMOUNT_SQL, {"wallet_id": wallet.id, "amount": amount})
        ).fetchone()
        if row is None:
            raise InsufficientFundsError(required=-amount, available=wallet.balance)
        updated = _row_to_wallet(row)
        await db.execute(
            _INSERT_TRANSACTION_SQL,
            {
                "wallet_id": updated.id,
                "user_id": updated.user_id,
                "entry_type": entry_type,
                "amount": amount,
                "balance_after": updated.balance,
                "reference_type": reference_type,
                "reference_id": reference_id,
            },
        )
        return updated

    async def list_transactions(
        self, db: AsyncSession, wallet_id: str, limit: int
    ) -> list[WalletTransaction]:
        rows = (
            await db.execute(_LIST_TRANSACTIONS_SQL, {"wallet_id": wallet_id, "limit": limit})
        ).fetchall()
        return [_row_to_transaction(r) for r in rows]
