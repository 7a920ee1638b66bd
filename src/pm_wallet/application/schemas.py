"""Pydantic schemas for pm_wallet API responses. Amounts in currency units."""

from pydantic import BaseModel

from src.pm_common.amounts import from_cents
from src.pm_common.datetime_utils import iso
from src.pm_common.enums import WalletType
from src.pm_wallet.domain.models import Wallet, WalletTransaction


class WalletOut(BaseModel):
    id: str
    type: str
    balance: float

    @classmethod
    def from_domain(cls, w: Wallet) -> "WalletOut":
        return cls(id=w.id, type=w.wallet_type.value, balance=from_cents(w.balance))


class WalletsOut(BaseModel):
    topup: WalletOut | None = None
    profit: WalletOut | None = None
    bonus: WalletOut | None = None


class WalletsResponse(BaseModel):
    success: bool = True
    wallets: WalletsOut

    @classmethod
    def from_wallets(cls, wallets: dict[WalletType, Wallet]) -> "WalletsResponse":
        return cls(
            wallets=WalletsOut(
                **{t.value: WalletOut.from_domain(w) for t, w in wallets.items()}
            )
        )


class WalletTransactionOut(BaseModel):
    id: int
    wallet_id: str
    entry_type: str
    amount: float
    balance_after: float
    reference_type: str | None
    reference_id: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, t: WalletTransaction) -> "WalletTransactionOut":
        return cls(
            id=t.id,
            wallet_id=t.wallet_id,
            entry_type=t.entry_type,
            amount=from_cents(t.amount),
            balance_after=from_cents(t.balance_after),
            reference_type=t.reference_type,
            reference_id=t.reference_id,
            created_at=iso(t.created_at),
        )


class WalletTransactionsResponse(BaseModel):
    wallet: WalletOut
    transactions: list[WalletTransactionOut]
