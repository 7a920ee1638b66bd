"""Wallet allocator: splits a wager's pledge across a user's three wallets.

Fixed waterfall, in order:
  1. topup  up to its full balance
  2. profit up to its full balance
  3. bonus  up to min(balance, 10 units) per wager

Either the whole amount is allocated or InsufficientFundsError is raised and
nothing is debited.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from src.pm_common.enums import WalletType
from src.pm_common.errors import InsufficientFundsError

BONUS_CAP_PER_WAGER = 1_000  # cents (10 units)

DEBIT_ORDER: tuple[WalletType, ...] = (WalletType.TOPUP, WalletType.PROFIT, WalletType.BONUS)

# None means no per-wager cap
_PER_WAGER_CAP: dict[WalletType, int | None] = {
    WalletType.TOPUP: None,
    WalletType.PROFIT: None,
    WalletType.BONUS: BONUS_CAP_PER_WAGER,
}


@dataclass(frozen=True)
class Allocation:
    topup: int = 0
    profit: int = 0
    bonus: int = 0

    @property
    def total(self) -> int:
        return self.topup + self.profit + self.bonus

    def amount_for(self, wallet_type: WalletType) -> int:
        return int(getattr(self, wallet_type.value))

    def as_dict(self) -> dict[str, int]:
        return {t.value: self.amount_for(t) for t in DEBIT_ORDER}


def spendable(wallet_type: WalletType, balance: int) -> int:
    """How much of this wallet a single wager may consume."""
    cap = _PER_WAGER_CAP[wallet_type]
    usable = max(balance, 0)
    return usable if cap is None else min(usable, cap)


def allocate(balances: Mapping[WalletType, int], amount: int) -> Allocation:
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")

    remaining = amount
    taken: dict[str, int] = {}
    for wallet_type in DEBIT_ORDER:
        take = min(remaining, spendable(wallet_type, balances.get(wallet_type, 0)))
        taken[wallet_type.value] = take
        remaining -= take

    if remaining > 0:
        raise InsufficientFundsError(required=amount, available=amount - remaining)
    return Allocation(**taken)
