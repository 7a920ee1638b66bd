"""Domain models for pm_wallet: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.pm_common.enums import WalletType


@dataclass
class Wallet:
    id: str
    user_id: str
    wallet_type: WalletType
    balance: int                     # cents
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class WalletTransaction:
    id: int                          # BIGSERIAL
    wallet_id: str
    user_id: str
    entry_type: str                  # WalletEntryType value
    amount: int                      # cents, positive=credit negative=debit
    balance_after: int               # cents
    reference_type: str | None = None
    reference_id: str | None = None
    created_at: datetime | None = None
