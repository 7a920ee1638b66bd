"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class EventStatus(str, Enum):
    CREATED = "created"
    OPEN = "open"
    PAUSED = "paused"
    CLOSED = "closed"
    RESOLVED = "resolved"


class LifecycleAction(str, Enum):
    OPEN = "open"
    PAUSE = "pause"
    CLOSE = "close"
    RESOLVE = "resolve"


class WalletType(str, Enum):
    """Wallet variants, listed in debit priority order."""
    TOPUP = "topup"
    PROFIT = "profit"
    BONUS = "bonus"


class WalletEntryType(str, Enum):
    WAGER_DEBIT = "WAGER_DEBIT"
    SETTLEMENT_PAYOUT = "SETTLEMENT_PAYOUT"
    CREDIT = "CREDIT"


class PositionType(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class CloseReason(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"
    MARGINCALLED = "MARGINCALLED"


class PositionClass(str, Enum):
    """Which position bucket a wager lands in for (user, event, outcome)."""
    PLAIN = "plain"
    LEVERAGED = "leveraged"


class BoundsPolicy(str, Enum):
    """STRICT enforces every trader_info bound; TOP_UP waives the min_pledge floor."""
    STRICT = "strict"
    TOP_UP = "top_up"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
