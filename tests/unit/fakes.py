"""In-memory repositories conforming to the domain repository Protocols.

Every read returns a deep copy, so services only see their own writes once they
call the repository again, as with a real database.
"""

import copy
from datetime import UTC, datetime
from decimal import Decimal
from itertools import count

from src.pm_common.enums import EventStatus, PositionType, WalletType
from src.pm_common.errors import InsufficientFundsError
from src.pm_common.id_generator import generate_id
from src.pm_event.domain.models import Event, Outcome, TraderInfo
from src.pm_position.domain.models import Position
from src.pm_wager.domain.models import Wager
from src.pm_wallet.domain.models import Wallet, WalletTransaction


def _now() -> datetime:
    return datetime.now(UTC)


def make_event(
    *,
    code: str = "DEV-000001",
    status: EventStatus = EventStatus.OPEN,
    outcomes: int = 2,
    starting_wager: int = 35_000,
    min_pledge: int = 1_000,
    max_pledge: int = 100_000,
    max_leverage: Decimal = Decimal("10"),
    min_cash_proportion: Decimal = Decimal("0"),
) -> Event:
    event_id = generate_id()
    event = Event(
        id=event_id,
        code=code,
        ticker="TEST",
        name=f"Event {code}",
        name_jp=None,
        description=None,
        description_jp=None,
        rules=None,
        timezone="UTC",
        event_images_url=[],
        status=status,
        ends_at=datetime(2030, 1, 1, tzinfo=UTC),
    )
    for i in range(outcomes):
        event.outcomes.append(
            Outcome(
                id=generate_id(),
                event_id=event_id,
                code=chr(ord("A") + i),
                name=f"Outcome {i}",
                name_jp=None,
                sort_order=i,
                trader_info=TraderInfo(
                    min_pledge=min_pledge,
                    max_pledge=max_pledge,
                    max_leverage=max_leverage,
                    min_cash_proportion_for_pool=min_cash_proportion,
                    starting_wager=starting_wager,
                    estimated_probability=1 / outcomes,
                ),
            )
        )
    return event


class FakeEventRepository:
    def __init__(self, *events: Event) -> None:
        self.events: dict[str, Event] = {e.id: copy.deepcopy(e) for e in events}
        self._codes = count(len(events) + 1)
        self.get_calls: list[tuple[str, bool]] = []

    async def next_code_number(self, db: object) -> int:
        return next(self._codes)

    async def find_conflict(self, db: object, name: str, ticker: str) -> str | None:
        for e in self.events.values():
            if e.name.lower() == name.lower():
                return "name"
            if e.ticker == ticker:
                return "ticker"
        return None

    async def insert_event(self, db: object, event: Event) -> Event:
        event.created_at = event.updated_at = _now()
        self.events[event.id] = copy.deepcopy(event)
        return event

    async def resolve_event_id(self, db: object, ref: str) -> str | None:
        for e in self.events.values():
            if ref in (e.id, e.code):
                return e.id
        return None

    async def get_event(self, db: object, event_id: str, for_update: bool = False) -> Event | None:
        self.get_calls.append((event_id, for_update))
        event = self.events.get(event_id)
        return copy.deepcopy(event) if event else None

    async def insert_outcome(self, db: object, outcome: Outcome) -> Outcome:
        outcome.created_at = _now()
        self.events[outcome.event_id].outcomes.append(copy.deepcopy(outcome))
        return outcome

    async def update_lifecycle(self, db: object, event: Event) -> None:
        stored = self.events[event.id]
        stored.status = event.status
        stored.ends_at = event.ends_at
        stored.opened_at = event.opened_at
        stored.closed_at = event.closed_at
        stored.resolved_at = event.resolved_at
        stored.winning_outcome_id = event.winning_outcome_id

    async def save_ledger(self, db: object, event: Event) -> None:
        stored = self.events[event.id]
        stored.participants_count = event.participants_count
        stored.volume = event.volume
        infos = {o.id: o.trader_info for o in event.outcomes}
        for outcome in stored.outcomes:
            if outcome.id in infos:
                outcome.trader_info = copy.deepcopy(infos[outcome.id])


class FakePositionRepository:
    def __init__(self, *positions: Position) -> None:
        self.positions: dict[str, Position] = {p.id: copy.deepcopy(p) for p in positions}

    async def get_open_position(
        self, db: object, user_id: str, event_id: str, outcome_id: str, is_leveraged: bool
    ) -> Position | None:
        for p in self.positions.values():
            if (
                p.is_open
                and (p.user_id, p.event_id, p.outcome_id, p.is_leveraged)
                == (user_id, event_id, outcome_id, is_leveraged)
            ):
                return copy.deepcopy(p)
        return None

    async def save(self, db: object, position: Position) -> Position:
        if position.created_at is None:
            position.created_at = _now()
        position.updated_at = _now()
        self.positions[position.id] = copy.deepcopy(position)
        return copy.deepcopy(position)

    async def list_open_for_event(self, db: object, event_id: str) -> list[Position]:
        return [
            copy.deepcopy(p)
            for p in self.positions.values()
            if p.event_id == event_id and p.is_open
        ]

    async def list_for_user_event(self, db: object, user_id: str, event_id: str) -> list[Position]:
        return [
            copy.deepcopy(p)
            for p in self.positions.values()
            if p.user_id == user_id and p.event_id == event_id
        ]

    async def list_for_user(
        self, db: object, user_id: str, open_only: bool | None = None
    ) -> list[Position]:
        wanted = None
        if open_only is not None:
            wanted = PositionType.OPEN if open_only else PositionType.CLOSED
        return [
            copy.deepcopy(p)
            for p in self.positions.values()
            if p.user_id == user_id and (wanted is None or p.type == wanted)
        ]


class FakeWalletRepository:
    def __init__(self) -> None:
        self.wallets: dict[str, Wallet] = {}
        self.transactions: list[WalletTransaction] = []

    def fund(self, user_id: str, topup: int = 0, profit: int = 0, bonus: int = 0) -> dict[WalletType, Wallet]:
        """Synchronous test helper: create the three wallets with given balances."""
        balances = {WalletType.TOPUP: topup, WalletType.PROFIT: profit, WalletType.BONUS: bonus}
        created = {}
        for wallet_type, balance in balances.items():
            wallet = Wallet(id=generate_id(), user_id=user_id, wallet_type=wallet_type, balance=balance)
            self.wallets[wallet.id] = wallet
            created[wallet_type] = copy.deepcopy(wallet)
        return created

    def balances(self, user_id: str) -> dict[WalletType, int]:
        return {w.wallet_type: w.balance for w in self.wallets.values() if w.user_id == user_id}

    async def create_wallets(self, db: object, user_id: str) -> dict[WalletType, Wallet]:
        existing = {w.wallet_type for w in self.wallets.values() if w.user_id == user_id}
        for wallet_type in WalletType:
            if wallet_type not in existing:
                wallet = Wallet(id=generate_id(), user_id=user_id, wallet_type=wallet_type, balance=0)
                self.wallets[wallet.id] = wallet
        return await self.get_wallets(db, user_id)

    async def get_wallets(
        self, db: object, user_id: str, for_update: bool = False
    ) -> dict[WalletType, Wallet]:
        return {
            w.wallet_type: copy.deepcopy(w) for w in self.wallets.values() if w.user_id == user_id
        }

    async def get_wallet(self, db: object, wallet_id: str) -> Wallet | None:
        wallet = self.wallets.get(wallet_id)
        return copy.deepcopy(wallet) if wallet else None

    async def apply_entry(
        self,
        db: object,
        wallet: Wallet,
        amount: int,
        entry_type: str,
        reference_type: str | None,
        reference_id: str | None,
    ) -> Wallet:
        stored = self.wallets[wallet.id]
        if stored.balance + amount < 0:
            raise InsufficientFundsError(required=-amount, available=stored.balance)
        stored.balance += amount
        self.transactions.append(
            WalletTransaction(
                id=len(self.transactions) + 1,
                wallet_id=stored.id,
                user_id=stored.user_id,
                entry_type=entry_type,
                amount=amount,
                balance_after=stored.balance,
                reference_type=reference_type,
                reference_id=reference_id,
                created_at=_now(),
            )
        )
        return copy.deepcopy(stored)

    async def list_transactions(
        self, db: object, wallet_id: str, limit: int
    ) -> list[WalletTransaction]:
        entries = [t for t in self.transactions if t.wallet_id == wallet_id]
        return list(reversed(entries))[:limit]


class FakeWagerRepository:
    def __init__(self) -> None:
        self.wagers: list[Wager] = []

    async def insert(self, db: object, wager: Wager) -> Wager:
        wager.created_at = _now()
        self.wagers.append(copy.deepcopy(wager))
        return wager


class FakeQuoteCache:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def put(self, quote_id: str, payload: str, ttl_seconds: int) -> None:
        self.store[quote_id] = payload
        self.ttls[quote_id] = ttl_seconds

    async def get(self, quote_id: str) -> str | None:
        return self.store.get(quote_id)
