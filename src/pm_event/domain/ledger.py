"""Outcome ledger: per-outcome aggregates and pool-share probabilities.

Pool model:
  pool_i  = starting_wager_i + total_wager_i
  pool    = sum(pool_i)
  p_i     = pool_i / pool

A wager of w on outcome i raises pool_i and pool by w, so p_i strictly rises and
every other p_j strictly falls; the p_i always sum to 1. All mutation happens on the
Event aggregate while the caller holds that event's lock and row lock.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.pm_common.amounts import probability
from src.pm_event.domain.models import Event, Outcome, TraderInfo


@dataclass(frozen=True)
class OutcomeState:
    """Snapshot of one outcome plus the event-wide pool it prices against."""

    outcome_id: str
    code: str
    min_pledge: int
    max_pledge: int
    max_leverage: Decimal
    min_cash_proportion_for_pool: Decimal
    starting_wager: int
    total_pledge: int
    total_wager: int
    pool: int            # pool_i
    total_pool: int      # sum of pool_j over the event

    @property
    def estimated_probability(self) -> float:
        return probability(self.pool, self.total_pool)


def outcome_code(index: int) -> str:
    """0 -> "A", 25 -> "Z", 26 -> "AA" (spreadsheet column order)."""
    code = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        code = chr(ord("A") + rem) + code
    return code


def recompute_probabilities(outcomes: list[Outcome]) -> None:
    """Refresh estimated_probability on every outcome from current pools."""
    if not outcomes:
        return
    total = sum(o.trader_info.pool for o in outcomes)
    if total == 0:
        share = probability(1, len(outcomes))
        for o in outcomes:
            o.trader_info.estimated_probability = share
        return
    for o in outcomes:
        o.trader_info.estimated_probability = probability(o.trader_info.pool, total)


def outcome_state(event: Event, outcome: Outcome) -> OutcomeState:
    info: TraderInfo = outcome.trader_info
    return OutcomeState(
        outcome_id=outcome.id,
        code=outcome.code,
        min_pledge=info.min_pledge,
        max_pledge=info.max_pledge,
        max_leverage=info.max_leverage,
        min_cash_proportion_for_pool=info.min_cash_proportion_for_pool,
        starting_wager=info.starting_wager,
        total_pledge=info.total_pledge,
        total_wager=info.total_wager,
        pool=info.pool,
        total_pool=event.total_pool,
    )


def apply_wager(
    event: Event,
    outcome_id: str,
    pledge: int,
    wager: int,
) -> Event:
    """Add an accepted wager to the outcome and event aggregates, in place.

    participants_count counts accepted wagers, so a returning user adds one again.
    """
    outcome = event.find_outcome(outcome_id)
    if outcome is None:
        raise ValueError(f"Outcome {outcome_id} does not belong to event {event.id}")
    if pledge <= 0 or wager < pledge:
        raise ValueError(f"Invalid wager amounts: pledge={pledge} wager={wager}")

    outcome.trader_info.total_pledge += pledge
    outcome.trader_info.total_wager += wager
    event.volume += wager
    event.participants_count += 1
    recompute_probabilities(event.outcomes)
    return event
