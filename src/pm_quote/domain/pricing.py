"""Pricing engine: pure pari-mutuel pricing against the outcome ledger.

A wager w on outcome i buys a w / (pool_i + w) share of the outcome's pool and,
if i wins, that share of the whole pool:

    indicative_payout = floor(w * (pool + w) / (pool_i + w))

payout / w = (pool + w) / (pool_i + w) falls as w grows (pool >= pool_i), so a
larger wager never earns a proportionally larger payout.

A leveraged stake of payout P carrying loan L is worth P * p_i at market.
It stops covering its loan once p_i <= L / P, which is the stop probability.
"""

from dataclasses import dataclass

from src.pm_common.amounts import probability, stop_level
from src.pm_event.domain.ledger import OutcomeState


@dataclass(frozen=True)
class PriceResult:
    indicative_payout: int              # cents
    before_pledge: int
    before_wager: int
    after_pledge: int
    after_wager: int
    estimated_probability_before: float
    estimated_probability_after: float
    stop_probability: float


def indicative_payout(pool_i: int, pool: int, wager: int) -> int:
    if wager <= 0:
        return 0
    return wager * (pool + wager) // (pool_i + wager)


def stop_probability(loan: int, payout: int) -> float:
    """p_i at or below which payout * p_i no longer covers loan."""
    if loan <= 0 or payout <= 0:
        return 0.0
    return stop_level(loan, payout)


def price(state: OutcomeState, pledge: int, wager: int) -> PriceResult:
    """Price a proposed (pledge, wager) increment on the outcome. No side effects."""
    payout = indicative_payout(state.pool, state.total_pool, wager)
    return PriceResult(
        indicative_payout=payout,
        before_pledge=state.total_pledge,
        before_wager=state.total_wager,
        after_pledge=state.total_pledge + pledge,
        after_wager=state.total_wager + wager,
        estimated_probability_before=probability(state.pool, state.total_pool),
        estimated_probability_after=probability(state.pool + wager, state.total_pool + wager),
        stop_probability=stop_probability(wager - pledge, payout),
    )
