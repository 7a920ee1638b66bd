"""Integer arithmetic utilities for the cents-based wager engine.

All pledges, wagers, loans, payouts and balances are stored as int cents.
The HTTP API speaks decimal currency units; conversion happens only at the edge.
Leverage and pool proportions are exact Decimals, never floats.
"""

from decimal import ROUND_CEILING, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")
_PROBABILITY_QUANTUM = Decimal("0.000001")


def to_cents(amount: Decimal | int | float | str) -> int:
    """Convert currency units to cents: Decimal('10.5') -> 1050 (half-up)."""
    value = Decimal(str(amount)) * 100
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> float:
    """Convert cents to currency units for JSON output: 1050 -> 10.5."""
    return float((Decimal(cents) / 100).quantize(_CENT))


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def apply_leverage(pledge_cents: int, leverage: Decimal) -> int:
    """wager = pledge * leverage, rounded half-up to the cent."""
    return int((Decimal(pledge_cents) * leverage).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def effective_leverage(pledge_cents: int, wager_cents: int) -> Decimal:
    """Leverage actually carried by cumulative amounts, 4 decimal places, truncated."""
    if pledge_cents == 0:
        return Decimal(1)
    return (Decimal(wager_cents) / Decimal(pledge_cents)).quantize(
        Decimal("0.0001"), rounding=ROUND_DOWN
    )


def ratio(numerator: int, denominator: int, rounding: str = ROUND_HALF_UP) -> float:
    """Exact integer ratio rounded to 6 decimal places for display."""
    if denominator == 0:
        return 0.0
    value = Decimal(numerator) / Decimal(denominator)
    return float(value.quantize(_PROBABILITY_QUANTUM, rounding=rounding))


# A displayed probability never understates and a displayed stop never overstates,
# so shown probability <= shown stop implies the exact margin test has fired.
def probability(pool_i: int, pool: int) -> float:
    return ratio(pool_i, pool, ROUND_CEILING)


def stop_level(loan: int, payout: int) -> float:
    return ratio(loan, payout, ROUND_FLOOR)
