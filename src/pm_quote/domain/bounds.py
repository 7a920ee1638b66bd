"""Bound checks for a proposed wager against an outcome's trader_info.

Also resolves the two things force_leverage decides on the wire:
  - PositionClass: which position bucket the wager lands in.
  - BoundsPolicy: whether the min_pledge floor applies to this increment.
"""

from decimal import Decimal

from src.pm_common.amounts import apply_leverage, from_cents
from src.pm_common.enums import BoundsPolicy, PositionClass
from src.pm_common.errors import OutOfBoundsError, WagerValidationError
from src.pm_event.domain.ledger import OutcomeState

# Client-computed wager/loan may differ from ours by rounding
_AMOUNT_TOLERANCE_CENTS = 1


def position_class_for(leverage: Decimal, force_leverage: bool) -> PositionClass:
    if leverage > 1 or force_leverage:
        return PositionClass.LEVERAGED
    return PositionClass.PLAIN


def bounds_policy_for(force_leverage: bool) -> BoundsPolicy:
    return BoundsPolicy.TOP_UP if force_leverage else BoundsPolicy.STRICT


def resolve_amounts(
    pledge: int,
    leverage: Decimal,
    wager: int | None,
    loan: int | None,
) -> tuple[int, int]:
    """Derive (wager, loan) in cents and cross-check client-sent values.

    Raises WagerValidationError (400) on a malformed proposal.
    """
    if pledge <= 0:
        raise WagerValidationError("pledge must be positive")
    if leverage < 1:
        raise WagerValidationError("leverage must be at least 1")
    expected_wager = apply_leverage(pledge, leverage)
    expected_loan = expected_wager - pledge
    if wager is not None and abs(wager - expected_wager) > _AMOUNT_TOLERANCE_CENTS:
        raise WagerValidationError(
            f"wager must equal pledge x leverage ({from_cents(expected_wager)})"
        )
    if loan is not None and abs(loan - expected_loan) > _AMOUNT_TOLERANCE_CENTS:
        raise WagerValidationError(
            f"loan must equal wager - pledge ({from_cents(expected_loan)})"
        )
    return expected_wager, expected_loan


def check_bounds(
    state: OutcomeState,
    pledge: int,
    wager: int,
    leverage: Decimal,
    policy: BoundsPolicy,
) -> None:
    """Raise OutOfBoundsError (409) if the increment violates trader_info bounds."""
    if policy == BoundsPolicy.STRICT and pledge < state.min_pledge:
        raise OutOfBoundsError(
            f"pledge {from_cents(pledge)} below min_pledge {from_cents(state.min_pledge)}"
        )
    if pledge > state.max_pledge:
        raise OutOfBoundsError(
            f"pledge {from_cents(pledge)} above max_pledge {from_cents(state.max_pledge)}"
        )
    if leverage > state.max_leverage:
        raise OutOfBoundsError(f"leverage {leverage} above max_leverage {state.max_leverage}")

    min_cash = state.min_cash_proportion_for_pool
    if min_cash > 0:
        cash = state.starting_wager + state.total_pledge + pledge
        pool_after = state.pool + wager
        if Decimal(cash) < min_cash * Decimal(pool_after):
            raise OutOfBoundsError(
                f"cash proportion of the outcome pool would fall below {min_cash}"
            )
