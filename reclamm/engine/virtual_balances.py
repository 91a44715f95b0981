"""Virtual balance engine for reClAMM pools.

Virtual balances are phantom liquidity added to the real balances to shape
the price curve. They move for two reasons:

1. A price ratio update is in flight: the balances are re-solved so that the
   pool keeps its centeredness under the interpolated price ratio.
2. The pool drifted outside its target range (centeredness < margin): the
   overvalued side's virtual balance decays exponentially with time and the
   undervalued side is re-solved, moving the range toward the market price.

All functions are pure. Callers persist the returned balances together with
the timestamp they were computed for.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from reclamm.constants import PRICE_SHIFT_EXPONENT_INTERNAL_ADJUSTMENT
from reclamm.math.fixed_point import ONE_18, ONE_36, Bfp, ProductOutOfBounds, sqrt_36

from .centeredness import compute_centeredness, is_above_center, is_pool_within_target_range
from .errors import (
    InvalidCenterednessMargin,
    InvalidDailyPriceShiftExponent,
    NonPositiveVirtualBalance,
    TimestampRegression,
    VirtualBalanceDenominatorError,
    ZeroCenterednessError,
)
from .price_ratio import (
    PriceRatioState,
    compute_fourth_root_price_ratio,
    is_price_ratio_updating,
)

logger = structlog.get_logger()


# =============================================================================
# Daily price shift conversions
# =============================================================================


def to_daily_price_shift_base(daily_price_shift_exponent: int) -> Bfp:
    """Convert an external daily rate (1e18 = 100%/day) to the per-second decay base.

    base = 1 - exponent / K. The integer division truncates, so converting back
    with to_daily_price_shift_exponent does not necessarily return the input.

    Raises:
        InvalidDailyPriceShiftExponent: If the exponent is negative or would
            make the base non-positive
    """
    if daily_price_shift_exponent < 0:
        raise InvalidDailyPriceShiftExponent(
            f"Daily price shift exponent must be non-negative, got {daily_price_shift_exponent}"
        )
    shift = daily_price_shift_exponent // PRICE_SHIFT_EXPONENT_INTERNAL_ADJUSTMENT
    if shift >= ONE_18:
        raise InvalidDailyPriceShiftExponent(
            f"Daily price shift exponent {daily_price_shift_exponent} is too large"
        )
    return Bfp(ONE_18 - shift)


def to_daily_price_shift_exponent(daily_price_shift_base: Bfp) -> int:
    """Convert a per-second decay base back to the external daily rate.

    Lossy: the result is a multiple of K and may be below the exponent the
    base was derived from.
    """
    return daily_price_shift_base.complement().value * PRICE_SHIFT_EXPONENT_INTERNAL_ADJUSTMENT


# =============================================================================
# Virtual balance solves
# =============================================================================


def _token_indices(is_pool_above_center: bool) -> tuple[int, int]:
    """Return (undervalued, overvalued) token indices."""
    return (0, 1) if is_pool_above_center else (1, 0)


def compute_virtual_balances_updating_price_ratio(
    current_fourth_root_price_ratio: Bfp,
    balances: Sequence[Bfp],
    last_virtual_balances: Sequence[Bfp],
    is_pool_above_center: bool,
) -> tuple[Bfp, Bfp]:
    """Re-solve virtual balances for a new price ratio, preserving centeredness.

    With C the current centeredness and Q0 = r^2, Vu is the positive root of

        (Q0 - 1) * Vu^2 - Ru * (1 + C) * Vu - Ru^2 * C = 0

    i.e.

        Vu = Ru * (1 + C + sqrt(1 + C * (C + 4 * Q0 - 2))) / (2 * (Q0 - 1))
        Vo = Ro * Vu / (C * Ru)

    The square-root operand is assembled as a 36-decimal integer so the root
    keeps full 18-decimal precision.

    Raises:
        ZeroCenterednessError: If the pool sits at an edge of its range
    """
    undervalued, overvalued = _token_indices(is_pool_above_center)
    balance_undervalued = balances[undervalued].value
    balance_overvalued = balances[overvalued].value

    centeredness = compute_centeredness(balances, last_virtual_balances).value
    if centeredness == 0:
        raise ZeroCenterednessError(
            "Cannot preserve centeredness while a real balance is zero"
        )

    sqrt_price_ratio = current_fourth_root_price_ratio.mul_down(current_fourth_root_price_ratio).value

    root = sqrt_36(centeredness * (centeredness + 4 * sqrt_price_ratio - 2 * ONE_18) + ONE_36)
    virtual_undervalued = (balance_undervalued * (ONE_18 + centeredness + root)) // (
        2 * (sqrt_price_ratio - ONE_18)
    )
    virtual_overvalued = (balance_overvalued * virtual_undervalued * ONE_18) // (
        centeredness * balance_undervalued
    )

    return _ordered(undervalued, virtual_undervalued, virtual_overvalued)


def compute_virtual_balances_updating_price_range(
    balances: Sequence[Bfp],
    virtual_balances: Sequence[Bfp],
    is_pool_above_center: bool,
    daily_price_shift_base: Bfp,
    current_fourth_root_price_ratio: Bfp,
    elapsed_seconds: int,
) -> tuple[Bfp, Bfp]:
    """Move the price range toward the market while the pool is out of range.

    The overvalued virtual balance decays, then the undervalued one is solved
    so that the price ratio stays Q0^2 (Q0 = r^2):

        Vo' = Vo * base ^ elapsed
        Vu' = Ru * (Vo' + Ro) / ((Q0 - 1) * Vo' - Ro)

    Vo' never drops below Ro / (r - 1), the value at which the pool would be
    perfectly centered. When base ^ elapsed is too small for the exp domain
    the decay is taken as zero and Vo' lands on that floor.

    Raises:
        VirtualBalanceDenominatorError: If (Q0 - 1) * Vo' - Ro <= 0
        NonPositiveVirtualBalance: If a solved balance is zero
    """
    undervalued, overvalued = _token_indices(is_pool_above_center)
    balance_undervalued = balances[undervalued]
    balance_overvalued = balances[overvalued]

    if daily_price_shift_base.value == ONE_18:
        decay = Bfp(ONE_18)
    else:
        try:
            decay = daily_price_shift_base.pow_down(Bfp(elapsed_seconds * ONE_18))
        except ProductOutOfBounds:
            # ln(base) * elapsed below MIN_NATURAL_EXPONENT
            decay = Bfp(0)

    virtual_overvalued = virtual_balances[overvalued].mul_down(decay)
    centered_virtual_overvalued = balance_overvalued.div_down(
        current_fourth_root_price_ratio.sub(Bfp(ONE_18))
    )
    if virtual_overvalued < centered_virtual_overvalued:
        virtual_overvalued = centered_virtual_overvalued

    sqrt_price_ratio = current_fourth_root_price_ratio.mul_down(current_fourth_root_price_ratio)
    denominator = (
        sqrt_price_ratio.sub(Bfp(ONE_18)).mul_down(virtual_overvalued).value
        - balance_overvalued.value
    )
    if denominator <= 0:
        raise VirtualBalanceDenominatorError(
            f"Range-tracking denominator is {denominator} "
            f"(virtual overvalued {virtual_overvalued.value}, balance overvalued "
            f"{balance_overvalued.value})"
        )

    virtual_undervalued = (
        balance_undervalued.value * (virtual_overvalued.value + balance_overvalued.value)
    ) // denominator

    return _ordered(undervalued, virtual_undervalued, virtual_overvalued.value)


def _ordered(undervalued: int, virtual_undervalued: int, virtual_overvalued: int) -> tuple[Bfp, Bfp]:
    if virtual_undervalued <= 0 or virtual_overvalued <= 0:
        raise NonPositiveVirtualBalance(
            f"Virtual balances must be positive, got undervalued={virtual_undervalued} "
            f"overvalued={virtual_overvalued}"
        )
    if undervalued == 0:
        return Bfp(virtual_undervalued), Bfp(virtual_overvalued)
    return Bfp(virtual_overvalued), Bfp(virtual_undervalued)


# =============================================================================
# Orchestration
# =============================================================================


def compute_current_virtual_balances(
    balances: Sequence[Bfp],
    last_virtual_balances: Sequence[Bfp],
    daily_price_shift_base: Bfp,
    last_timestamp: int,
    current_timestamp: int,
    centeredness_margin: Bfp,
    price_ratio_state: PriceRatioState,
) -> tuple[tuple[Bfp, Bfp], bool]:
    """Compute up-to-date virtual balances.

    Algorithm:
        1. Same instant as the last update: nothing to do
        2. Interpolate the fourth root of the price ratio at current_timestamp
        3. Fix the above/below-center side from the last virtual balances
        4. Price ratio update window active: centeredness-preserving solve
        5. Outside the target range (using step 4's balances): range-tracking solve

    Args:
        balances: Real balances (18-decimal)
        last_virtual_balances: Persisted virtual balances
        daily_price_shift_base: Per-second decay base (1 - tau)
        last_timestamp: Time the virtual balances were last persisted
        current_timestamp: Current ledger time
        centeredness_margin: Target range threshold in [0, 1]
        price_ratio_state: The current price ratio update

    Returns:
        Tuple of ((virtual_a, virtual_b), changed). When changed is False the
        input balances are returned as-is.

    Raises:
        InvalidCenterednessMargin: If centeredness_margin > 1
        InvalidDailyPriceShiftExponent: If daily_price_shift_base is not in (0, 1]
        TimestampRegression: If current_timestamp < last_timestamp
        ArithmeticFault: If a solve produces an invalid state
    """
    if centeredness_margin.value > ONE_18:
        raise InvalidCenterednessMargin(
            f"Centeredness margin {centeredness_margin.value} is above 1"
        )
    if not 0 < daily_price_shift_base.value <= ONE_18:
        raise InvalidDailyPriceShiftExponent(
            f"Daily price shift base {daily_price_shift_base.value} is outside (0, 1]"
        )

    last = (last_virtual_balances[0], last_virtual_balances[1])

    if current_timestamp == last_timestamp:
        return last, False
    if current_timestamp < last_timestamp:
        raise TimestampRegression(
            f"Current timestamp {current_timestamp} is before last timestamp {last_timestamp}"
        )

    current_fourth_root_price_ratio = compute_fourth_root_price_ratio(
        current_timestamp, price_ratio_state
    )
    # Side is fixed for the whole call, even if step 4 moves the balances
    pool_above_center = is_above_center(balances, last)

    virtual_balances = last
    changed = False

    if is_price_ratio_updating(price_ratio_state, last_timestamp, current_timestamp):
        virtual_balances = compute_virtual_balances_updating_price_ratio(
            current_fourth_root_price_ratio,
            balances,
            last,
            pool_above_center,
        )
        changed = True
        logger.debug(
            "virtual_balances_price_ratio_update",
            fourth_root_price_ratio=current_fourth_root_price_ratio.value,
            above_center=pool_above_center,
            virtual_balance_a=virtual_balances[0].value,
            virtual_balance_b=virtual_balances[1].value,
        )

    if not is_pool_within_target_range(balances, virtual_balances, centeredness_margin):
        virtual_balances = compute_virtual_balances_updating_price_range(
            balances,
            virtual_balances,
            pool_above_center,
            daily_price_shift_base,
            current_fourth_root_price_ratio,
            current_timestamp - last_timestamp,
        )
        changed = True
        logger.debug(
            "virtual_balances_price_range_update",
            elapsed_seconds=current_timestamp - last_timestamp,
            above_center=pool_above_center,
            virtual_balance_a=virtual_balances[0].value,
            virtual_balance_b=virtual_balances[1].value,
        )

    return virtual_balances, changed
