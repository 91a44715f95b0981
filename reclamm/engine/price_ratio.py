"""Price ratio interpolation for reClAMM pools.

The pool's price ratio (max price / min price) is interpolated as its fourth
root, geometrically in value and linearly in time:

    r(t) = r_start * (r_end / r_start) ^ ((t - t_start) / (t_end - t_start))

The fourth root is the unit the virtual-balance formulas consume, and
interpolating it directly keeps the result within 18-decimal precision.
"""

from __future__ import annotations

from dataclasses import dataclass

from reclamm.config import DEFAULT_POOL_CONFIG, ReClammPoolConfig
from reclamm.constants import SECONDS_PER_DAY
from reclamm.math.fixed_point import ONE_18, Bfp

from .errors import (
    InvalidFourthRootPriceRatio,
    InvalidPriceRatioUpdateTimes,
    PriceRatioUpdateTooFast,
)


@dataclass(frozen=True)
class PriceRatioState:
    """Snapshot of one price ratio update.

    Once ``current_time >= price_ratio_update_end_time`` the ratio is frozen at
    the end value. A pool that never updated carries equal start and end
    values.

    Attributes:
        start_fourth_root_price_ratio: Fourth root of the price ratio at the
            start of the update (18-decimal)
        end_fourth_root_price_ratio: Target fourth root of the price ratio (18-decimal)
        price_ratio_update_start_time: Start of the update, in seconds
        price_ratio_update_end_time: End of the update, in seconds
    """

    start_fourth_root_price_ratio: int
    end_fourth_root_price_ratio: int
    price_ratio_update_start_time: int
    price_ratio_update_end_time: int

    def __post_init__(self) -> None:
        if self.price_ratio_update_start_time > self.price_ratio_update_end_time:
            raise InvalidPriceRatioUpdateTimes(
                f"Update start time {self.price_ratio_update_start_time} is after "
                f"end time {self.price_ratio_update_end_time}"
            )
        for value in (self.start_fourth_root_price_ratio, self.end_fourth_root_price_ratio):
            if value <= ONE_18:
                raise InvalidFourthRootPriceRatio(
                    f"Fourth root price ratio must be greater than 1, got {value}"
                )

    @classmethod
    def fixed(cls, fourth_root_price_ratio: int, timestamp: int = 0) -> PriceRatioState:
        """State with no update in flight."""
        return cls(
            start_fourth_root_price_ratio=fourth_root_price_ratio,
            end_fourth_root_price_ratio=fourth_root_price_ratio,
            price_ratio_update_start_time=timestamp,
            price_ratio_update_end_time=timestamp,
        )


def compute_fourth_root_price_ratio(current_time: int, state: PriceRatioState) -> Bfp:
    """Interpolate the fourth root of the price ratio at ``current_time``.

    The two endpoints are raised to the time fraction separately, rather than
    their quotient, which keeps precision when they are close.

    Args:
        current_time: Current ledger time, in seconds
        state: The price ratio update to interpolate

    Returns:
        Fourth root of the price ratio (18-decimal), always between the
        start and end values
    """
    start = Bfp(state.start_fourth_root_price_ratio)
    end = Bfp(state.end_fourth_root_price_ratio)

    if current_time <= state.price_ratio_update_start_time:
        return start
    if current_time >= state.price_ratio_update_end_time:
        return end
    if start == end:
        return end

    exponent = Bfp(
        ((current_time - state.price_ratio_update_start_time) * ONE_18)
        // (state.price_ratio_update_end_time - state.price_ratio_update_start_time)
    )

    value = start.mul_down(end.pow_down(exponent)).div_down(start.pow_up(exponent))

    lower = min(start.value, end.value)
    upper = max(start.value, end.value)
    return Bfp(min(max(value.value, lower), upper))


def is_price_ratio_updating(
    state: PriceRatioState,
    last_timestamp: int,
    current_timestamp: int,
) -> bool:
    """Whether virtual balances must be recentered for a price ratio update.

    The window is active when the update has started by ``current_timestamp``
    and the last persisted interaction happened before the update ended. The
    first interaction after ``price_ratio_update_end_time`` therefore still
    recenters once, onto the final ratio.
    """
    return (
        current_timestamp > state.price_ratio_update_start_time
        and last_timestamp < state.price_ratio_update_end_time
    )


def start_price_ratio_update(
    current_time: int,
    state: PriceRatioState,
    end_fourth_root_price_ratio: int,
    start_time: int,
    end_time: int,
    config: ReClammPoolConfig = DEFAULT_POOL_CONFIG,
) -> PriceRatioState:
    """Replace the in-flight update with a new one.

    The new update starts from the ratio currently in effect, so the curve
    never jumps. A start time in the past is moved up to ``current_time``.

    Raises:
        InvalidPriceRatioUpdateTimes: If end_time precedes start_time
        InvalidFourthRootPriceRatio: If the end value is below the configured minimum
        PriceRatioUpdateTooFast: If the update is too short or changes the
            price ratio faster than the configured daily rate
    """
    if end_time < start_time:
        raise InvalidPriceRatioUpdateTimes(
            f"Update end time {end_time} is before start time {start_time}"
        )
    start_time = max(start_time, current_time)

    duration = end_time - start_time
    if duration <= 0 or duration < config.min_price_ratio_update_duration:
        raise PriceRatioUpdateTooFast(
            f"Update duration {duration}s is below the minimum "
            f"{config.min_price_ratio_update_duration}s"
        )

    if end_fourth_root_price_ratio < config.min_fourth_root_price_ratio:
        raise InvalidFourthRootPriceRatio(
            f"End fourth root price ratio {end_fourth_root_price_ratio} is below "
            f"{config.min_fourth_root_price_ratio}"
        )

    start_value = compute_fourth_root_price_ratio(current_time, state)
    end_value = Bfp(end_fourth_root_price_ratio)

    if end_value >= start_value:
        fourth_root_change = end_value.div_up(start_value)
    else:
        fourth_root_change = start_value.div_up(end_value)

    # Raising to 4 * day / duration turns the fourth-root change into a daily price ratio change
    daily_rate = fourth_root_change.pow_up(Bfp((4 * SECONDS_PER_DAY * ONE_18) // duration))
    if daily_rate.value > config.max_daily_price_ratio_update_rate:
        raise PriceRatioUpdateTooFast(
            f"Price ratio would change by {daily_rate} per day, above "
            f"{Bfp(config.max_daily_price_ratio_update_rate)}"
        )

    return PriceRatioState(
        start_fourth_root_price_ratio=start_value.value,
        end_fourth_root_price_ratio=end_fourth_root_price_ratio,
        price_ratio_update_start_time=start_time,
        price_ratio_update_end_time=end_time,
    )


def stop_price_ratio_update(current_time: int, state: PriceRatioState) -> PriceRatioState:
    """Freeze the price ratio at its value at ``current_time``."""
    current = compute_fourth_root_price_ratio(current_time, state)
    return PriceRatioState.fixed(current.value, current_time)
