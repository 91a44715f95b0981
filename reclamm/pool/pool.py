"""Stateful operations over a persisted reClAMM pool state.

The engine is pure math over balances. ``ReClammPool`` is the layer a pool
contract (or a simulator) calls: it brings virtual balances up to date before
every operation, applies the engine, and returns the state to persist.
States are frozen; every operation returns a new one.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from reclamm.config import DEFAULT_POOL_CONFIG, ReClammPoolConfig
from reclamm.engine.centeredness import compute_centeredness, is_pool_within_target_range
from reclamm.engine.errors import (
    InvalidCenterednessMargin,
    InvalidDailyPriceShiftExponent,
    InvalidFourthRootPriceRatio,
    PoolOutsideTargetRange,
)
from reclamm.engine.initialization import compute_initial_balances, compute_initial_virtual_balances
from reclamm.engine.price_ratio import (
    PriceRatioState,
    compute_fourth_root_price_ratio,
    start_price_ratio_update,
    stop_price_ratio_update,
)
from reclamm.engine.swap_math import (
    compute_in_given_out,
    compute_invariant,
    compute_out_given_in,
    compute_price_range,
    compute_price_ratio,
)
from reclamm.engine.virtual_balances import (
    compute_current_virtual_balances,
    to_daily_price_shift_base,
    to_daily_price_shift_exponent,
)
from reclamm.math.fixed_point import Bfp, Rounding

from .state import ReClammPoolState

if TYPE_CHECKING:
    from reclamm.models import PoolParameters

logger = structlog.get_logger()


class SwapKind(str, Enum):
    """Which side of the swap the caller fixes."""

    EXACT_IN = "exact_in"
    EXACT_OUT = "exact_out"


@dataclass(frozen=True)
class SwapRequest:
    """A swap against 18-decimal balances.

    Attributes:
        kind: EXACT_IN fixes the amount in, EXACT_OUT the amount out
        token_in_index: Index of the token sent to the pool
        token_out_index: Index of the token taken from the pool
        amount_given: The fixed amount (18-decimal)
    """

    kind: SwapKind
    token_in_index: int
    token_out_index: int
    amount_given: int


@dataclass(frozen=True)
class SwapOutcome:
    """Result of a swap: the computed amount and the state to persist."""

    amount_calculated: int
    state: ReClammPoolState


def _to_bfp(balances: Sequence[int]) -> tuple[Bfp, Bfp]:
    return Bfp(balances[0]), Bfp(balances[1])


class ReClammPool:
    """reClAMM pool operations.

    Holds only the parameter bounds; all pool data lives in the
    ``ReClammPoolState`` passed to (and returned from) each method. Real
    balances are 18-decimal integers, token A first.
    """

    def __init__(self, config: ReClammPoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_centeredness_margin(self, centeredness_margin: int) -> None:
        if not 0 <= centeredness_margin <= self.config.max_centeredness_margin:
            raise InvalidCenterednessMargin(
                f"Centeredness margin {centeredness_margin} is outside "
                f"[0, {self.config.max_centeredness_margin}]"
            )

    def _validate_daily_price_shift_exponent(self, daily_price_shift_exponent: int) -> None:
        if not 0 <= daily_price_shift_exponent <= self.config.max_daily_price_shift_exponent:
            raise InvalidDailyPriceShiftExponent(
                f"Daily price shift exponent {daily_price_shift_exponent} is outside "
                f"[0, {self.config.max_daily_price_shift_exponent}]"
            )

    # =========================================================================
    # Initialization
    # =========================================================================

    def compute_initial_balances(
        self,
        params: PoolParameters,
        reference_token_index: int,
        reference_amount: int,
    ) -> tuple[int, int]:
        """Balances to seed the pool with, given the amount of one token.

        Args:
            params: Pool creation parameters
            reference_token_index: Token whose amount is fixed (0 or 1)
            reference_amount: Amount of the reference token (18-decimal)

        Returns:
            Seeding balances (18-decimal), token A first
        """
        balances = compute_initial_balances(
            Bfp.from_decimal(params.min_price),
            Bfp.from_decimal(params.max_price),
            Bfp.from_decimal(params.target_price),
            reference_token_index,
            Bfp(reference_amount),
        )
        return balances[0].value, balances[1].value

    def initialize(
        self,
        params: PoolParameters,
        real_balances: Sequence[int],
        timestamp: int,
    ) -> ReClammPoolState:
        """Create the initial state for a pool seeded with ``real_balances``.

        Args:
            params: Pool creation parameters
            real_balances: Seeding balances (18-decimal), token A first
            timestamp: Initialization time, in seconds

        Returns:
            Initial pool state, with no price ratio update in flight

        Raises:
            InvalidInitializationPrices: Unless min < target < max
            InvalidCenterednessMargin: If the margin is above the configured maximum
            InvalidDailyPriceShiftExponent: If the rate is above the configured maximum
            InvalidFourthRootPriceRatio: If the price range is too narrow
            BalanceRatioMismatch: If the balances do not match the target price
        """
        centeredness_margin = Bfp.from_decimal(params.centeredness_margin).value
        daily_price_shift_exponent = Bfp.from_decimal(params.daily_price_shift_exponent).value
        self._validate_centeredness_margin(centeredness_margin)
        self._validate_daily_price_shift_exponent(daily_price_shift_exponent)

        virtual_balances, fourth_root_price_ratio = compute_initial_virtual_balances(
            _to_bfp(real_balances),
            Bfp.from_decimal(params.min_price),
            Bfp.from_decimal(params.max_price),
            Bfp.from_decimal(params.target_price),
        )
        if fourth_root_price_ratio.value < self.config.min_fourth_root_price_ratio:
            raise InvalidFourthRootPriceRatio(
                f"Fourth root price ratio {fourth_root_price_ratio.value} is below "
                f"{self.config.min_fourth_root_price_ratio}"
            )

        state = ReClammPoolState(
            virtual_balances=(virtual_balances[0].value, virtual_balances[1].value),
            last_timestamp=timestamp,
            price_ratio_state=PriceRatioState.fixed(fourth_root_price_ratio.value, timestamp),
            centeredness_margin=centeredness_margin,
            daily_price_shift_base=to_daily_price_shift_base(daily_price_shift_exponent).value,
        )

        logger.info(
            "pool_initialized",
            virtual_balance_a=state.virtual_balances[0],
            virtual_balance_b=state.virtual_balances[1],
            fourth_root_price_ratio=fourth_root_price_ratio.value,
            centeredness_margin=centeredness_margin,
            timestamp=timestamp,
        )
        return state

    # =========================================================================
    # Virtual balances
    # =========================================================================

    def current_virtual_balances(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
    ) -> tuple[tuple[Bfp, Bfp], bool]:
        """Virtual balances at ``now``, and whether they differ from the persisted ones."""
        return compute_current_virtual_balances(
            _to_bfp(real_balances),
            state.virtual_balances_bfp,
            Bfp(state.daily_price_shift_base),
            state.last_timestamp,
            now,
            Bfp(state.centeredness_margin),
            state.price_ratio_state,
        )

    def refresh(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
    ) -> ReClammPoolState:
        """Bring the persisted virtual balances up to date.

        Raises:
            TimestampRegression: If now < state.last_timestamp
        """
        virtual_balances, _ = self.current_virtual_balances(state, real_balances, now)
        return replace(
            state,
            virtual_balances=(virtual_balances[0].value, virtual_balances[1].value),
            last_timestamp=now,
        )

    # =========================================================================
    # Swaps
    # =========================================================================

    def compute_invariant(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
        rounding: Rounding,
    ) -> Bfp:
        """Invariant over real and current virtual balances."""
        virtual_balances, _ = self.current_virtual_balances(state, real_balances, now)
        return compute_invariant(_to_bfp(real_balances), virtual_balances, rounding)

    def swap(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        request: SwapRequest,
        now: int,
    ) -> SwapOutcome:
        """Execute a swap against up-to-date virtual balances.

        The returned state carries the refreshed virtual balances; the caller
        applies the amounts to the real balances.

        Returns:
            SwapOutcome with the amount out (EXACT_IN) or amount in (EXACT_OUT)

        Raises:
            InvalidTokenIndexError: If the indices are not a permutation of (0, 1)
            InsufficientLiquidity: If an exact-in swap would drain token out
            AmountOutExceedsBalance: If an exact-out amount meets the real balance
            NegativeAmountError: If rounding produces a negative amount
        """
        balances = _to_bfp(real_balances)
        virtual_balances, changed = self.current_virtual_balances(state, real_balances, now)

        if request.kind == SwapKind.EXACT_IN:
            amount_calculated = compute_out_given_in(
                balances,
                virtual_balances,
                request.token_in_index,
                request.token_out_index,
                Bfp(request.amount_given),
            )
        else:
            amount_calculated = compute_in_given_out(
                balances,
                virtual_balances,
                request.token_in_index,
                request.token_out_index,
                Bfp(request.amount_given),
            )

        logger.debug(
            "pool_swap",
            kind=request.kind.value,
            token_in_index=request.token_in_index,
            token_out_index=request.token_out_index,
            amount_given=request.amount_given,
            amount_calculated=amount_calculated.value,
            virtual_balances_changed=changed,
        )

        new_state = replace(
            state,
            virtual_balances=(virtual_balances[0].value, virtual_balances[1].value),
            last_timestamp=now,
        )
        return SwapOutcome(amount_calculated=amount_calculated.value, state=new_state)

    # =========================================================================
    # Administrative actions
    # =========================================================================

    def set_centeredness_margin(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
        centeredness_margin: int,
    ) -> ReClammPoolState:
        """Change the target range threshold.

        Only allowed while the pool is within its target range, both under
        the current margin and under the new one.

        Raises:
            InvalidCenterednessMargin: If the margin is outside [0, max]
            PoolOutsideTargetRange: If the pool is out of range before or after
        """
        self._validate_centeredness_margin(centeredness_margin)
        refreshed = self.refresh(state, real_balances, now)
        balances = _to_bfp(real_balances)

        if not is_pool_within_target_range(
            balances, refreshed.virtual_balances_bfp, Bfp(refreshed.centeredness_margin)
        ):
            raise PoolOutsideTargetRange("Pool is outside its target range")

        if not is_pool_within_target_range(
            balances, refreshed.virtual_balances_bfp, Bfp(centeredness_margin)
        ):
            raise PoolOutsideTargetRange(
                f"Pool would be outside its target range with margin {centeredness_margin}"
            )

        logger.info(
            "centeredness_margin_updated",
            old_margin=refreshed.centeredness_margin,
            new_margin=centeredness_margin,
            timestamp=now,
        )
        return replace(refreshed, centeredness_margin=centeredness_margin)

    def set_daily_price_shift_exponent(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
        daily_price_shift_exponent: int,
    ) -> tuple[ReClammPoolState, int]:
        """Change how fast the range follows the market while out of range.

        Virtual balances are brought up to date first, so elapsed time is
        charged at the old rate.

        Returns:
            Tuple of (new_state, effective_exponent). The effective exponent
            is what the stored base converts back to and may be slightly below
            the requested one.

        Raises:
            InvalidDailyPriceShiftExponent: If the exponent is outside [0, max]
        """
        self._validate_daily_price_shift_exponent(daily_price_shift_exponent)
        refreshed = self.refresh(state, real_balances, now)

        base = to_daily_price_shift_base(daily_price_shift_exponent)
        effective_exponent = to_daily_price_shift_exponent(base)

        logger.info(
            "daily_price_shift_exponent_updated",
            requested=daily_price_shift_exponent,
            effective=effective_exponent,
            base=base.value,
            timestamp=now,
        )
        return replace(refreshed, daily_price_shift_base=base.value), effective_exponent

    def start_price_ratio_update(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
        end_fourth_root_price_ratio: int,
        start_time: int,
        end_time: int,
    ) -> ReClammPoolState:
        """Schedule a gradual change of the price ratio.

        Raises:
            InvalidPriceRatioUpdateTimes: If end_time precedes start_time
            InvalidFourthRootPriceRatio: If the end value is too small
            PriceRatioUpdateTooFast: If the update is too short or too steep
        """
        refreshed = self.refresh(state, real_balances, now)
        price_ratio_state = start_price_ratio_update(
            now,
            refreshed.price_ratio_state,
            end_fourth_root_price_ratio,
            start_time,
            end_time,
            self.config,
        )

        logger.info(
            "price_ratio_update_started",
            start_fourth_root_price_ratio=price_ratio_state.start_fourth_root_price_ratio,
            end_fourth_root_price_ratio=price_ratio_state.end_fourth_root_price_ratio,
            start_time=price_ratio_state.price_ratio_update_start_time,
            end_time=price_ratio_state.price_ratio_update_end_time,
        )
        return replace(refreshed, price_ratio_state=price_ratio_state)

    def stop_price_ratio_update(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
    ) -> ReClammPoolState:
        """Freeze the price ratio at its current value."""
        refreshed = self.refresh(state, real_balances, now)
        price_ratio_state = stop_price_ratio_update(now, refreshed.price_ratio_state)

        logger.info(
            "price_ratio_update_stopped",
            fourth_root_price_ratio=price_ratio_state.end_fourth_root_price_ratio,
            timestamp=now,
        )
        return replace(refreshed, price_ratio_state=price_ratio_state)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_fourth_root_price_ratio(self, state: ReClammPoolState, now: int) -> Bfp:
        return compute_fourth_root_price_ratio(now, state.price_ratio_state)

    def get_price_range(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
    ) -> tuple[Bfp, Bfp]:
        """Current (min, max) price of token A in token B."""
        virtual_balances, _ = self.current_virtual_balances(state, real_balances, now)
        return compute_price_range(_to_bfp(real_balances), virtual_balances)

    def get_price_ratio(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
    ) -> Bfp:
        virtual_balances, _ = self.current_virtual_balances(state, real_balances, now)
        return compute_price_ratio(_to_bfp(real_balances), virtual_balances)

    def get_centeredness(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
    ) -> Bfp:
        virtual_balances, _ = self.current_virtual_balances(state, real_balances, now)
        return compute_centeredness(_to_bfp(real_balances), virtual_balances)

    def is_within_target_range(
        self,
        state: ReClammPoolState,
        real_balances: Sequence[int],
        now: int,
    ) -> bool:
        return self.get_centeredness(state, real_balances, now) >= Bfp(state.centeredness_margin)

