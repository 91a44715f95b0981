"""Tests for ReClammPool stateful operations.

This module tests:
- Initialization from pool parameters and its validation
- Refreshing virtual balances as time passes
- Swaps against refreshed virtual balances
- Administrative actions (margin, daily rate, price ratio updates)
- Queries (price range, price ratio, centeredness)
"""

import pytest
from structlog.testing import capture_logs

from reclamm.engine import (
    AmountOutExceedsBalance,
    BalanceRatioMismatch,
    InsufficientLiquidity,
    InvalidCenterednessMargin,
    InvalidDailyPriceShiftExponent,
    InvalidInitializationPrices,
    PoolOutsideTargetRange,
    PriceRatioUpdateTooFast,
    TimestampRegression,
    to_daily_price_shift_base,
)
from reclamm.math.fixed_point import ONE_18, Rounding
from reclamm.pool import ReClammPool, ReClammPoolState, SwapKind, SwapRequest
from tests.helpers import (
    CENTERED_BALANCES,
    DAY,
    FOURTH_ROOT_PRICE_RATIO,
    make_pool_parameters,
    make_pool_state,
)

# Too much token A for a [2, 2] virtual pool at r = 1.5: centeredness 0.125
OFF_CENTER_BALANCES = (2 * ONE_18, ONE_18 // 4)


def _initialized(pool: ReClammPool, timestamp: int = 1000) -> tuple[ReClammPoolState, tuple[int, int]]:
    params = make_pool_parameters()
    balances = pool.compute_initial_balances(params, 0, ONE_18)
    return pool.initialize(params, balances, timestamp), balances


class TestInitialize:
    """Tests for ReClammPool.initialize."""

    def test_initial_state(self, pool: ReClammPool) -> None:
        state, _ = _initialized(pool)

        assert state.last_timestamp == 1000
        assert state.centeredness_margin == 20 * 10**16
        assert state.daily_price_shift_base == to_daily_price_shift_base(ONE_18).value
        assert state.price_ratio_state.start_fourth_root_price_ratio == FOURTH_ROOT_PRICE_RATIO
        assert state.price_ratio_state.end_fourth_root_price_ratio == FOURTH_ROOT_PRICE_RATIO

    def test_price_range(self, pool: ReClammPool) -> None:
        state, balances = _initialized(pool)
        min_price, max_price = pool.get_price_range(state, balances, 1000)
        assert min_price.value / ONE_18 == pytest.approx(1000, rel=1e-9)
        assert max_price.value / ONE_18 == pytest.approx(4000, rel=1e-9)

    def test_within_target_range(self, pool: ReClammPool) -> None:
        state, balances = _initialized(pool)
        assert pool.get_centeredness(state, balances, 1000).value / ONE_18 == pytest.approx(
            0.4558, abs=1e-3
        )
        assert pool.is_within_target_range(state, balances, 1000)

    def test_logs_initialization(self, pool: ReClammPool) -> None:
        with capture_logs() as logs:
            _initialized(pool)
        assert logs[0]["event"] == "pool_initialized"
        assert logs[0]["log_level"] == "info"

    def test_margin_above_maximum_raises(self, pool: ReClammPool) -> None:
        params = make_pool_parameters(centeredness_margin="0.95")
        balances = pool.compute_initial_balances(params, 0, ONE_18)
        with pytest.raises(InvalidCenterednessMargin):
            pool.initialize(params, balances, 0)

    def test_rate_above_maximum_raises(self, pool: ReClammPool) -> None:
        params = make_pool_parameters(daily_price_shift_exponent="1.5")
        balances = pool.compute_initial_balances(params, 0, ONE_18)
        with pytest.raises(InvalidDailyPriceShiftExponent):
            pool.initialize(params, balances, 0)

    def test_unordered_prices_raise(self, pool: ReClammPool) -> None:
        params = make_pool_parameters(target_price="5000")
        with pytest.raises(InvalidInitializationPrices):
            pool.initialize(params, (ONE_18, ONE_18), 0)

    def test_wrong_balance_ratio_raises(self, pool: ReClammPool) -> None:
        with pytest.raises(BalanceRatioMismatch):
            pool.initialize(make_pool_parameters(), (ONE_18, ONE_18), 0)


class TestRefresh:
    """Tests for bringing virtual balances up to date."""

    def test_centered_pool_unchanged(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        refreshed = pool.refresh(centered_state, CENTERED_BALANCES, DAY)
        assert refreshed.virtual_balances == centered_state.virtual_balances
        assert refreshed.last_timestamp == DAY

    def test_out_of_range_pool_tracks_market(self, pool: ReClammPool) -> None:
        state = make_pool_state()
        refreshed = pool.refresh(state, OFF_CENTER_BALANCES, DAY)
        assert refreshed.virtual_balances[0] / ONE_18 == pytest.approx(2.5, rel=1e-4)
        assert refreshed.virtual_balances[1] / ONE_18 == pytest.approx(1.0, rel=1e-4)

    def test_does_not_mutate_input(self, pool: ReClammPool) -> None:
        state = make_pool_state()
        pool.refresh(state, OFF_CENTER_BALANCES, DAY)
        assert state.virtual_balances == (2 * ONE_18, 2 * ONE_18)
        assert state.last_timestamp == 0

    def test_timestamp_regression_raises(self, pool: ReClammPool) -> None:
        state = make_pool_state(last_timestamp=DAY)
        with pytest.raises(TimestampRegression):
            pool.refresh(state, CENTERED_BALANCES, DAY - 1)


class TestSwap:
    """Tests for ReClammPool.swap."""

    def test_exact_in(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        outcome = pool.swap(
            centered_state,
            CENTERED_BALANCES,
            SwapRequest(SwapKind.EXACT_IN, 0, 1, ONE_18 // 10),
            0,
        )
        assert outcome.amount_calculated == 96_774_193_548_387_096
        assert outcome.state == centered_state

    def test_exact_out_round_trip(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        outcome = pool.swap(
            centered_state,
            CENTERED_BALANCES,
            SwapRequest(SwapKind.EXACT_OUT, 0, 1, 96_774_193_548_387_096),
            0,
        )
        assert outcome.amount_calculated <= ONE_18 // 10
        assert outcome.amount_calculated > ONE_18 // 10 - 10

    def test_refreshes_before_pricing(self, pool: ReClammPool) -> None:
        outcome = pool.swap(
            make_pool_state(),
            OFF_CENTER_BALANCES,
            SwapRequest(SwapKind.EXACT_IN, 0, 1, ONE_18 // 100),
            DAY,
        )
        assert outcome.state.last_timestamp == DAY
        assert outcome.state.virtual_balances[1] / ONE_18 == pytest.approx(1.0, rel=1e-4)

    def test_insufficient_liquidity_raises(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        with pytest.raises(InsufficientLiquidity):
            pool.swap(
                centered_state,
                CENTERED_BALANCES,
                SwapRequest(SwapKind.EXACT_IN, 0, 1, 100 * ONE_18),
                0,
            )

    def test_amount_out_exceeds_balance_raises(
        self, pool: ReClammPool, centered_state: ReClammPoolState
    ) -> None:
        with pytest.raises(AmountOutExceedsBalance):
            pool.swap(
                centered_state,
                CENTERED_BALANCES,
                SwapRequest(SwapKind.EXACT_OUT, 0, 1, ONE_18),
                0,
            )

    def test_invariant(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        invariant = pool.compute_invariant(centered_state, CENTERED_BALANCES, 0, Rounding.ROUND_DOWN)
        assert invariant.value == 9 * ONE_18


class TestSetCenterednessMargin:
    """Tests for changing the target range threshold."""

    def test_updates_margin(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        with capture_logs() as logs:
            state = pool.set_centeredness_margin(centered_state, CENTERED_BALANCES, 0, 50 * 10**16)
        assert state.centeredness_margin == 50 * 10**16
        assert logs[-1]["event"] == "centeredness_margin_updated"

    def test_new_margin_must_keep_pool_in_range(self, pool: ReClammPool) -> None:
        """The initialized pool has centeredness ~0.456."""
        state, balances = _initialized(pool)
        assert pool.set_centeredness_margin(state, balances, 1000, 30 * 10**16).centeredness_margin == (
            30 * 10**16
        )
        with pytest.raises(PoolOutsideTargetRange):
            pool.set_centeredness_margin(state, balances, 1000, 50 * 10**16)

    def test_out_of_range_pool_raises(self, pool: ReClammPool) -> None:
        with pytest.raises(PoolOutsideTargetRange):
            pool.set_centeredness_margin(make_pool_state(), OFF_CENTER_BALANCES, 0, 10**16)

    def test_above_maximum_raises(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        with pytest.raises(InvalidCenterednessMargin):
            pool.set_centeredness_margin(centered_state, CENTERED_BALANCES, 0, 91 * 10**16)


class TestSetDailyPriceShiftExponent:
    """Tests for changing the range shift speed."""

    def test_returns_effective_exponent(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        state, effective = pool.set_daily_price_shift_exponent(
            centered_state, CENTERED_BALANCES, 0, ONE_18 // 2
        )
        assert state.daily_price_shift_base == to_daily_price_shift_base(ONE_18 // 2).value
        assert effective <= ONE_18 // 2
        assert ONE_18 // 2 - effective < 124_649

    def test_elapsed_time_charged_at_old_rate(self, pool: ReClammPool) -> None:
        state, _ = pool.set_daily_price_shift_exponent(make_pool_state(), OFF_CENTER_BALANCES, DAY, 0)
        assert state.virtual_balances[1] / ONE_18 == pytest.approx(1.0, rel=1e-4)
        assert state.daily_price_shift_base == ONE_18

    def test_above_maximum_raises(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        with pytest.raises(InvalidDailyPriceShiftExponent):
            pool.set_daily_price_shift_exponent(centered_state, CENTERED_BALANCES, 0, 2 * ONE_18)


class TestPriceRatioUpdate:
    """Tests for scheduled price ratio changes."""

    END_FOURTH_ROOT = 16 * 10**17

    def _started(self, pool: ReClammPool, state: ReClammPoolState) -> ReClammPoolState:
        return pool.start_price_ratio_update(
            state, CENTERED_BALANCES, 0, self.END_FOURTH_ROOT, 0, DAY
        )

    def test_interpolates_price_ratio(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        """Halfway between 1.5 and 1.6, the price ratio is (1.5 * 1.6)^2."""
        state = pool.refresh(self._started(pool, centered_state), CENTERED_BALANCES, DAY // 2)
        ratio = pool.get_price_ratio(state, CENTERED_BALANCES, DAY // 2)
        assert ratio.value / ONE_18 == pytest.approx(5.76, rel=1e-9)

    def test_reaches_end_ratio_and_stays_centered(
        self, pool: ReClammPool, centered_state: ReClammPoolState
    ) -> None:
        state = pool.refresh(self._started(pool, centered_state), CENTERED_BALANCES, DAY // 2)
        state = pool.refresh(state, CENTERED_BALANCES, DAY + 10)

        ratio = pool.get_price_ratio(state, CENTERED_BALANCES, DAY + 10)
        assert ratio.value / ONE_18 == pytest.approx(1.6**4, rel=1e-9)
        centeredness = pool.get_centeredness(state, CENTERED_BALANCES, DAY + 10)
        assert centeredness.value / ONE_18 == pytest.approx(1.0, rel=1e-12)

    def test_fourth_root_query(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        state = self._started(pool, centered_state)
        assert pool.get_fourth_root_price_ratio(state, 2 * DAY).value == self.END_FOURTH_ROOT

    def test_too_fast_raises(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        with pytest.raises(PriceRatioUpdateTooFast):
            pool.start_price_ratio_update(centered_state, CENTERED_BALANCES, 0, 4 * ONE_18, 0, DAY)

    def test_stop_freezes_ratio(self, pool: ReClammPool, centered_state: ReClammPoolState) -> None:
        state = self._started(pool, centered_state)
        with capture_logs() as logs:
            stopped = pool.stop_price_ratio_update(state, CENTERED_BALANCES, DAY // 2)

        frozen = stopped.price_ratio_state
        assert frozen.start_fourth_root_price_ratio == frozen.end_fourth_root_price_ratio
        assert frozen.end_fourth_root_price_ratio / ONE_18 == pytest.approx(2.4**0.5, rel=1e-12)
        assert logs[-1]["event"] == "price_ratio_update_stopped"

        later = pool.refresh(stopped, CENTERED_BALANCES, DAY)
        assert later.virtual_balances == stopped.virtual_balances
