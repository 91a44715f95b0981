"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool_state
    # or
    from tests.helpers.factories import make_pool_state, make_snapshot

    state = make_pool_state(virtual_balances=(2 * ONE_18, 2 * ONE_18))
"""

from decimal import Decimal

from reclamm.engine.price_ratio import PriceRatioState
from reclamm.engine.virtual_balances import to_daily_price_shift_base
from reclamm.math.fixed_point import ONE_18
from reclamm.models import PoolParameters
from reclamm.pool.state import ReClammPoolSnapshot, ReClammPoolState, TokenReserve
from tests.helpers.constants import CENTEREDNESS_MARGIN, DAI, POOL_ADDRESS, WETH

# Real [1, 1] with virtual [2, 2] sits exactly at the center of a price
# range whose fourth root price ratio is 1.5
CENTERED_BALANCES = (ONE_18, ONE_18)
CENTERED_VIRTUAL_BALANCES = (2 * ONE_18, 2 * ONE_18)
CENTERED_FOURTH_ROOT_PRICE_RATIO = 3 * ONE_18 // 2


def make_pool_state(
    virtual_balances: tuple[int, int] = CENTERED_VIRTUAL_BALANCES,
    last_timestamp: int = 0,
    fourth_root_price_ratio: int = CENTERED_FOURTH_ROOT_PRICE_RATIO,
    centeredness_margin: int = CENTEREDNESS_MARGIN,
    daily_price_shift_exponent: int = ONE_18,
    price_ratio_state: PriceRatioState | None = None,
) -> ReClammPoolState:
    """Create a pool state with sensible defaults.

    Args:
        virtual_balances: Persisted virtual balances (default: [2, 2])
        last_timestamp: Time of the last update (default: 0)
        fourth_root_price_ratio: Fixed fourth root price ratio, ignored when
            price_ratio_state is given (default: 1.5)
        centeredness_margin: Target range threshold (default: 20%)
        daily_price_shift_exponent: Range shift speed (default: 100%/day)
        price_ratio_state: Explicit price ratio update (default: fixed ratio)

    Returns:
        ReClammPoolState ready for testing
    """
    if price_ratio_state is None:
        price_ratio_state = PriceRatioState.fixed(fourth_root_price_ratio, last_timestamp)

    return ReClammPoolState(
        virtual_balances=virtual_balances,
        last_timestamp=last_timestamp,
        price_ratio_state=price_ratio_state,
        centeredness_margin=centeredness_margin,
        daily_price_shift_base=to_daily_price_shift_base(daily_price_shift_exponent).value,
    )


def make_snapshot(
    balances: tuple[int, int] = CENTERED_BALANCES,
    tokens: tuple[str, str] = (WETH, DAI),
    scaling_factors: tuple[int, int] = (1, 1),
    fee: Decimal | str = "0",
    state: ReClammPoolState | None = None,
) -> ReClammPoolSnapshot:
    """Create a pool snapshot with sensible defaults.

    Balances are raw amounts in each token's native decimals.
    """
    if state is None:
        state = make_pool_state()

    return ReClammPoolSnapshot(
        id="0",
        address=POOL_ADDRESS,
        reserves=(
            TokenReserve(token=tokens[0], balance=balances[0], scaling_factor=scaling_factors[0]),
            TokenReserve(token=tokens[1], balance=balances[1], scaling_factor=scaling_factors[1]),
        ),
        state=state,
        fee=Decimal(fee),
    )


def make_pool_parameters(
    min_price: str = "1000",
    max_price: str = "4000",
    target_price: str = "2500",
    centeredness_margin: str = "0.2",
    daily_price_shift_exponent: str = "1",
) -> PoolParameters:
    """Create pool creation parameters (default: [1000, 4000] around 2500)."""
    return PoolParameters(
        min_price=Decimal(min_price),
        max_price=Decimal(max_price),
        target_price=Decimal(target_price),
        centeredness_margin=Decimal(centeredness_margin),
        daily_price_shift_exponent=Decimal(daily_price_shift_exponent),
    )
