"""reClAMM pricing engine.

Pure fixed-point math for two-token pools whose virtual balances recenter and
rescale over time:

- price_ratio: interpolation of the fourth root of the price ratio
- centeredness: imbalance score and above/below-center classification
- virtual_balances: when and how virtual balances move
- swap_math: invariant and exact-in / exact-out amounts
- initialization: seeding balances from a price range
"""

# Centeredness
from .centeredness import compute_centeredness, is_above_center, is_pool_within_target_range

# Errors
from .errors import (
    AmountOutExceedsBalance,
    ArithmeticFault,
    BalanceRatioMismatch,
    ConfigurationFault,
    InsufficientLiquidity,
    InvalidCenterednessMargin,
    InvalidDailyPriceShiftExponent,
    InvalidFourthRootPriceRatio,
    InvalidInitializationPrices,
    InvalidPriceRatioUpdateTimes,
    InvalidScalingFactor,
    InvalidSwapFee,
    InvalidTokenIndexError,
    NegativeAmountError,
    NonPositiveVirtualBalance,
    PoolOutsideTargetRange,
    PreconditionViolation,
    PriceRatioUpdateTooFast,
    ReClammError,
    TimestampRegression,
    UnknownTokenError,
    VirtualBalanceDenominatorError,
    ZeroCenterednessError,
)

# Initialization
from .initialization import (
    compute_initial_balances,
    compute_initial_virtual_balances,
    compute_theoretical_price_ratio_and_balances,
)

# Price ratio
from .price_ratio import (
    PriceRatioState,
    compute_fourth_root_price_ratio,
    is_price_ratio_updating,
    start_price_ratio_update,
    stop_price_ratio_update,
)

# Swap math
from .swap_math import (
    compute_in_given_out,
    compute_invariant,
    compute_out_given_in,
    compute_price_range,
    compute_price_ratio,
    compute_spot_price,
)

# Virtual balances
from .virtual_balances import (
    compute_current_virtual_balances,
    compute_virtual_balances_updating_price_range,
    compute_virtual_balances_updating_price_ratio,
    to_daily_price_shift_base,
    to_daily_price_shift_exponent,
)

__all__ = [
    # Price ratio
    "PriceRatioState",
    "compute_fourth_root_price_ratio",
    "is_price_ratio_updating",
    "start_price_ratio_update",
    "stop_price_ratio_update",
    # Centeredness
    "compute_centeredness",
    "is_above_center",
    "is_pool_within_target_range",
    # Virtual balances
    "compute_current_virtual_balances",
    "compute_virtual_balances_updating_price_ratio",
    "compute_virtual_balances_updating_price_range",
    "to_daily_price_shift_base",
    "to_daily_price_shift_exponent",
    # Swap math
    "compute_invariant",
    "compute_out_given_in",
    "compute_in_given_out",
    "compute_price_range",
    "compute_price_ratio",
    "compute_spot_price",
    # Initialization
    "compute_theoretical_price_ratio_and_balances",
    "compute_initial_balances",
    "compute_initial_virtual_balances",
    # Errors
    "ReClammError",
    "PreconditionViolation",
    "AmountOutExceedsBalance",
    "InsufficientLiquidity",
    "InvalidTokenIndexError",
    "PoolOutsideTargetRange",
    "BalanceRatioMismatch",
    "TimestampRegression",
    "ArithmeticFault",
    "NegativeAmountError",
    "VirtualBalanceDenominatorError",
    "ZeroCenterednessError",
    "NonPositiveVirtualBalance",
    "ConfigurationFault",
    "InvalidCenterednessMargin",
    "InvalidDailyPriceShiftExponent",
    "InvalidFourthRootPriceRatio",
    "InvalidPriceRatioUpdateTimes",
    "PriceRatioUpdateTooFast",
    "InvalidInitializationPrices",
    "InvalidSwapFee",
    "InvalidScalingFactor",
    "UnknownTokenError",
]
