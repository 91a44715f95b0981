"""reClAMM error classes.

Three families, all fail-fast:

- PreconditionViolation: the caller asked for something the pool cannot do
- ArithmeticFault: rounding or an internal invariant produced an invalid value
- ConfigurationFault: a margin, rate, price or price-ratio input is out of bounds
"""


class ReClammError(Exception):
    """Base error for reClAMM operations."""

    pass


# =============================================================================
# Precondition violations
# =============================================================================


class PreconditionViolation(ReClammError):
    """Caller-supplied request cannot be satisfied by the pool."""

    pass


class AmountOutExceedsBalance(PreconditionViolation):
    """Exact-out amount meets or exceeds the real balance of token out."""

    pass


class InsufficientLiquidity(PreconditionViolation):
    """Computed amount out would meet or exceed the real balance of token out."""

    pass


class InvalidTokenIndexError(PreconditionViolation):
    """Token indices must be 0 and 1, in either order."""

    pass


class PoolOutsideTargetRange(PreconditionViolation):
    """Operation requires the pool to be within its target range."""

    pass


class BalanceRatioMismatch(PreconditionViolation):
    """Seeding balances do not match the theoretical balance ratio."""

    pass


class TimestampRegression(PreconditionViolation):
    """Current timestamp is earlier than the last persisted timestamp."""

    pass


class UnknownTokenError(PreconditionViolation):
    """Token is not one of the pool's two tokens, or both sides name the same token."""

    pass


# =============================================================================
# Arithmetic faults
# =============================================================================


class ArithmeticFault(ReClammError, ArithmeticError):
    """Computation produced an invalid value."""

    pass


class NegativeAmountError(ArithmeticFault):
    """Rounding produced a negative swap amount."""

    pass


class VirtualBalanceDenominatorError(ArithmeticFault):
    """Range-tracking denominator (Q0 - 1) * Vo - Ro is not positive."""

    pass


class ZeroCenterednessError(ArithmeticFault):
    """Centeredness-preserving solve is undefined at zero centeredness."""

    pass


class NonPositiveVirtualBalance(ArithmeticFault):
    """A recomputed virtual balance is not strictly positive."""

    pass


# =============================================================================
# Configuration faults
# =============================================================================


class ConfigurationFault(ReClammError, ValueError):
    """Configured parameter is non-finite or out of bounds."""

    pass


class InvalidCenterednessMargin(ConfigurationFault):
    """Centeredness margin is outside [0, max_centeredness_margin]."""

    pass


class InvalidDailyPriceShiftExponent(ConfigurationFault):
    """Daily price shift exponent is outside [0, max_daily_price_shift_exponent]."""

    pass


class InvalidFourthRootPriceRatio(ConfigurationFault):
    """Fourth root of the price ratio must be greater than 1."""

    pass


class InvalidPriceRatioUpdateTimes(ConfigurationFault):
    """Price ratio update end time precedes its start time."""

    pass


class PriceRatioUpdateTooFast(ConfigurationFault):
    """Price ratio update is shorter than the minimum duration or changes too fast."""

    pass


class InvalidInitializationPrices(ConfigurationFault):
    """Initialization prices must satisfy 0 < min < target < max."""

    pass


class InvalidSwapFee(ConfigurationFault):
    """Swap fee must be in range [0, 1)."""

    pass


class InvalidScalingFactor(ConfigurationFault):
    """Scaling factor must be positive."""

    pass
