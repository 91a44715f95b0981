"""18-decimal fixed-point math for reClAMM pools.

Values are plain integers scaled by 10^18, wrapped in ``Bfp`` for arithmetic.
Every multiplication and division states its rounding direction; the pool's
economic safety depends on callers never swapping one direction for the other.

The ``pow`` implementation follows Balancer's LogExpMath.sol:
https://github.com/balancer-labs/balancer-v3-monorepo/blob/main/pkg/solidity-utils/contracts/math/LogExpMath.sol
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from math import isqrt
from typing import ClassVar

__all__ = [
    # Classes
    "Bfp",
    "Rounding",
    # Errors
    "LogExpMathError",
    "XOutOfBounds",
    "YOutOfBounds",
    "ProductOutOfBounds",
    "InvalidExponent",
    # Functions
    "pow_raw",
    "exp",
    "sqrt_36",
    # Constants
    "ONE_18",
    "ONE_20",
    "ONE_36",
]

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# ln(x) switches to 36-digit precision inside (0.9, 1.1)
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

MILD_EXPONENT_BOUND = (1 << 254) // ONE_20

# x_n are powers of two, a_n = e^x_n
X_18 = (128 * ONE_18, 64 * ONE_18)
A_18 = (
    38877084059945950922200000000000000000000000000000000000,  # e^128
    6235149080811616882910000000,  # e^64
)

X_20 = (
    32 * ONE_20,
    16 * ONE_20,
    8 * ONE_20,
    4 * ONE_20,
    2 * ONE_20,
    ONE_20,
    ONE_20 // 2,
    ONE_20 // 4,
    ONE_20 // 8,
    ONE_20 // 16,
)
A_20 = (
    7_896_296_018_268_069_516_100_000_000_000_000,  # e^32
    888_611_052_050_787_263_676_000_000,  # e^16
    298_095_798_704_172_827_474_000,  # e^8
    5_459_815_003_314_423_907_810,  # e^4
    738_905_609_893_065_022_723,  # e^2
    271_828_182_845_904_523_536,  # e^1
    164_872_127_070_012_814_685,  # e^0.5
    128_402_541_668_774_148_407,  # e^0.25
    113_314_845_306_682_631_683,  # e^0.125
    106_449_445_891_785_942_956,  # e^0.0625
)


class LogExpMathError(ArithmeticError):
    """Base error for pow/exp domain violations."""

    pass


class XOutOfBounds(LogExpMathError):
    """Base of pow is too large for the logarithm."""

    pass


class YOutOfBounds(LogExpMathError):
    """Exponent of pow exceeds MILD_EXPONENT_BOUND."""

    pass


class ProductOutOfBounds(LogExpMathError):
    """y * ln(x) falls outside the domain of exp."""

    pass


class InvalidExponent(LogExpMathError):
    """Argument of exp is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]."""

    pass


class Rounding(Enum):
    """Rounding direction for fixed-point products and quotients.

    The domain is non-negative, so ROUND_UP is away from zero and ROUND_DOWN is
    toward zero.
    """

    ROUND_UP = "up"
    ROUND_DOWN = "down"


def _div_trunc(a: int, b: int) -> int:
    """Integer division truncating toward zero.

    Python's ``//`` floors toward -inf; the logarithm series needs
    truncation for negative intermediate values.
    """
    if b == 0:
        raise ZeroDivisionError("Division by zero in _div_trunc")
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def _ln(a: int) -> int:
    """Natural logarithm of an 18-decimal value, as an 18-decimal value."""
    if a < ONE_18:
        return -_ln((ONE_18 * ONE_18) // a)

    sum_val = 0
    for x_n, a_n in zip(X_18, A_18):
        if a >= a_n * ONE_18:
            a //= a_n
            sum_val += x_n

    sum_val *= 100
    a *= 100

    for x_n, a_n in zip(X_20, A_20):
        if a >= a_n:
            a = (a * ONE_20) // a_n
            sum_val += x_n

    # ln(a) = 2 * arctanh(z), z = (a - 1) / (a + 1)
    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    z_squared = (z * z) // ONE_20

    num = z
    series_sum = num
    for i in range(3, 12, 2):
        num = (num * z_squared) // ONE_20
        series_sum += num // i

    series_sum *= 2
    return (sum_val + series_sum) // 100


def _ln_36(x: int) -> int:
    """Natural logarithm of an 18-decimal value close to 1, as a 36-decimal value."""
    x *= ONE_18

    z = _div_trunc((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _div_trunc(z * z, ONE_36)

    num = z
    series_sum = num
    for i in range(3, 16, 2):
        num = _div_trunc(num * z_squared, ONE_36)
        series_sum += _div_trunc(num, i)

    return series_sum * 2


def exp(x: int) -> int:
    """Compute e^x for an 18-decimal exponent (may be negative).

    Raises:
        InvalidExponent: If x is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]
    """
    if not (MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT):
        raise InvalidExponent(f"Exponent {x} outside valid range")

    if x < 0:
        return (ONE_18 * ONE_18) // exp(-x)

    if x >= X_18[0]:
        x -= X_18[0]
        first_an = A_18[0]
    elif x >= X_18[1]:
        x -= X_18[1]
        first_an = A_18[1]
    else:
        first_an = 1

    x *= 100

    # Reduce down to 2^-2; the series covers the remainder
    product = ONE_20
    for x_n, a_n in zip(X_20[:8], A_20[:8]):
        if x >= x_n:
            x -= x_n
            product = (product * a_n) // ONE_20

    # Taylor series up to x^12 / 12!
    series_sum = ONE_20
    term = x
    series_sum += term
    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return (((product * series_sum) // ONE_20) * first_an) // 100


def pow_raw(x: int, y: int) -> int:
    """Compute x^y for non-negative 18-decimal base and exponent.

    Raises:
        XOutOfBounds: If x does not fit a signed 256-bit integer
        YOutOfBounds: If y exceeds MILD_EXPONENT_BOUND
        ProductOutOfBounds: If y * ln(x) is outside the domain of exp
    """
    if y == 0:
        return ONE_18
    if x == 0:
        return 0

    if x >= (1 << 255):
        raise XOutOfBounds(f"Base {x} too large")
    if y >= MILD_EXPONENT_BOUND:
        raise YOutOfBounds(f"Exponent {y} exceeds bound")

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        ln_36_x = _ln_36(x)
        div1 = _div_trunc(ln_36_x, ONE_18)
        rem1 = ln_36_x - div1 * ONE_18
        logx_times_y = div1 * y + _div_trunc(rem1 * y, ONE_18)
    else:
        logx_times_y = _ln(x) * y

    logx_times_y = _div_trunc(logx_times_y, ONE_18)

    if not (MIN_NATURAL_EXPONENT <= logx_times_y <= MAX_NATURAL_EXPONENT):
        raise ProductOutOfBounds(f"Product {logx_times_y} outside valid range")

    return exp(logx_times_y)


def sqrt_36(value: int) -> int:
    """Square root of a 36-decimal operand, returned as an 18-decimal value.

    Rounds down. Used where the operand was assembled at double precision so
    the root keeps all 18 decimals.
    """
    if value < 0:
        raise ValueError(f"sqrt_36 requires a non-negative operand, got {value}")
    return isqrt(value)


class Bfp:
    """18-decimal fixed-point number stored as int.

    Example: 1.5 is stored as 1_500_000_000_000_000_000.
    """

    ONE: ClassVar[int] = ONE_18
    MAX_POW_RELATIVE_ERROR: ClassVar[int] = 10000  # 10^-14

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: int) -> None:
        self.value = value

    @classmethod
    def from_wei(cls, wei: int) -> Bfp:
        """Create from a raw value already scaled to 18 decimals."""
        return cls(wei)

    @classmethod
    def from_decimal(cls, d: Decimal) -> Bfp:
        """Create from a non-negative decimal, rounding half up at 18 decimals."""
        if not d.is_finite():
            raise ValueError(f"Bfp.from_decimal requires a finite input, got {d}")
        if d < 0:
            raise ValueError(f"Bfp.from_decimal requires non-negative input, got {d}")
        scaled = (d * cls.ONE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(int(scaled))

    @classmethod
    def from_int(cls, i: int) -> Bfp:
        """Create from a whole number (scaled by 10^18)."""
        return cls(i * cls.ONE)

    def to_decimal(self) -> Decimal:
        return Decimal(self.value) / Decimal(self.ONE)

    def is_zero(self) -> bool:
        return self.value == 0

    # --- Products and quotients ---

    def mul_down(self, other: Bfp) -> Bfp:
        """(a * b) // 10^18"""
        return Bfp((self.value * other.value) // self.ONE)

    def mul_up(self, other: Bfp) -> Bfp:
        product = self.value * other.value
        if product == 0:
            return Bfp(0)
        return Bfp((product - 1) // self.ONE + 1)

    def div_down(self, other: Bfp) -> Bfp:
        """(a * 10^18) // b"""
        if other.value == 0:
            raise ZeroDivisionError("Bfp division by zero")
        return Bfp((self.value * self.ONE) // other.value)

    def div_up(self, other: Bfp) -> Bfp:
        if other.value == 0:
            raise ZeroDivisionError("Bfp division by zero")
        numerator = self.value * self.ONE
        if numerator == 0:
            return Bfp(0)
        return Bfp((numerator - 1) // other.value + 1)

    def mul(self, other: Bfp, rounding: Rounding) -> Bfp:
        """Multiply in the requested rounding direction."""
        if rounding is Rounding.ROUND_UP:
            return self.mul_up(other)
        return self.mul_down(other)

    def div(self, other: Bfp, rounding: Rounding) -> Bfp:
        """Divide in the requested rounding direction."""
        if rounding is Rounding.ROUND_UP:
            return self.div_up(other)
        return self.div_down(other)

    # --- Additive helpers ---

    def complement(self) -> Bfp:
        """Return 1 - self, clamped at 0."""
        return Bfp(max(0, self.ONE - self.value))

    def add(self, other: Bfp) -> Bfp:
        return Bfp(self.value + other.value)

    def sub(self, other: Bfp) -> Bfp:
        """Subtract, clamping at 0.

        Callers that must detect a negative result use SafeInt instead.
        """
        return Bfp(max(0, self.value - other.value))

    # --- Powers and roots ---

    def _pow_max_error(self, raw: int) -> int:
        product = raw * self.MAX_POW_RELATIVE_ERROR
        return ((product - 1) // self.ONE + 1 if product > 0 else 0) + 1

    def pow_down(self, exponent: Bfp) -> Bfp:
        """self^exponent, rounded down by the pow error bound."""
        raw = pow_raw(self.value, exponent.value)
        max_error = self._pow_max_error(raw)
        if raw < max_error:
            return Bfp(0)
        return Bfp(raw - max_error)

    def pow_up(self, exponent: Bfp) -> Bfp:
        """self^exponent, rounded up by the pow error bound."""
        raw = pow_raw(self.value, exponent.value)
        return Bfp(raw + self._pow_max_error(raw))

    def sqrt(self) -> Bfp:
        """Square root, rounded down."""
        return Bfp(sqrt_36(self.value * self.ONE))

    # --- Comparisons ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value >= other.value

    def __repr__(self) -> str:
        return f"Bfp({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())
