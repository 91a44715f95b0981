"""reClAMM scaling and fee helpers.

Functions for scaling token amounts between native decimals and 18-decimal
fixed-point, and for applying the static swap fee.
"""

from decimal import Decimal

from reclamm.engine.errors import InvalidScalingFactor, InvalidSwapFee
from reclamm.math.fixed_point import Bfp


def _check_scaling_factor(scaling_factor: int) -> None:
    if scaling_factor <= 0:
        raise InvalidScalingFactor(f"Scaling factor must be positive, got {scaling_factor}")


def _check_swap_fee(swap_fee: Decimal) -> None:
    if not swap_fee.is_finite() or swap_fee < 0 or swap_fee >= 1:
        raise InvalidSwapFee(f"Swap fee must be in range [0, 1), got {swap_fee}")


def scale_up(amount: int, scaling_factor: int) -> Bfp:
    """Scale token amount to 18 decimals for internal math.

    Args:
        amount: Amount in token's native decimals
        scaling_factor: Factor to scale by (e.g., 10^12 for 6-decimal tokens)

    Returns:
        Amount as Bfp (18-decimal fixed-point)

    Raises:
        InvalidScalingFactor: If scaling_factor <= 0
    """
    _check_scaling_factor(scaling_factor)
    return Bfp.from_wei(amount * scaling_factor)


def scale_down_down(bfp: Bfp, scaling_factor: int) -> int:
    """Scale 18-decimal result back to token decimals, rounding down.

    Used for amounts the pool pays out.
    """
    _check_scaling_factor(scaling_factor)
    return bfp.value // scaling_factor


def scale_down_up(bfp: Bfp, scaling_factor: int) -> int:
    """Scale 18-decimal result back to token decimals, rounding up.

    Used for amounts the pool receives.
    """
    _check_scaling_factor(scaling_factor)
    if bfp.value == 0:
        return 0
    return (bfp.value - 1) // scaling_factor + 1


def subtract_swap_fee_amount(amount: Bfp, swap_fee: Decimal) -> Bfp:
    """Subtract the swap fee from an exact input amount.

    The fee is rounded up, so the amount that reaches the curve is rounded down.

    Raises:
        InvalidSwapFee: If swap_fee is not in range [0, 1)
    """
    _check_swap_fee(swap_fee)
    fee_amount = amount.mul_up(Bfp.from_decimal(swap_fee))
    return amount.sub(fee_amount)


def add_swap_fee_amount(amount: Bfp, swap_fee: Decimal) -> Bfp:
    """Gross up a curve input amount so that it covers the swap fee.

    Formula: amount_with_fee = amount / (1 - fee), rounded up

    Raises:
        InvalidSwapFee: If swap_fee is not in range [0, 1)
    """
    _check_swap_fee(swap_fee)
    return amount.div_up(Bfp.from_decimal(swap_fee).complement())
