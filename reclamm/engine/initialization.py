"""Seeding math for reClAMM pools.

Given a price range and a target price, derive the balance ratio, virtual
balances and fourth root of the price ratio consistent with

    price = (Rb + Vb) / (Ra + Va)

at the minimum, maximum and target prices. Derivations use a fixed reference
magnitude for token A; only the ratios are meaningful, and the absolute scale
comes from the funding amount.
"""

from collections.abc import Sequence

from reclamm.constants import BALANCE_RATIO_TOLERANCE, INITIALIZATION_MAX_BALANCE_A
from reclamm.math.fixed_point import ONE_18, Bfp

from .errors import (
    BalanceRatioMismatch,
    InvalidFourthRootPriceRatio,
    InvalidInitializationPrices,
    InvalidTokenIndexError,
)


def compute_theoretical_price_ratio_and_balances(
    min_price: Bfp,
    max_price: Bfp,
    target_price: Bfp,
) -> tuple[tuple[Bfp, Bfp], tuple[Bfp, Bfp], Bfp]:
    """Compute reference real balances, virtual balances and fourth root price ratio.

    With A_max the reference balance of token A and sqrtQ = sqrt(max / min):

        Va = A_max / (sqrtQ - 1)
        Vb = minPrice * (Va + A_max)
        Rb = sqrt(targetPrice * Vb * (Va + A_max)) - Vb
        Ra = (Rb + Vb - Va * targetPrice) / targetPrice

    Args:
        min_price: Minimum price of token A in token B
        max_price: Maximum price of token A in token B
        target_price: Initial price of token A in token B

    Returns:
        Tuple of (real_balances, virtual_balances, fourth_root_price_ratio)

    Raises:
        InvalidInitializationPrices: Unless 0 < min_price < target_price < max_price
        InvalidFourthRootPriceRatio: If the range is too narrow to represent
    """
    if not (0 < min_price.value < target_price.value < max_price.value):
        raise InvalidInitializationPrices(
            f"Expected 0 < min < target < max, got min={min_price.value} "
            f"target={target_price.value} max={max_price.value}"
        )

    one = Bfp(ONE_18)
    reference_balance_a = Bfp(INITIALIZATION_MAX_BALANCE_A)

    price_ratio = max_price.div_down(min_price)
    sqrt_price_ratio = price_ratio.sqrt()
    fourth_root_price_ratio = sqrt_price_ratio.sqrt()
    if fourth_root_price_ratio <= one:
        raise InvalidFourthRootPriceRatio(
            f"Price ratio {price_ratio.value} is too close to 1 to represent"
        )

    virtual_a = reference_balance_a.div_down(sqrt_price_ratio.sub(one))
    virtual_b = min_price.mul_down(virtual_a.add(reference_balance_a))

    real_b = target_price.mul_up(virtual_b).mul_up(reference_balance_a.add(virtual_a)).sqrt().sub(virtual_b)
    real_a = real_b.add(virtual_b).sub(virtual_a.mul_down(target_price)).div_down(target_price)

    return (real_a, real_b), (virtual_a, virtual_b), fourth_root_price_ratio


def compute_initial_balances(
    min_price: Bfp,
    max_price: Bfp,
    target_price: Bfp,
    reference_token_index: int,
    reference_amount: Bfp,
) -> tuple[Bfp, Bfp]:
    """Scale the theoretical balance ratio to a funding amount of one token.

    Raises:
        InvalidTokenIndexError: If reference_token_index is not 0 or 1
    """
    if reference_token_index not in (0, 1):
        raise InvalidTokenIndexError(f"Reference token index must be 0 or 1, got {reference_token_index}")

    real_balances, _, _ = compute_theoretical_price_ratio_and_balances(min_price, max_price, target_price)
    other_index = 1 - reference_token_index

    ratio = real_balances[other_index].div_down(real_balances[reference_token_index])
    other_amount = reference_amount.mul_down(ratio)

    if reference_token_index == 0:
        return reference_amount, other_amount
    return other_amount, reference_amount


def compute_initial_virtual_balances(
    balances: Sequence[Bfp],
    min_price: Bfp,
    max_price: Bfp,
    target_price: Bfp,
    tolerance: int = BALANCE_RATIO_TOLERANCE,
) -> tuple[tuple[Bfp, Bfp], Bfp]:
    """Virtual balances matching actual seeding balances.

    The seeding balances must match the theoretical ratio within ``tolerance``
    (relative, 18-decimal); the theoretical virtual balances are then scaled by
    the same factor as the real ones.

    Returns:
        Tuple of (virtual_balances, fourth_root_price_ratio)

    Raises:
        BalanceRatioMismatch: If a balance is zero or the ratio is off
    """
    if balances[0].is_zero() or balances[1].is_zero():
        raise BalanceRatioMismatch("Seeding balances must both be positive")

    real_balances, virtual_balances, fourth_root_price_ratio = (
        compute_theoretical_price_ratio_and_balances(min_price, max_price, target_price)
    )

    theoretical_ratio = real_balances[1].div_down(real_balances[0])
    actual_ratio = balances[1].div_down(balances[0])
    deviation = abs(actual_ratio.value - theoretical_ratio.value)
    if deviation > theoretical_ratio.mul_up(Bfp(tolerance)).value:
        raise BalanceRatioMismatch(
            f"Balance ratio {actual_ratio} differs from expected {theoretical_ratio}"
        )

    scale = balances[0].div_down(real_balances[0])
    return (
        (virtual_balances[0].mul_down(scale), virtual_balances[1].mul_down(scale)),
        fourth_root_price_ratio,
    )
