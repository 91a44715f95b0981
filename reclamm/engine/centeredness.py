"""Pool centeredness.

Centeredness measures how symmetric the real balances are within the price
range implied by the virtual balances: 1 means perfectly centered, 0 means
one real balance is exhausted (the pool sits at an edge of its range).

The token with the lower real balance relative to its virtual balance is the
scarcer one, hence "overvalued"; the other is "undervalued". A pool is
*above center* when token A is the undervalued one.
"""

from collections.abc import Sequence

from reclamm.math.fixed_point import ONE_18, Bfp


def is_above_center(balances: Sequence[Bfp], virtual_balances: Sequence[Bfp]) -> bool:
    """Whether real[A] / real[B] > virtual[A] / virtual[B].

    Compared by cross-multiplication. A pool with no token B is above center.
    """
    if balances[1].is_zero():
        return True
    return (
        balances[0].value * virtual_balances[1].value
        > balances[1].value * virtual_balances[0].value
    )


def compute_centeredness(balances: Sequence[Bfp], virtual_balances: Sequence[Bfp]) -> Bfp:
    """Compute pool centeredness in [0, 1].

    Formula (u = undervalued, o = overvalued):
        centeredness = (Ro * Vu) / (Ru * Vo)

    Rounded up, so virtual-balance recomputation derived from it is
    conservative.

    Args:
        balances: Real balances (18-decimal)
        virtual_balances: Virtual balances (18-decimal, strictly positive)

    Returns:
        Centeredness as Bfp; zero if either real balance is zero
    """
    if balances[0].is_zero() or balances[1].is_zero():
        return Bfp(0)

    if is_above_center(balances, virtual_balances):
        numerator = balances[1].value * virtual_balances[0].value
        denominator = balances[0].value * virtual_balances[1].value
    else:
        numerator = balances[0].value * virtual_balances[1].value
        denominator = balances[1].value * virtual_balances[0].value

    # Both products carry 36 decimals; scale once for an 18-decimal quotient
    return Bfp((numerator * ONE_18 - 1) // denominator + 1)


def is_pool_within_target_range(
    balances: Sequence[Bfp],
    virtual_balances: Sequence[Bfp],
    centeredness_margin: Bfp,
) -> bool:
    """Whether the pool is inside its target range (centeredness >= margin)."""
    return compute_centeredness(balances, virtual_balances) >= centeredness_margin
