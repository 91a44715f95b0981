"""Invariant and swap math for reClAMM pools.

The pool is a constant-product curve over real + virtual balances:

    L = (Ra + Va) * (Rb + Vb)

Only real balances can be paid out; virtual liquidity shapes prices but is
never redeemable. Every rounding step favors the pool.
"""

from collections.abc import Sequence

from reclamm.math.fixed_point import Bfp, Rounding
from reclamm.safe_int import S, Underflow

from .errors import (
    AmountOutExceedsBalance,
    InsufficientLiquidity,
    InvalidTokenIndexError,
    NegativeAmountError,
)


def _check_token_indices(token_in_index: int, token_out_index: int) -> None:
    if {token_in_index, token_out_index} != {0, 1}:
        raise InvalidTokenIndexError(
            f"Token indices must be 0 and 1, got in={token_in_index} out={token_out_index}"
        )


def _total_balances(balances: Sequence[Bfp], virtual_balances: Sequence[Bfp]) -> tuple[Bfp, Bfp]:
    return balances[0].add(virtual_balances[0]), balances[1].add(virtual_balances[1])


def compute_invariant(
    balances: Sequence[Bfp],
    virtual_balances: Sequence[Bfp],
    rounding: Rounding,
) -> Bfp:
    """Compute L = (Ra + Va) * (Rb + Vb) in the requested rounding direction."""
    total_a, total_b = _total_balances(balances, virtual_balances)
    return total_a.mul(total_b, rounding)


def compute_out_given_in(
    balances: Sequence[Bfp],
    virtual_balances: Sequence[Bfp],
    token_in_index: int,
    token_out_index: int,
    amount_in: Bfp,
) -> Bfp:
    """Calculate the output amount for an exact input.

    Formula:
        amount_out = (Ro + Vo) - L / (Ri + Vi + amount_in)

    L is rounded up and the new output-side total is rounded up, so the
    amount out is never overstated.

    Raises:
        InvalidTokenIndexError: If the indices are not a permutation of (0, 1)
        NegativeAmountError: If rounding would make the amount out negative
        InsufficientLiquidity: If amount_out >= real balance of token out
    """
    _check_token_indices(token_in_index, token_out_index)
    totals = _total_balances(balances, virtual_balances)

    invariant = totals[0].mul_up(totals[1])
    new_total_out = invariant.div_up(totals[token_in_index].add(amount_in))

    try:
        amount_out = (S(totals[token_out_index].value) - S(new_total_out.value)).value
    except Underflow as e:
        raise NegativeAmountError(f"Amount out for amount in {amount_in.value} is negative") from e

    if amount_out >= balances[token_out_index].value:
        raise InsufficientLiquidity(
            f"Amount out {amount_out} meets or exceeds real balance "
            f"{balances[token_out_index].value}"
        )

    return Bfp(amount_out)


def compute_in_given_out(
    balances: Sequence[Bfp],
    virtual_balances: Sequence[Bfp],
    token_in_index: int,
    token_out_index: int,
    amount_out: Bfp,
) -> Bfp:
    """Calculate the input amount for an exact output.

    Formula:
        amount_in = L / (Ro + Vo - amount_out) - (Ri + Vi)

    Raises:
        InvalidTokenIndexError: If the indices are not a permutation of (0, 1)
        AmountOutExceedsBalance: If amount_out >= real balance of token out
        NegativeAmountError: If rounding would make the amount in negative
    """
    _check_token_indices(token_in_index, token_out_index)
    if amount_out >= balances[token_out_index]:
        raise AmountOutExceedsBalance(
            f"Amount out {amount_out.value} meets or exceeds real balance "
            f"{balances[token_out_index].value}"
        )

    totals = _total_balances(balances, virtual_balances)
    invariant = totals[0].mul_up(totals[1])
    new_total_in = invariant.div_up(totals[token_out_index].sub(amount_out))

    try:
        amount_in = (S(new_total_in.value) - S(totals[token_in_index].value)).value
    except Underflow as e:
        raise NegativeAmountError(f"Amount in for amount out {amount_out.value} is negative") from e

    return Bfp(amount_in)


def compute_price_range(
    balances: Sequence[Bfp],
    virtual_balances: Sequence[Bfp],
) -> tuple[Bfp, Bfp]:
    """Compute the (min, max) price of token A in token B.

    minPrice = Vb^2 / L (all real balance in token A)
    maxPrice = L / Va^2 (all real balance in token B)
    """
    invariant = compute_invariant(balances, virtual_balances, Rounding.ROUND_DOWN)
    min_price = Bfp((virtual_balances[1].value * virtual_balances[1].value) // invariant.value)
    max_price = invariant.div_down(virtual_balances[0].mul_up(virtual_balances[0]))
    return min_price, max_price


def compute_price_ratio(balances: Sequence[Bfp], virtual_balances: Sequence[Bfp]) -> Bfp:
    """Compute maxPrice / minPrice, rounded up."""
    min_price, max_price = compute_price_range(balances, virtual_balances)
    return max_price.div_up(min_price)


def compute_spot_price(balances: Sequence[Bfp], virtual_balances: Sequence[Bfp]) -> Bfp:
    """Current price of token A in token B: (Rb + Vb) / (Ra + Va)."""
    total_a, total_b = _total_balances(balances, virtual_balances)
    return total_b.div_down(total_a)
