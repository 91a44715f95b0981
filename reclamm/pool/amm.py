"""reClAMM AMM for off-chain swap quoting.

Works on ``ReClammPoolSnapshot``s carrying raw token balances in native
decimals, scales them to 18 decimals, applies the static swap fee and runs
the swap through ``ReClammPool``.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from reclamm.engine.errors import UnknownTokenError
from reclamm.engine.swap_math import compute_spot_price
from reclamm.math.fixed_point import Bfp

from .pool import ReClammPool, SwapKind, SwapRequest
from .scaling import (
    add_swap_fee_amount,
    scale_down_down,
    scale_down_up,
    scale_up,
    subtract_swap_fee_amount,
)
from .state import ReClammPoolSnapshot, ReClammPoolState

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapResult:
    """Result of simulating a swap through a reClAMM pool.

    Attributes:
        amount_in: Amount of token in, in native decimals, fee included
        amount_out: Amount of token out, in native decimals
        pool_address: Pool the swap was quoted against
        token_in: Input token address (lowercase)
        token_out: Output token address (lowercase)
        state: Pool state to persist after the swap
    """

    amount_in: int
    amount_out: int
    pool_address: str
    token_in: str
    token_out: str
    state: ReClammPoolState


def _get_token_indices(
    snapshot: ReClammPoolSnapshot,
    token_in: str,
    token_out: str,
) -> tuple[int, int]:
    """Get (index_in, index_out) for a token pair.

    Raises:
        UnknownTokenError: If a token is not in the pool or both are the same
    """
    index_in = snapshot.get_token_index(token_in)
    index_out = snapshot.get_token_index(token_out)

    if index_in is None:
        raise UnknownTokenError(f"Token {token_in} is not in pool {snapshot.id}")
    if index_out is None:
        raise UnknownTokenError(f"Token {token_out} is not in pool {snapshot.id}")
    if index_in == index_out:
        raise UnknownTokenError(f"Cannot swap token {token_in} for itself")

    return index_in, index_out


def scaled_balances(snapshot: ReClammPoolSnapshot) -> tuple[int, int]:
    """Real balances of a snapshot scaled to 18 decimals, token A first."""
    a, b = snapshot.reserves
    return (
        scale_up(a.balance, a.scaling_factor).value,
        scale_up(b.balance, b.scaling_factor).value,
    )


class ReClammAMM:
    """reClAMM pool AMM for swap simulation.

    Provides simulate_swap (exact input) and simulate_swap_exact_output.
    Failures raise ``ReClammError`` subclasses.
    """

    def __init__(self, pool: ReClammPool | None = None) -> None:
        self.pool = pool if pool is not None else ReClammPool()

    def simulate_swap(
        self,
        snapshot: ReClammPoolSnapshot,
        token_in: str,
        token_out: str,
        amount_in: int,
        now: int,
    ) -> SwapResult:
        """Simulate a swap through a reClAMM pool (exact input).

        Args:
            snapshot: The pool snapshot
            token_in: Input token address
            token_out: Output token address
            amount_in: Amount of input token, in native decimals
            now: Time of the swap, in seconds

        Returns:
            SwapResult with amounts and the state after the swap
        """
        index_in, index_out = _get_token_indices(snapshot, token_in, token_out)
        reserve_in = snapshot.reserves[index_in]
        reserve_out = snapshot.reserves[index_out]

        amount_in_scaled = scale_up(amount_in, reserve_in.scaling_factor)
        amount_in_after_fee = subtract_swap_fee_amount(amount_in_scaled, snapshot.fee)

        outcome = self.pool.swap(
            snapshot.state,
            scaled_balances(snapshot),
            SwapRequest(SwapKind.EXACT_IN, index_in, index_out, amount_in_after_fee.value),
            now,
        )
        amount_out = scale_down_down(Bfp(outcome.amount_calculated), reserve_out.scaling_factor)

        logger.debug(
            "reclamm_amm_swap",
            pool_id=snapshot.id,
            kind="exact_in",
            amount_in=amount_in,
            amount_out=amount_out,
        )

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_address=snapshot.address,
            token_in=reserve_in.token.lower(),
            token_out=reserve_out.token.lower(),
            state=outcome.state,
        )

    def simulate_swap_exact_output(
        self,
        snapshot: ReClammPoolSnapshot,
        token_in: str,
        token_out: str,
        amount_out: int,
        now: int,
    ) -> SwapResult:
        """Simulate a swap through a reClAMM pool (exact output).

        The fee is added on top of the curve's input amount.

        Args:
            snapshot: The pool snapshot
            token_in: Input token address
            token_out: Output token address
            amount_out: Desired amount of output token, in native decimals
            now: Time of the swap, in seconds

        Returns:
            SwapResult with amounts and the state after the swap
        """
        index_in, index_out = _get_token_indices(snapshot, token_in, token_out)
        reserve_in = snapshot.reserves[index_in]
        reserve_out = snapshot.reserves[index_out]

        amount_out_scaled = scale_up(amount_out, reserve_out.scaling_factor)

        outcome = self.pool.swap(
            snapshot.state,
            scaled_balances(snapshot),
            SwapRequest(SwapKind.EXACT_OUT, index_in, index_out, amount_out_scaled.value),
            now,
        )
        amount_in_with_fee = add_swap_fee_amount(Bfp(outcome.amount_calculated), snapshot.fee)
        amount_in = scale_down_up(amount_in_with_fee, reserve_in.scaling_factor)

        logger.debug(
            "reclamm_amm_swap",
            pool_id=snapshot.id,
            kind="exact_out",
            amount_in=amount_in,
            amount_out=amount_out,
        )

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_address=snapshot.address,
            token_in=reserve_in.token.lower(),
            token_out=reserve_out.token.lower(),
            state=outcome.state,
        )

    def spot_price(self, snapshot: ReClammPoolSnapshot, now: int) -> Bfp:
        """Price of token A in token B on 18-decimal balances at ``now``."""
        real_balances = scaled_balances(snapshot)
        virtual_balances, _ = self.pool.current_virtual_balances(snapshot.state, real_balances, now)
        return compute_spot_price((Bfp(real_balances[0]), Bfp(real_balances[1])), virtual_balances)
