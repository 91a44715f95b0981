"""reClAMM pool layer.

Applies the stateless engine to a persisted pool state:

- ReClammPool: refresh, swap and administrative actions over 18-decimal balances
- ReClammAMM: off-chain quoting over raw token balances with scaling and fees
"""

# AMM
from .amm import ReClammAMM, SwapResult, scaled_balances

# Parsing
from .parsing import dump_pool_snapshot, load_pool_snapshot, parse_pool_snapshot

# Pool operations
from .pool import ReClammPool, SwapKind, SwapOutcome, SwapRequest

# Scaling helpers
from .scaling import (
    add_swap_fee_amount,
    scale_down_down,
    scale_down_up,
    scale_up,
    subtract_swap_fee_amount,
)

# Pool dataclasses
from .state import ReClammPoolSnapshot, ReClammPoolState, TokenReserve

__all__ = [
    # AMM
    "ReClammAMM",
    "SwapResult",
    "scaled_balances",
    # Parsing
    "parse_pool_snapshot",
    "load_pool_snapshot",
    "dump_pool_snapshot",
    # Pool operations
    "ReClammPool",
    "SwapKind",
    "SwapRequest",
    "SwapOutcome",
    # Scaling helpers
    "scale_up",
    "scale_down_down",
    "scale_down_up",
    "subtract_swap_fee_amount",
    "add_swap_fee_amount",
    # Pool dataclasses
    "ReClammPoolState",
    "ReClammPoolSnapshot",
    "TokenReserve",
]
