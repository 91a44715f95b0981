"""reClAMM pool dataclasses.

Persisted pool state and token reserve snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from reclamm.engine.price_ratio import PriceRatioState
from reclamm.math.fixed_point import Bfp


@dataclass(frozen=True)
class ReClammPoolState:
    """State a reClAMM pool persists between interactions.

    Real balances are not part of it: they are owned by whoever holds the
    tokens and are passed into every operation.

    Attributes:
        virtual_balances: Last persisted virtual balances (18-decimal), token A first
        last_timestamp: Time the virtual balances were last persisted, in seconds
        price_ratio_state: The current (possibly finished) price ratio update
        centeredness_margin: Target range threshold (18-decimal, in [0, 1])
        daily_price_shift_base: Per-second decay base (18-decimal, 1 - tau)
    """

    virtual_balances: tuple[int, int]
    last_timestamp: int
    price_ratio_state: PriceRatioState
    centeredness_margin: int
    daily_price_shift_base: int

    @property
    def virtual_balances_bfp(self) -> tuple[Bfp, Bfp]:
        return Bfp(self.virtual_balances[0]), Bfp(self.virtual_balances[1])


@dataclass(frozen=True)
class TokenReserve:
    """Reserve information for a token in a reClAMM pool.

    Attributes:
        token: Token address (case-insensitive comparison supported)
        balance: Raw real balance (in token's native decimals)
        scaling_factor: Factor normalizing the token to 18 decimals. For
            6-decimal tokens like USDC, this is 10^12.
    """

    token: str
    balance: int
    scaling_factor: int


@dataclass(frozen=True)
class ReClammPoolSnapshot:
    """A reClAMM pool as seen by an off-chain quoter.

    Attributes:
        id: Liquidity ID
        address: Pool contract address
        reserves: Token reserves, token A first
        state: Persisted virtual balance and price ratio state
        fee: Static swap fee as decimal (e.g., 0.003 for 0.3%)
    """

    id: str
    address: str
    reserves: tuple[TokenReserve, TokenReserve]
    state: ReClammPoolState
    fee: Decimal

    def get_token_index(self, token: str) -> int | None:
        """Get the index (0 or 1) of a token, or None if not in the pool."""
        token_lower = token.lower()
        for i, reserve in enumerate(self.reserves):
            if reserve.token.lower() == token_lower:
                return i
        return None

    @property
    def balances(self) -> tuple[int, int]:
        """Raw real balances in native token decimals."""
        return self.reserves[0].balance, self.reserves[1].balance
