"""Pydantic models for reClAMM pool inputs and persisted snapshots.

Caller-supplied parameters are human-scale decimals; persisted values are
raw 18-decimal integers serialized as decimal strings, as they are on-chain.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from reclamm.constants import MAX_TIMESTAMP
from reclamm.engine.price_ratio import PriceRatioState
from reclamm.safe_int import UINT256_MAX

if TYPE_CHECKING:
    from reclamm.pool.state import ReClammPoolSnapshot, ReClammPoolState


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

Timestamp = Annotated[int, Field(ge=0, le=MAX_TIMESTAMP)]

# Non-negative, finite decimal (pydantic rejects NaN and infinity for Decimal)
NonNegativeDecimal = Annotated[Decimal, Field(ge=0)]


class PoolParameters(BaseModel):
    """Creation parameters of a reClAMM pool.

    Prices are of token A in token B. The ordering min < target < max, and
    the margin and rate bounds, are enforced when the pool is initialized.
    """

    min_price: NonNegativeDecimal = Field(alias="minPrice")
    max_price: NonNegativeDecimal = Field(alias="maxPrice")
    target_price: NonNegativeDecimal = Field(alias="targetPrice")
    centeredness_margin: NonNegativeDecimal = Field(
        alias="centerednessMargin",
        description="Target range threshold as a fraction (0.2 = 20%).",
    )
    daily_price_shift_exponent: NonNegativeDecimal = Field(
        alias="dailyPriceShiftExponent",
        description="Range shift speed while out of range (1.0 = 100% per day).",
    )

    model_config = {"populate_by_name": True}


class PriceRatioStateModel(BaseModel):
    """Serialized price ratio update."""

    start_fourth_root_price_ratio: Uint256 = Field(alias="startFourthRootPriceRatio")
    end_fourth_root_price_ratio: Uint256 = Field(alias="endFourthRootPriceRatio")
    price_ratio_update_start_time: Timestamp = Field(alias="priceRatioUpdateStartTime")
    price_ratio_update_end_time: Timestamp = Field(alias="priceRatioUpdateEndTime")

    model_config = {"populate_by_name": True}

    def to_state(self) -> PriceRatioState:
        return PriceRatioState(
            start_fourth_root_price_ratio=int(self.start_fourth_root_price_ratio),
            end_fourth_root_price_ratio=int(self.end_fourth_root_price_ratio),
            price_ratio_update_start_time=self.price_ratio_update_start_time,
            price_ratio_update_end_time=self.price_ratio_update_end_time,
        )


class PoolStateModel(BaseModel):
    """Serialized persisted state of a reClAMM pool."""

    virtual_balances: tuple[Uint256, Uint256] = Field(alias="virtualBalances")
    last_timestamp: Timestamp = Field(alias="lastTimestamp")
    price_ratio_state: PriceRatioStateModel = Field(alias="priceRatioState")
    centeredness_margin: Uint256 = Field(alias="centerednessMargin")
    daily_price_shift_base: Uint256 = Field(alias="dailyPriceShiftBase")

    model_config = {"populate_by_name": True}

    def to_state(self) -> ReClammPoolState:
        """Convert to the engine-facing frozen dataclass.

        Raises:
            ConfigurationFault: If the price ratio values are invalid
        """
        from reclamm.pool.state import ReClammPoolState

        return ReClammPoolState(
            virtual_balances=(int(self.virtual_balances[0]), int(self.virtual_balances[1])),
            last_timestamp=self.last_timestamp,
            price_ratio_state=self.price_ratio_state.to_state(),
            centeredness_margin=int(self.centeredness_margin),
            daily_price_shift_base=int(self.daily_price_shift_base),
        )

    @classmethod
    def from_state(cls, state: ReClammPoolState) -> PoolStateModel:
        prs = state.price_ratio_state
        return cls(
            virtual_balances=(str(state.virtual_balances[0]), str(state.virtual_balances[1])),
            last_timestamp=state.last_timestamp,
            price_ratio_state=PriceRatioStateModel(
                start_fourth_root_price_ratio=str(prs.start_fourth_root_price_ratio),
                end_fourth_root_price_ratio=str(prs.end_fourth_root_price_ratio),
                price_ratio_update_start_time=prs.price_ratio_update_start_time,
                price_ratio_update_end_time=prs.price_ratio_update_end_time,
            ),
            centeredness_margin=str(state.centeredness_margin),
            daily_price_shift_base=str(state.daily_price_shift_base),
        )


class TokenReserveModel(BaseModel):
    """Serialized reserve of one pool token."""

    token: Address
    balance: Uint256
    scaling_factor: Uint256 = Field(default="1", alias="scalingFactor")

    model_config = {"populate_by_name": True}


class PoolSnapshotModel(BaseModel):
    """Serialized reClAMM pool: token reserves plus persisted state."""

    id: str
    address: Address
    fee: Decimal = Field(default=Decimal("0"), ge=0, lt=1)
    tokens: list[TokenReserveModel] = Field(min_length=2, max_length=2)
    state: PoolStateModel

    model_config = {"populate_by_name": True}

    def to_snapshot(self) -> ReClammPoolSnapshot:
        from reclamm.pool.state import ReClammPoolSnapshot, TokenReserve

        reserves = tuple(
            TokenReserve(
                token=t.token.lower(),
                balance=int(t.balance),
                scaling_factor=int(t.scaling_factor),
            )
            for t in self.tokens
        )
        return ReClammPoolSnapshot(
            id=self.id,
            address=self.address.lower(),
            reserves=(reserves[0], reserves[1]),
            state=self.state.to_state(),
            fee=self.fee,
        )
