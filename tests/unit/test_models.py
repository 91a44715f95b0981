"""Tests for Pydantic models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from reclamm.constants import MAX_TIMESTAMP
from reclamm.math.fixed_point import ONE_18
from reclamm.models import (
    PoolParameters,
    PoolStateModel,
    PriceRatioStateModel,
    TokenReserveModel,
    validate_uint256,
)
from reclamm.safe_int import UINT256_MAX
from tests.helpers import WETH, make_pool_state


class TestValidateUint256:
    """Tests for the uint256 validator."""

    def test_accepts_int_and_string(self):
        """Ints and decimal strings normalize to decimal strings."""
        assert validate_uint256(42) == "42"
        assert validate_uint256("42") == "42"
        assert validate_uint256(UINT256_MAX) == str(UINT256_MAX)

    @pytest.mark.parametrize("value", [-1, "-1", UINT256_MAX + 1, "0x10", "1.5", True, 1.0, None])
    def test_rejects_invalid(self, value):
        """Negative, oversized, non-decimal and non-integer values are rejected."""
        with pytest.raises(ValueError):
            validate_uint256(value)


class TestPoolParameters:
    """Tests for PoolParameters model."""

    def test_parse_camel_case(self):
        """Parameters can be parsed with camelCase keys."""
        params = PoolParameters.model_validate(
            {
                "minPrice": "1000",
                "maxPrice": "4000",
                "targetPrice": "2500",
                "centerednessMargin": "0.2",
                "dailyPriceShiftExponent": "1",
            }
        )
        assert params.min_price == Decimal("1000")
        assert params.centeredness_margin == Decimal("0.2")

    def test_parse_snake_case(self):
        """Parameters can also be populated by field name."""
        params = PoolParameters(
            min_price=Decimal("1"),
            max_price=Decimal("2"),
            target_price=Decimal("1.5"),
            centeredness_margin=Decimal("0.1"),
            daily_price_shift_exponent=Decimal("0.5"),
        )
        assert params.target_price == Decimal("1.5")

    @pytest.mark.parametrize("value", ["-1", "NaN", "Infinity"])
    def test_rejects_negative_and_non_finite(self, value):
        """Negative and non-finite decimals fail validation."""
        with pytest.raises(ValidationError):
            PoolParameters(
                min_price=Decimal(value),
                max_price=Decimal("2"),
                target_price=Decimal("1.5"),
                centeredness_margin=Decimal("0.1"),
                daily_price_shift_exponent=Decimal("0.5"),
            )


class TestPriceRatioStateModel:
    """Tests for PriceRatioStateModel."""

    def test_timestamp_bounds(self):
        """Timestamps must fit in uint32."""
        with pytest.raises(ValidationError):
            PriceRatioStateModel(
                start_fourth_root_price_ratio=str(2 * ONE_18),
                end_fourth_root_price_ratio=str(2 * ONE_18),
                price_ratio_update_start_time=0,
                price_ratio_update_end_time=MAX_TIMESTAMP + 1,
            )

    def test_to_state(self):
        """Converts to the engine dataclass with int values."""
        model = PriceRatioStateModel(
            start_fourth_root_price_ratio=str(2 * ONE_18),
            end_fourth_root_price_ratio=3 * ONE_18,
            price_ratio_update_start_time=10,
            price_ratio_update_end_time=20,
        )
        state = model.to_state()
        assert state.start_fourth_root_price_ratio == 2 * ONE_18
        assert state.end_fourth_root_price_ratio == 3 * ONE_18
        assert state.price_ratio_update_end_time == 20


class TestPoolStateModel:
    """Tests for PoolStateModel."""

    def test_from_state_and_back(self):
        """A persisted state survives serialization unchanged."""
        state = make_pool_state(last_timestamp=123)
        assert PoolStateModel.from_state(state).to_state() == state

    def test_serializes_integers_as_strings(self):
        """Fixed-point values are dumped as decimal strings."""
        dumped = PoolStateModel.from_state(make_pool_state()).model_dump(by_alias=True)
        assert dumped["virtualBalances"] == (str(2 * ONE_18), str(2 * ONE_18))
        assert dumped["centerednessMargin"] == str(20 * 10**16)


class TestTokenReserveModel:
    """Tests for TokenReserveModel."""

    def test_default_scaling_factor(self):
        """Scaling factor defaults to 1 (18-decimal token)."""
        reserve = TokenReserveModel(token=WETH, balance="5")
        assert reserve.scaling_factor == "1"

    def test_invalid_address(self):
        """Addresses must be 0x-prefixed 40-hex-digit strings."""
        with pytest.raises(ValidationError):
            TokenReserveModel(token="0x1234", balance="5")
