"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token addresses, time units and pool parameters
- factories: Pool state, snapshot and parameter factory functions
"""

from tests.helpers.constants import (
    CENTEREDNESS_MARGIN,
    DAI,
    DAY,
    FOURTH_ROOT_PRICE_RATIO,
    HOUR,
    POOL_ADDRESS,
    USDC,
    WETH,
)
from tests.helpers.factories import (
    CENTERED_BALANCES,
    CENTERED_FOURTH_ROOT_PRICE_RATIO,
    CENTERED_VIRTUAL_BALANCES,
    make_pool_parameters,
    make_pool_state,
    make_snapshot,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "POOL_ADDRESS",
    "HOUR",
    "DAY",
    "CENTEREDNESS_MARGIN",
    "FOURTH_ROOT_PRICE_RATIO",
    # Factories
    "CENTERED_BALANCES",
    "CENTERED_VIRTUAL_BALANCES",
    "CENTERED_FOURTH_ROOT_PRICE_RATIO",
    "make_pool_state",
    "make_snapshot",
    "make_pool_parameters",
]
