"""Pytest configuration and fixtures."""

import pytest

from reclamm.pool import ReClammAMM, ReClammPool, ReClammPoolState
from tests.helpers import make_pool_state


@pytest.fixture
def pool() -> ReClammPool:
    """Pool operations with the default parameter bounds."""
    return ReClammPool()


@pytest.fixture
def amm(pool: ReClammPool) -> ReClammAMM:
    """AMM quoting through the default pool."""
    return ReClammAMM(pool)


@pytest.fixture
def centered_state() -> ReClammPoolState:
    """Pool state centered on real balances [1, 1], fourth root price ratio 1.5."""
    return make_pool_state()
