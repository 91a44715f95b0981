"""reClAMM pool snapshot parsing.

Builds pool snapshots from JSON-like data via the pydantic models.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from reclamm.models import PoolSnapshotModel, PoolStateModel

from .state import ReClammPoolSnapshot

logger = structlog.get_logger()


def parse_pool_snapshot(data: dict[str, Any]) -> ReClammPoolSnapshot:
    """Parse a reClAMM pool snapshot.

    Args:
        data: Snapshot as decoded JSON (camelCase or snake_case keys)

    Returns:
        ReClammPoolSnapshot ready for ReClammAMM

    Raises:
        pydantic.ValidationError: If the data is malformed
        ConfigurationFault: If the price ratio state is invalid
    """
    model = PoolSnapshotModel.model_validate(data)
    snapshot = model.to_snapshot()

    for reserve in snapshot.reserves:
        if reserve.balance == 0:
            logger.warning(
                "reclamm_zero_balance",
                pool_id=snapshot.id,
                token=reserve.token,
            )

    logger.debug(
        "reclamm_pool_parsed",
        pool_id=snapshot.id,
        last_timestamp=snapshot.state.last_timestamp,
    )
    return snapshot


def load_pool_snapshot(path: Path) -> ReClammPoolSnapshot:
    """Read and parse a snapshot JSON file."""
    with open(path) as f:
        return parse_pool_snapshot(json.load(f))


def dump_pool_snapshot(snapshot: ReClammPoolSnapshot) -> dict[str, Any]:
    """Serialize a snapshot to JSON-compatible data with camelCase keys."""
    return {
        "id": snapshot.id,
        "address": snapshot.address,
        "fee": str(snapshot.fee),
        "tokens": [
            {
                "token": r.token,
                "balance": str(r.balance),
                "scalingFactor": str(r.scaling_factor),
            }
            for r in snapshot.reserves
        ],
        "state": PoolStateModel.from_state(snapshot.state).model_dump(by_alias=True),
    }
