#!/usr/bin/env python3
"""Simulate a reClAMM pool over time.

Loads a pool snapshot, optionally applies one exact-input swap, then advances
time in fixed steps and prints the virtual balances, centeredness and price
range at each step.

Usage:
    python scripts/simulate_pool.py --snapshot pool.json --steps 24 --step-seconds 3600
    python scripts/simulate_pool.py --snapshot pool.json --sell-token 0x... --amount 1000000
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import structlog

from reclamm.engine.errors import ReClammError, UnknownTokenError
from reclamm.pool import (
    ReClammAMM,
    ReClammPoolSnapshot,
    TokenReserve,
    dump_pool_snapshot,
    load_pool_snapshot,
    scaled_balances,
)

logger = structlog.get_logger()


def apply_swap(
    amm: ReClammAMM,
    snapshot: ReClammPoolSnapshot,
    sell_token: str,
    amount_in: int,
    now: int,
) -> ReClammPoolSnapshot:
    """Sell ``amount_in`` of ``sell_token`` and return the updated snapshot."""
    index_in = snapshot.get_token_index(sell_token)
    if index_in is None:
        raise UnknownTokenError(f"Token {sell_token} is not in pool {snapshot.id}")
    index_out = 1 - index_in
    buy_token = snapshot.reserves[index_out].token

    result = amm.simulate_swap(snapshot, sell_token, buy_token, amount_in, now)
    logger.info(
        "swap_applied",
        token_in=result.token_in,
        token_out=result.token_out,
        amount_in=result.amount_in,
        amount_out=result.amount_out,
    )

    reserves: list[TokenReserve] = list(snapshot.reserves)
    reserves[index_in] = replace(reserves[index_in], balance=reserves[index_in].balance + amount_in)
    reserves[index_out] = replace(
        reserves[index_out], balance=reserves[index_out].balance - result.amount_out
    )
    return replace(snapshot, reserves=(reserves[0], reserves[1]), state=result.state)


def simulate(
    amm: ReClammAMM,
    snapshot: ReClammPoolSnapshot,
    start: int,
    steps: int,
    step_seconds: int,
) -> tuple[list[dict[str, object]], ReClammPoolSnapshot]:
    """Advance the pool ``steps`` times, refreshing virtual balances each step.

    Returns:
        Tuple of (rows, final_snapshot). Each row describes the pool after
        one step.
    """
    pool = amm.pool
    rows: list[dict[str, object]] = []

    for i in range(steps + 1):
        now = start + i * step_seconds
        balances = scaled_balances(snapshot)
        state = pool.refresh(snapshot.state, balances, now)
        snapshot = replace(snapshot, state=state)

        min_price, max_price = pool.get_price_range(state, balances, now)
        rows.append(
            {
                "time": now,
                "virtual_a": state.virtual_balances[0],
                "virtual_b": state.virtual_balances[1],
                "centeredness": pool.get_centeredness(state, balances, now).to_decimal(),
                "in_range": pool.is_within_target_range(state, balances, now),
                "min_price": min_price.to_decimal(),
                "max_price": max_price.to_decimal(),
            }
        )

    return rows, snapshot


def print_rows(rows: list[dict[str, object]]) -> None:
    header = f"{'time':>12} {'centeredness':>22} {'in_range':>8} {'min_price':>28} {'max_price':>28}"
    print(header)
    print("-" * len(header))
    for row in rows:
        print(
            f"{row['time']:>12} {row['centeredness']!s:>22} {row['in_range']!s:>8} "
            f"{row['min_price']!s:>28} {row['max_price']!s:>28}"
        )


def main() -> int:
    """Entry point for the pool simulator."""
    parser = argparse.ArgumentParser(description="Simulate a reClAMM pool over time")
    parser.add_argument(
        "--snapshot",
        type=Path,
        required=True,
        help="Pool snapshot JSON file",
    )
    parser.add_argument(
        "--start",
        type=int,
        default=None,
        help="Start time in seconds (default: the snapshot's last timestamp)",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=24,
        help="Number of time steps (default: 24)",
    )
    parser.add_argument(
        "--step-seconds",
        type=int,
        default=3600,
        help="Seconds per step (default: 3600)",
    )
    parser.add_argument(
        "--sell-token",
        default=None,
        help="Token to sell before advancing time",
    )
    parser.add_argument(
        "--amount",
        type=int,
        default=None,
        help="Amount of --sell-token to sell, in native decimals",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the final snapshot to this JSON file",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    if not args.snapshot.exists():
        logger.error("snapshot_not_found", path=str(args.snapshot))
        print(f"Error: Snapshot not found: {args.snapshot}")
        return 1
    if (args.sell_token is None) != (args.amount is None):
        parser.error("--sell-token and --amount must be given together")

    snapshot = load_pool_snapshot(args.snapshot)
    start = args.start if args.start is not None else snapshot.state.last_timestamp
    amm = ReClammAMM()

    try:
        if args.sell_token is not None:
            snapshot = apply_swap(amm, snapshot, args.sell_token, args.amount, start)
        rows, snapshot = simulate(amm, snapshot, start, args.steps, args.step_seconds)
    except ReClammError as e:
        logger.error("simulation_failed", error=str(e), error_type=type(e).__name__)
        print(f"Error: {e}")
        return 1

    print_rows(rows)

    if args.output is not None:
        with open(args.output, "w") as f:
            json.dump(dump_pool_snapshot(snapshot), f, indent=2)
        logger.info("snapshot_saved", path=str(args.output))

    return 0


if __name__ == "__main__":
    sys.exit(main())
