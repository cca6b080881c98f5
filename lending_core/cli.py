"""Command-line interface for the lending core."""
from __future__ import annotations

import argparse
import sys

from .arithmetic import require_u64
from .config import load_config
from .errors import LendingError
from .logging_setup import configure_logging
from .models import LendingPool, UserPosition
from .risk import assess, seize_amount
from .scenario import (
    deploy,
    format_positions,
    format_results,
    load_scenario,
    run_scenario,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="lending-core",
        description="Single-market over-collateralized lending core",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, else INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    simulate_parser = sub.add_parser(
        "simulate", help="Replay a scenario against a fresh in-memory market"
    )
    simulate_parser.add_argument("scenario", help="Path to a scenario YAML file")

    health_parser = sub.add_parser(
        "health", help="Risk metrics for a collateral/debt pair"
    )
    health_parser.add_argument("collateral", type=int)
    health_parser.add_argument("borrowed", type=int)
    health_parser.add_argument(
        "--amount",
        type=int,
        default=None,
        help="Liquidation amount to price the seized collateral for",
    )

    return parser


def _simulate(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    configure_logging(args.log_level or config.logging.level)
    deployment = deploy(config)
    results = run_scenario(deployment, load_scenario(args.scenario))
    print(format_results(results))
    print()
    print(format_positions(deployment))
    return 0


def _health(args: argparse.Namespace) -> int:
    configure_logging(args.log_level or "INFO")
    pool = LendingPool(collateral_asset="", debt_asset="", treasury="", bump=0)
    position = UserPosition(
        owner="",
        collateral_amount=require_u64(args.collateral),
        borrowed_amount=require_u64(args.borrowed),
    )
    health = assess(position, pool)
    ratio = "n/a" if health.collateral_ratio is None else f"{health.collateral_ratio}%"
    print(f"Collateral:            {health.collateral_amount}")
    print(f"Borrowed:              {health.borrowed_amount}")
    print(f"Max borrow:            {health.max_borrow}")
    print(f"Min collateral:        {health.min_required_collateral}")
    print(f"Collateral ratio:      {ratio}")
    print(f"Liquidatable:          {'YES' if health.liquidatable else 'No'}")
    if args.amount is not None:
        print(f"Seized for {args.amount}:  {seize_amount(require_u64(args.amount))}")
    return 0


def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    if args.command == "simulate":
        return _simulate(args)
    if args.command == "health":
        return _health(args)
    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(_run(args))
    except LendingError as e:
        print(f"Error {e.code}: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
