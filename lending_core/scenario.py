"""Scenario replay — builds an in-memory deployment and runs operation lists.

A scenario file is YAML with a ``steps`` list. Each step names an ``op``
and its arguments, e.g.::

    steps:
      - {op: deposit, user: alice, account: alice-ore, amount: 1000}
      - {op: borrow, user: alice, account: alice-usdc, amount: 750}

Treasury arguments default to the pool's current treasury.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml

from .config import AppConfig
from .errors import LendingError
from .ledger import InMemoryAccountStore, InMemoryTokenLedger
from .models import UserPosition
from .risk import assess
from .services import LendingProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    """A fresh market with its backing store and token ledger."""

    protocol: LendingProtocol
    ledger: InMemoryTokenLedger
    store: InMemoryAccountStore
    vault: str


@dataclass(frozen=True)
class StepResult:
    index: int
    op: str
    ok: bool
    error_code: int | None = None
    error_name: str = ""
    detail: str = ""


def deploy(config: AppConfig) -> Deployment:
    """Open every configured account, the pool vault, then initialize the pool."""
    ledger = InMemoryTokenLedger()
    store = InMemoryAccountStore()
    protocol = LendingProtocol(store, ledger, config.program_id)

    for account in config.accounts:
        ledger.open_account(account.address, account.asset, account.owner, account.amount)
        if account.delegate:
            ledger.approve(
                account.address, account.owner, account.delegate,
                account.delegated_amount,
            )

    ledger.open_account(
        config.pool.vault, config.pool.collateral_asset, protocol.pool_address
    )
    protocol.initialize(
        config.pool.collateral_asset,
        config.pool.debt_asset,
        config.pool.treasury,
        config.pool.bump,
    )
    return Deployment(protocol=protocol, ledger=ledger, store=store, vault=config.pool.vault)


def load_scenario(path: str | Path) -> list[dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    steps = raw.get("steps", [])
    if not isinstance(steps, list):
        raise ValueError("'steps' must be a list")
    return steps


# ---------------------------------------------------------------------------
# Step dispatch
# ---------------------------------------------------------------------------


def _treasury(d: Deployment, step: dict[str, Any]) -> str:
    return step.get("treasury") or d.protocol.get_pool().treasury


def _deposit(d: Deployment, s: dict[str, Any]) -> None:
    d.protocol.deposit_collateral(s["user"], s["account"], d.vault, int(s["amount"]))


def _withdraw(d: Deployment, s: dict[str, Any]) -> None:
    d.protocol.withdraw_collateral(s["user"], s["account"], d.vault, int(s["amount"]))


def _borrow(d: Deployment, s: dict[str, Any]) -> None:
    d.protocol.borrow(s["user"], _treasury(d, s), s["account"], int(s["amount"]))


def _repay(d: Deployment, s: dict[str, Any]) -> None:
    d.protocol.repay(s["user"], _treasury(d, s), s["account"], int(s["amount"]))


def _liquidate(d: Deployment, s: dict[str, Any]) -> None:
    d.protocol.liquidate_position(
        s["liquidator"],
        s["owner"],
        _treasury(d, s),
        d.vault,
        s["debt_account"],
        s["collateral_account"],
        int(s["amount"]),
    )


def _update_treasury(d: Deployment, s: dict[str, Any]) -> None:
    d.protocol.update_treasury(s["caller"], s["treasury"])


def _approve(d: Deployment, s: dict[str, Any]) -> None:
    d.ledger.approve(s["account"], s["owner"], s["delegate"], int(s["amount"]))


_OPERATIONS: dict[str, Callable[[Deployment, dict[str, Any]], None]] = {
    "deposit": _deposit,
    "withdraw": _withdraw,
    "borrow": _borrow,
    "repay": _repay,
    "liquidate": _liquidate,
    "update_treasury": _update_treasury,
    "approve": _approve,
}


def run_step(deployment: Deployment, index: int, step: dict[str, Any]) -> StepResult:
    op = step.get("op", "")
    handler = _OPERATIONS.get(op)
    if handler is None:
        raise ValueError(f"Step {index}: unknown op '{op}'")
    try:
        handler(deployment, step)
    except KeyError as e:
        raise ValueError(f"Step {index} ({op}): missing argument {e}") from e
    except LendingError as e:
        return StepResult(
            index=index, op=op, ok=False,
            error_code=e.code, error_name=e.name, detail=str(e),
        )
    return StepResult(index=index, op=op, ok=True)


def run_scenario(
    deployment: Deployment, steps: list[dict[str, Any]]
) -> list[StepResult]:
    """Run every step in order; rejected steps are recorded, not fatal."""
    results = [run_step(deployment, i, step) for i, step in enumerate(steps, 1)]
    failed = sum(1 for r in results if not r.ok)
    logger.info("Scenario finished: %d steps, %d rejected", len(results), failed)
    return results


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def format_results(results: list[StepResult]) -> str:
    lines = []
    for r in results:
        if r.ok:
            lines.append(f"{r.index:>3}. {r.op:<16} ok")
        else:
            lines.append(
                f"{r.index:>3}. {r.op:<16} REJECTED {r.error_code} {r.error_name}"
                f" — {r.detail}"
            )
    return "\n".join(lines)


def format_positions(deployment: Deployment) -> str:
    """Table of every stored position with its derived health."""
    pool = deployment.protocol.get_pool()
    rows = [
        f"{'owner':<16} {'collateral':>12} {'borrowed':>12} {'ratio':>6} "
        f"{'max borrow':>12} liquidatable"
    ]
    for _, record in sorted(deployment.store.items()):
        if not isinstance(record, UserPosition):
            continue
        health = assess(record, pool)
        ratio = "—" if health.collateral_ratio is None else f"{health.collateral_ratio}%"
        rows.append(
            f"{record.owner:<16} {record.collateral_amount:>12} "
            f"{record.borrowed_amount:>12} {ratio:>6} {health.max_borrow:>12} "
            f"{'YES' if health.liquidatable else 'no'}"
        )
    return "\n".join(rows)
