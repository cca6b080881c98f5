"""Integration tests for scenario replay."""
from __future__ import annotations

from pathlib import Path

import pytest

from lending_core.config import AppConfig, load_config
from lending_core.scenario import (
    deploy,
    format_positions,
    format_results,
    load_scenario,
    run_scenario,
    run_step,
)

REPO_ROOT = Path(__file__).resolve().parents[2]


class TestDeploy:
    def test_opens_accounts_and_vault(self, sample_app_config: AppConfig) -> None:
        market = deploy(sample_app_config)
        vault = market.ledger.get_account("ore-vault")
        assert vault.owner == market.protocol.pool_address
        assert vault.asset == "ORE"
        treasury = market.ledger.get_account("treasury-usdc")
        assert treasury.delegate == "alice"
        assert market.protocol.get_pool().treasury == "treasury-usdc"


class TestRunScenario:
    def test_rejections_are_recorded(self, sample_app_config: AppConfig) -> None:
        market = deploy(sample_app_config)
        results = run_scenario(
            market,
            [
                {"op": "deposit", "user": "alice", "account": "alice-ore", "amount": 1000},
                {"op": "borrow", "user": "alice", "account": "alice-usdc", "amount": 751},
                {"op": "borrow", "user": "alice", "account": "alice-usdc", "amount": 750},
                {"op": "borrow", "user": "alice", "account": "alice-usdc", "amount": 750},
            ],
        )
        assert [r.ok for r in results] == [True, False, True, True]
        assert results[1].error_code == 6001
        assert results[1].error_name == "BorrowTooLarge"
        assert market.protocol.get_position("alice").borrowed_amount == 1500

    def test_explicit_treasury(self, sample_app_config: AppConfig) -> None:
        market = deploy(sample_app_config)
        run_step(market, 1, {"op": "deposit", "user": "alice", "account": "alice-ore", "amount": 100})
        result = run_step(
            market, 2,
            {"op": "repay", "user": "alice", "account": "alice-usdc",
             "amount": 0, "treasury": "admin-usdc"},
        )
        assert result.error_name == "InvalidTreasury"

    def test_unknown_op(self, sample_app_config: AppConfig) -> None:
        market = deploy(sample_app_config)
        with pytest.raises(ValueError, match="unknown op"):
            run_step(market, 1, {"op": "flash_loan"})

    def test_missing_argument(self, sample_app_config: AppConfig) -> None:
        market = deploy(sample_app_config)
        with pytest.raises(ValueError, match="missing argument"):
            run_step(market, 1, {"op": "deposit", "user": "alice"})

    def test_formatting(self, sample_app_config: AppConfig) -> None:
        market = deploy(sample_app_config)
        results = run_scenario(
            market,
            [
                {"op": "deposit", "user": "alice", "account": "alice-ore", "amount": 1000},
                {"op": "withdraw", "user": "alice", "account": "alice-ore", "amount": 2000},
            ],
        )
        text = format_results(results)
        assert "1. deposit" in text
        assert "REJECTED 6002 InsufficientCollateral" in text
        table = format_positions(market)
        assert "alice" in table
        assert "1000" in table


class TestBundledFiles:
    def test_bundled_scenario_runs(self) -> None:
        market = deploy(load_config(REPO_ROOT / "config.yaml"))
        results = run_scenario(market, load_scenario(REPO_ROOT / "scenarios" / "liquidation.yaml"))
        outcome = [(r.op, r.error_name) for r in results]
        assert outcome == [
            ("approve", ""),
            ("deposit", ""),
            ("borrow", "BorrowTooLarge"),
            ("borrow", ""),
            ("withdraw", "InsufficientCollateral"),
            ("withdraw", ""),
            ("liquidate", "PositionNotLiquidatable"),
            ("repay", "RepayAmountTooLarge"),
            ("repay", ""),
        ]
        position = market.protocol.get_position("alice")
        assert (position.collateral_amount, position.borrowed_amount) == (800, 0)

    def test_missing_scenario_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_scenario(tmp_path / "nope.yaml")
