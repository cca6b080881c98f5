"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from lending_core.addressing import position_address
from lending_core.config import AccountConfig, AppConfig, LoggingConfig, PoolConfig
from lending_core.models import UserPosition
from lending_core.scenario import Deployment, deploy
from lending_core.services import LendingProtocol

PROGRAM_ID = "LendTest11111111111111111111111111111111111"
TREASURY = "treasury-usdc"
VAULT = "ore-vault"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pool_config() -> PoolConfig:
    return PoolConfig(
        collateral_asset="ORE",
        debt_asset="USDC",
        treasury=TREASURY,
        vault=VAULT,
    )


@pytest.fixture()
def sample_accounts() -> tuple[AccountConfig, ...]:
    return (
        AccountConfig(
            address=TREASURY,
            asset="USDC",
            owner="admin",
            amount=1_000_000,
            delegate="alice",
            delegated_amount=1_000_000,
        ),
        AccountConfig(address="alice-ore", asset="ORE", owner="alice", amount=10_000),
        AccountConfig(address="alice-usdc", asset="USDC", owner="alice"),
        AccountConfig(address="bob-ore", asset="ORE", owner="bob"),
        AccountConfig(address="bob-usdc", asset="USDC", owner="bob", amount=10_000),
        AccountConfig(address="admin-usdc", asset="USDC", owner="admin"),
        AccountConfig(address="mallory-ore", asset="ORE", owner="mallory"),
        AccountConfig(address="mallory-usdc", asset="USDC", owner="mallory"),
    )


@pytest.fixture()
def sample_app_config(
    sample_pool_config: PoolConfig,
    sample_accounts: tuple[AccountConfig, ...],
) -> AppConfig:
    return AppConfig(
        program_id=PROGRAM_ID,
        pool=sample_pool_config,
        accounts=sample_accounts,
        logging=LoggingConfig(level="DEBUG"),
    )


# ---------------------------------------------------------------------------
# Market fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def market(sample_app_config: AppConfig) -> Deployment:
    return deploy(sample_app_config)


@pytest.fixture()
def protocol(market: Deployment) -> LendingProtocol:
    return market.protocol


@pytest.fixture()
def seed_position(market: Deployment) -> Callable[..., UserPosition]:
    """Write a position directly and back its collateral with vault funds.

    Lets tests reach states (e.g. collateral below debt) that the public
    operations alone cannot produce without a price feed.
    """

    def _seed(owner: str, collateral: int, borrowed: int) -> UserPosition:
        position = UserPosition(
            owner=owner, collateral_amount=collateral, borrowed_amount=borrowed
        )
        market.store.put(position_address(owner, PROGRAM_ID), position)
        market.ledger.mint_to(market.vault, collateral)
        return position

    return _seed


@pytest.fixture()
def snapshot(market: Deployment) -> Callable[[], dict[str, Any]]:
    """Capture every stored record and token account for before/after checks."""

    def _snapshot() -> dict[str, Any]:
        return {
            "records": dict(market.store.items()),
            "accounts": {a.address: a for a in market.ledger.accounts()},
        }

    return _snapshot


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    program_id: "LendTest11111111111111111111111111111111111"
    logging:
      level: debug
    pool:
      collateral_asset: ORE
      debt_asset: USDC
      treasury: treasury-usdc
      vault: ore-vault
    accounts:
      - address: treasury-usdc
        asset: USDC
        owner: admin
        amount: 1000000
        delegate: alice
        delegated_amount: 5000
      - address: alice-ore
        asset: ORE
        owner: alice
        amount: 5000
      - address: alice-usdc
        asset: USDC
        owner: alice
      - address: bob-ore
        asset: ORE
        owner: bob
      - address: bob-usdc
        asset: USDC
        owner: bob
        amount: 5000
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
