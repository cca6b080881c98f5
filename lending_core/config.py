"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .addressing import CANONICAL_BUMP

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PoolConfig:
    collateral_asset: str = ""
    debt_asset: str = ""
    treasury: str = ""
    vault: str = "collateral-vault"
    bump: int = CANONICAL_BUMP


@dataclass(frozen=True)
class AccountConfig:
    address: str = ""
    asset: str = ""
    owner: str = ""
    amount: int = 0
    delegate: str | None = None
    delegated_amount: int = 0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    program_id: str = ""
    pool: PoolConfig = field(default_factory=PoolConfig)
    accounts: tuple[AccountConfig, ...] = ()
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_pool(raw: dict[str, Any]) -> PoolConfig:
    return PoolConfig(
        collateral_asset=str(raw.get("collateral_asset", "")),
        debt_asset=str(raw.get("debt_asset", "")),
        treasury=str(raw.get("treasury", "")),
        vault=str(raw.get("vault", PoolConfig.vault)),
        bump=int(raw.get("bump", CANONICAL_BUMP)),
    )


def _build_accounts(raw: list[dict[str, Any]]) -> tuple[AccountConfig, ...]:
    accounts: list[AccountConfig] = []
    for a in raw:
        delegate = a.get("delegate")
        accounts.append(
            AccountConfig(
                address=str(a.get("address", "")),
                asset=str(a.get("asset", "")),
                owner=str(a.get("owner", "")),
                amount=int(a.get("amount", 0)),
                delegate=str(delegate) if delegate else None,
                delegated_amount=int(a.get("delegated_amount", 0)),
            )
        )
    return tuple(accounts)


def _build_logging(raw: dict[str, Any]) -> LoggingConfig:
    return LoggingConfig(level=str(raw.get("level", "INFO")).upper())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate deployment configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        program_id=str(raw.get("program_id", "")),
        pool=_build_pool(raw.get("pool") or {}),
        accounts=_build_accounts(raw.get("accounts") or []),
        logging=_build_logging(raw.get("logging") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.program_id:
        raise ValueError("program_id must be configured")

    pool = cfg.pool
    if not pool.collateral_asset or not pool.debt_asset:
        raise ValueError("Pool must name both a collateral and a debt asset")
    if pool.collateral_asset == pool.debt_asset:
        raise ValueError("Collateral and debt assets must differ")
    if not 0 <= pool.bump <= 255:
        raise ValueError(f"Pool bump {pool.bump} does not fit in one byte")

    seen: set[str] = set()
    for account in cfg.accounts:
        if not account.address:
            raise ValueError(f"Account owned by '{account.owner}' has no address")
        if account.address in seen:
            raise ValueError(f"Duplicate account address '{account.address}'")
        seen.add(account.address)
        if account.amount < 0 or account.delegated_amount < 0:
            raise ValueError(f"Account '{account.address}' has a negative balance")

    if pool.vault in seen:
        raise ValueError(f"Vault '{pool.vault}' collides with a configured account")

    treasury = next((a for a in cfg.accounts if a.address == pool.treasury), None)
    if treasury is None:
        raise ValueError(f"Treasury '{pool.treasury}' is not a configured account")
    if treasury.asset != pool.debt_asset:
        raise ValueError(
            f"Treasury '{pool.treasury}' holds {treasury.asset}, "
            f"expected {pool.debt_asset}"
        )
