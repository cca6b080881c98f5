"""Data models — all frozen (immutable).

State changes are expressed by building a new record with
``dataclasses.replace`` and writing it back through the account store.
"""
from __future__ import annotations

from dataclasses import dataclass

from .addressing import POOL_SEED, derive_address

LTV_RATIO_PERCENT = 75
LIQUIDATION_THRESHOLD_PERCENT = 80
LIQUIDATION_BONUS_PERCENT = 5


@dataclass(frozen=True)
class LendingPool:
    """The single market configuration."""

    collateral_asset: str
    debt_asset: str
    treasury: str
    bump: int
    ltv_ratio: int = LTV_RATIO_PERCENT
    liquidation_threshold: int = LIQUIDATION_THRESHOLD_PERCENT


@dataclass(frozen=True)
class UserPosition:
    """Collateral/debt bookkeeping for one owner."""

    owner: str
    collateral_amount: int = 0
    borrowed_amount: int = 0


@dataclass(frozen=True)
class TokenAccount:
    """Balance of one asset held at an address."""

    address: str
    asset: str
    owner: str
    amount: int = 0
    delegate: str | None = None
    delegated_amount: int = 0


@dataclass(frozen=True)
class UserAuthority:
    """Transfer authority backed by a user's verified identity."""

    identity: str


@dataclass(frozen=True)
class PoolAuthority:
    """Transfer authority of the pool itself, derived from its seeds."""

    program_id: str
    bump: int

    @property
    def address(self) -> str:
        return derive_address((POOL_SEED,), self.bump, self.program_id)


Authority = UserAuthority | PoolAuthority


@dataclass(frozen=True)
class TransferReceipt:
    """Record of a completed transfer, sufficient to reverse it."""

    transfer_id: int
    asset: str
    source: str
    destination: str
    amount: int
    allowance_used: int = 0


@dataclass(frozen=True)
class PositionHealth:
    """Derived risk metrics for a position (never stored)."""

    collateral_amount: int
    borrowed_amount: int
    max_borrow: int
    min_required_collateral: int
    collateral_ratio: int | None
    liquidatable: bool
