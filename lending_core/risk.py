"""Pure risk math for the single market — no I/O.

Collateral and debt are valued 1:1, so every ratio is a plain percentage of
raw token amounts.
"""
from __future__ import annotations

from .arithmetic import U8_BITS, mul_div
from .models import (
    LIQUIDATION_BONUS_PERCENT,
    LendingPool,
    PositionHealth,
    UserPosition,
)

PERCENT = 100


def max_borrow(collateral_amount: int, ltv_ratio: int) -> int:
    """``floor(collateral * ltv / 100)``."""
    return mul_div(collateral_amount, ltv_ratio, PERCENT)


def min_required_collateral(borrowed_amount: int, ltv_ratio: int) -> int:
    """``floor(borrowed * 100 / ltv)``, the collateral a debt must keep locked."""
    return mul_div(borrowed_amount, PERCENT, ltv_ratio)


def collateral_ratio(collateral_amount: int, borrowed_amount: int) -> int:
    """Collateral as a percentage of debt, narrowed to eight bits.

    The narrowing wraps: a position holding 3x its debt reports
    ``300 & 0xFF == 44``. A zero debt raises ``NumericalOverflowError``.
    """
    return mul_div(collateral_amount, PERCENT, borrowed_amount, out_bits=U8_BITS)


def is_liquidatable(
    collateral_amount: int, borrowed_amount: int, liquidation_threshold: int
) -> bool:
    return (
        collateral_ratio(collateral_amount, borrowed_amount) <= liquidation_threshold
    )


def seize_amount(
    liquidation_amount: int, bonus_percent: int = LIQUIDATION_BONUS_PERCENT
) -> int:
    """Collateral paid out for ``liquidation_amount`` of repaid debt."""
    return mul_div(liquidation_amount, PERCENT + bonus_percent, PERCENT)


def assess(position: UserPosition, pool: LendingPool) -> PositionHealth:
    """Snapshot of the derived risk metrics for ``position``.

    A debt-free position has no ratio and is never liquidatable.
    """
    collateral = position.collateral_amount
    borrowed = position.borrowed_amount
    ratio = collateral_ratio(collateral, borrowed) if borrowed else None
    return PositionHealth(
        collateral_amount=collateral,
        borrowed_amount=borrowed,
        max_borrow=max_borrow(collateral, pool.ltv_ratio),
        min_required_collateral=min_required_collateral(borrowed, pool.ltv_ratio),
        collateral_ratio=ratio,
        liquidatable=ratio is not None and ratio <= pool.liquidation_threshold,
    )
