"""Liquidation engine — seizes collateral from under-collateralized positions."""
from __future__ import annotations

import logging
from dataclasses import replace

from ..addressing import position_address
from ..arithmetic import checked_sub, require_u64
from ..errors import (
    InsufficientCollateralError,
    LiquidationAmountTooLargeError,
    PositionNotLiquidatableError,
)
from ..interfaces.store import AccountStore
from ..interfaces.transfer_gateway import TransferGateway
from ..models import LendingPool, PoolAuthority, UserAuthority, UserPosition
from ..risk import collateral_ratio, seize_amount
from ..transfers import TransferBatch
from .validation import load_position, require_token_account, require_treasury

logger = logging.getLogger(__name__)


class LiquidationEngine:
    """Repays part of a position's debt in exchange for bonus collateral."""

    def __init__(
        self, store: AccountStore, gateway: TransferGateway, program_id: str
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._program_id = program_id

    def liquidate(
        self,
        pool: LendingPool,
        authority: PoolAuthority,
        liquidator: str,
        position_owner: str,
        treasury: str,
        vault: str,
        liquidator_debt_account: str,
        liquidator_collateral_account: str,
        amount: int,
    ) -> UserPosition:
        """Repay ``amount`` of ``position_owner``'s debt and seize collateral.

        The liquidator pays ``amount`` debt units into the treasury and
        receives ``floor(amount * 105 / 100)`` collateral units from the
        vault. The position must sit at or below the liquidation threshold.
        """
        require_u64(amount)
        position = load_position(self._store, position_owner, self._program_id)
        require_treasury(pool, treasury)
        require_token_account(
            self._gateway, vault,
            asset=pool.collateral_asset, owner=authority.address,
            label="collateral vault",
        )
        require_token_account(
            self._gateway, treasury,
            asset=pool.debt_asset, owner=None,
            label="treasury",
        )
        require_token_account(
            self._gateway, liquidator_debt_account,
            asset=pool.debt_asset, owner=liquidator,
            label="liquidator debt account",
        )
        require_token_account(
            self._gateway, liquidator_collateral_account,
            asset=pool.collateral_asset, owner=liquidator,
            label="liquidator collateral account",
        )

        ratio = collateral_ratio(position.collateral_amount, position.borrowed_amount)
        if ratio > pool.liquidation_threshold:
            raise PositionNotLiquidatableError(
                f"collateral ratio {ratio}% above {pool.liquidation_threshold}%"
            )
        if amount > position.borrowed_amount:
            raise LiquidationAmountTooLargeError(
                f"liquidating {amount}, owed {position.borrowed_amount}"
            )
        seized = seize_amount(amount)
        if seized > position.collateral_amount:
            raise InsufficientCollateralError(
                f"seizing {seized}, position holds {position.collateral_amount}"
            )

        updated = replace(
            position,
            borrowed_amount=checked_sub(position.borrowed_amount, amount),
            collateral_amount=checked_sub(position.collateral_amount, seized),
        )
        with TransferBatch(self._gateway) as batch:
            batch.transfer(
                pool.debt_asset,
                liquidator_debt_account,
                treasury,
                amount,
                UserAuthority(liquidator),
            )
            batch.transfer(
                pool.collateral_asset,
                vault,
                liquidator_collateral_account,
                seized,
                authority,
            )
            self._store.put(
                position_address(position_owner, self._program_id), updated
            )
        logger.debug(
            "Liquidation of %s at ratio %d%%: repaid %d, seized %d",
            position_owner, ratio, amount, seized,
        )
        return updated
