"""Position manager — collateral deposits and withdrawals."""
from __future__ import annotations

import logging
from dataclasses import replace

from ..addressing import position_address
from ..arithmetic import checked_add, checked_sub, require_u64
from ..errors import InsufficientCollateralError
from ..interfaces.store import AccountStore
from ..interfaces.transfer_gateway import TransferGateway
from ..models import LendingPool, PoolAuthority, UserAuthority, UserPosition
from ..risk import min_required_collateral
from ..transfers import TransferBatch
from .validation import load_position, require_token_account

logger = logging.getLogger(__name__)


class PositionManager:
    """Per-user collateral bookkeeping."""

    def __init__(
        self, store: AccountStore, gateway: TransferGateway, program_id: str
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._program_id = program_id

    def get(self, owner: str) -> UserPosition | None:
        return self._store.get(position_address(owner, self._program_id))

    def load(self, owner: str) -> UserPosition:
        return load_position(self._store, owner, self._program_id)

    def _require_vault(
        self, pool: LendingPool, vault: str, authority: PoolAuthority
    ) -> None:
        require_token_account(
            self._gateway,
            vault,
            asset=pool.collateral_asset,
            owner=authority.address,
            label="collateral vault",
        )

    def deposit(
        self,
        pool: LendingPool,
        authority: PoolAuthority,
        user: str,
        user_collateral_account: str,
        vault: str,
        amount: int,
    ) -> UserPosition:
        """Move ``amount`` collateral into the vault and credit the position.

        The position is created on first deposit. A zero deposit succeeds
        and changes nothing but the position's existence.
        """
        require_u64(amount)
        self._require_vault(pool, vault, authority)

        address = position_address(user, self._program_id)
        current = self._store.get(address)
        if current is None:
            current = UserPosition(owner=user)
        updated = replace(
            current,
            owner=user,
            collateral_amount=checked_add(current.collateral_amount, amount),
        )

        with TransferBatch(self._gateway) as batch:
            batch.transfer(
                pool.collateral_asset,
                user_collateral_account,
                vault,
                amount,
                UserAuthority(user),
            )
            self._store.put(address, updated)
        logger.debug("Collateral of %s now %d", user, updated.collateral_amount)
        return updated

    def withdraw(
        self,
        pool: LendingPool,
        authority: PoolAuthority,
        user: str,
        user_collateral_account: str,
        vault: str,
        amount: int,
    ) -> UserPosition:
        """Release ``amount`` collateral if the remainder still covers the debt."""
        require_u64(amount)
        position = self.load(user)

        remaining = checked_sub(
            position.collateral_amount, amount, error=InsufficientCollateralError
        )
        required = min_required_collateral(position.borrowed_amount, pool.ltv_ratio)
        if remaining < required:
            raise InsufficientCollateralError(
                f"{remaining} would remain, {required} required"
            )
        self._require_vault(pool, vault, authority)

        updated = replace(position, collateral_amount=remaining)
        with TransferBatch(self._gateway) as batch:
            batch.transfer(
                pool.collateral_asset,
                vault,
                user_collateral_account,
                amount,
                authority,
            )
            self._store.put(position_address(user, self._program_id), updated)
        logger.debug(
            "Withdrew %d for %s; %d remains against %d required",
            amount, user, remaining, required,
        )
        return updated
