"""Pool manager — owns the single market configuration."""
from __future__ import annotations

import logging
from dataclasses import replace

from ..addressing import CANONICAL_BUMP, pool_address
from ..errors import (
    AccountNotInitializedError,
    ConstraintViolationError,
    InvalidTreasuryError,
)
from ..interfaces.store import AccountStore
from ..interfaces.transfer_gateway import TransferGateway
from ..models import LendingPool, PoolAuthority

logger = logging.getLogger(__name__)


class PoolManager:
    """Create, load and re-point the singleton ``LendingPool``."""

    def __init__(
        self, store: AccountStore, gateway: TransferGateway, program_id: str
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._program_id = program_id
        self.address = pool_address(program_id)

    def initialize(
        self,
        collateral_asset: str,
        debt_asset: str,
        treasury: str,
        bump: int = CANONICAL_BUMP,
    ) -> LendingPool:
        """Persist the pool with the fixed 75% LTV and 80% liquidation line.

        The store rejects a second pool at the same derived address.
        """
        pool = LendingPool(
            collateral_asset=collateral_asset,
            debt_asset=debt_asset,
            treasury=treasury,
            bump=bump,
        )
        self._store.create(self.address, pool)
        logger.debug("Pool created at %s", self.address)
        return pool

    def load(self) -> LendingPool:
        pool = self._store.get(self.address)
        if pool is None:
            raise AccountNotInitializedError("lending pool")
        return pool

    def authority(self, pool: LendingPool) -> PoolAuthority:
        """Signing authority of the pool, built from its stored bump."""
        return PoolAuthority(program_id=self._program_id, bump=pool.bump)

    def update_treasury(
        self, pool: LendingPool, caller: str, new_treasury: str
    ) -> LendingPool:
        """Point the pool at ``new_treasury``.

        Any caller owning a debt-asset account may do this; there is no
        administrator key on the pool.
        """
        account = self._gateway.get_account(new_treasury)
        if account.asset != pool.debt_asset:
            raise InvalidTreasuryError(
                f"{new_treasury} holds {account.asset}, pool lends {pool.debt_asset}"
            )
        if account.owner != caller:
            raise ConstraintViolationError(
                f"treasury {new_treasury} is owned by {account.owner}, not {caller}"
            )
        updated = replace(pool, treasury=new_treasury)
        self._store.put(self.address, updated)
        return updated
