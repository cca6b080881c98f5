"""Risk engine — borrow and repay against the pool's LTV."""
from __future__ import annotations

import logging
from dataclasses import replace

from ..addressing import position_address
from ..arithmetic import checked_add, checked_sub, require_u64
from ..errors import BorrowTooLargeError, RepayAmountTooLargeError
from ..interfaces.store import AccountStore
from ..interfaces.transfer_gateway import TransferGateway
from ..models import LendingPool, UserAuthority, UserPosition
from ..risk import max_borrow
from ..transfers import TransferBatch
from .validation import load_position, require_treasury

logger = logging.getLogger(__name__)


class RiskEngine:
    """Debt issuance and repayment."""

    def __init__(
        self, store: AccountStore, gateway: TransferGateway, program_id: str
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._program_id = program_id

    def borrow(
        self,
        pool: LendingPool,
        user: str,
        treasury: str,
        user_debt_account: str,
        amount: int,
    ) -> UserPosition:
        """Disburse ``amount`` from the treasury, signed by ``user``.

        Each call is checked on its own against ``floor(collateral * ltv / 100)``;
        debt already outstanding does not count toward the limit.
        """
        require_u64(amount)
        position = load_position(self._store, user, self._program_id)

        limit = max_borrow(position.collateral_amount, pool.ltv_ratio)
        if amount > limit:
            raise BorrowTooLargeError(f"requested {amount}, limit {limit}")
        require_treasury(pool, treasury)

        updated = replace(
            position,
            borrowed_amount=checked_add(position.borrowed_amount, amount),
        )
        with TransferBatch(self._gateway) as batch:
            batch.transfer(
                pool.debt_asset, treasury, user_debt_account, amount, UserAuthority(user)
            )
            self._store.put(position_address(user, self._program_id), updated)
        logger.debug("Borrowed %d of %d allowed for %s", amount, limit, user)
        return updated

    def repay(
        self,
        pool: LendingPool,
        user: str,
        treasury: str,
        user_debt_account: str,
        amount: int,
    ) -> UserPosition:
        """Return ``amount`` of debt to the treasury."""
        require_u64(amount)
        position = load_position(self._store, user, self._program_id)

        if amount > position.borrowed_amount:
            raise RepayAmountTooLargeError(
                f"repaying {amount}, owed {position.borrowed_amount}"
            )
        require_treasury(pool, treasury)

        updated = replace(
            position,
            borrowed_amount=checked_sub(position.borrowed_amount, amount),
        )
        with TransferBatch(self._gateway) as batch:
            batch.transfer(
                pool.debt_asset, user_debt_account, treasury, amount, UserAuthority(user)
            )
            self._store.put(position_address(user, self._program_id), updated)
        logger.debug("Debt of %s now %d", user, updated.borrowed_amount)
        return updated
