"""Public operations of the lending market — wires the engines together."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

from ..addressing import CANONICAL_BUMP, position_address
from ..errors import LendingError
from ..interfaces.store import AccountStore
from ..interfaces.transfer_gateway import TransferGateway
from ..models import LendingPool, PoolAuthority, PositionHealth, UserPosition
from ..risk import assess
from .liquidation_engine import LiquidationEngine
from .pool_manager import PoolManager
from .position_manager import PositionManager
from .risk_engine import RiskEngine

logger = logging.getLogger(__name__)


class LendingProtocol:
    """Runs each public operation as one indivisible unit.

    Every operation takes the writer lock of the records it touches, reads
    a snapshot of the pool, validates, requests transfers and only then
    writes. A rejection leaves the pool and every position untouched.
    """

    def __init__(
        self, store: AccountStore, gateway: TransferGateway, program_id: str
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._program_id = program_id
        self.pools = PoolManager(store, gateway, program_id)
        self.positions = PositionManager(store, gateway, program_id)
        self.risk = RiskEngine(store, gateway, program_id)
        self.liquidations = LiquidationEngine(store, gateway, program_id)

    @property
    def program_id(self) -> str:
        return self._program_id

    @property
    def pool_address(self) -> str:
        return self.pools.address

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str, *record_addresses: str) -> Iterator[None]:
        """Serialize on ``record_addresses`` and log rejections."""
        with ExitStack() as stack:
            for address in sorted(set(record_addresses)):
                stack.enter_context(self._store.lock(address))
            try:
                yield
            except LendingError as e:
                logger.warning("%s rejected [%d %s]: %s", name, e.code, e.name, e)
                raise

    def _position_key(self, owner: str) -> str:
        return position_address(owner, self._program_id)

    def pool_authority(self) -> PoolAuthority:
        return self.pools.authority(self.pools.load())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_pool(self) -> LendingPool:
        return self.pools.load()

    def get_position(self, owner: str) -> UserPosition | None:
        return self.positions.get(owner)

    def position_health(self, owner: str) -> PositionHealth:
        return assess(self.positions.load(owner), self.pools.load())

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def initialize(
        self,
        collateral_asset: str,
        debt_asset: str,
        treasury: str,
        bump: int = CANONICAL_BUMP,
    ) -> LendingPool:
        with self._operation("initialize", self.pool_address):
            pool = self.pools.initialize(collateral_asset, debt_asset, treasury, bump)
        logger.info(
            "Lending pool initialized: collateral=%s debt=%s treasury=%s "
            "ltv=%d%% liquidation=%d%%",
            pool.collateral_asset, pool.debt_asset, pool.treasury,
            pool.ltv_ratio, pool.liquidation_threshold,
        )
        return pool

    def update_treasury(self, caller: str, new_treasury: str) -> LendingPool:
        with self._operation("update_treasury", self.pool_address):
            pool = self.pools.update_treasury(self.pools.load(), caller, new_treasury)
        logger.info("Treasury re-pointed to %s by %s", new_treasury, caller)
        return pool

    def deposit_collateral(
        self, user: str, user_collateral_account: str, vault: str, amount: int
    ) -> UserPosition:
        with self._operation("deposit_collateral", self._position_key(user)):
            pool = self.pools.load()
            position = self.positions.deposit(
                pool, self.pools.authority(pool),
                user, user_collateral_account, vault, amount,
            )
        logger.info(
            "Deposit — %s · %d collateral · total %d",
            user, amount, position.collateral_amount,
        )
        return position

    def borrow(
        self, user: str, treasury: str, user_debt_account: str, amount: int
    ) -> UserPosition:
        with self._operation("borrow", self._position_key(user)):
            pool = self.pools.load()
            position = self.risk.borrow(pool, user, treasury, user_debt_account, amount)
        logger.info(
            "Borrow — %s · %d debt · total %d", user, amount, position.borrowed_amount
        )
        return position

    def repay(
        self, user: str, treasury: str, user_debt_account: str, amount: int
    ) -> UserPosition:
        with self._operation("repay", self._position_key(user)):
            pool = self.pools.load()
            position = self.risk.repay(pool, user, treasury, user_debt_account, amount)
        logger.info(
            "Repay — %s · %d debt · remaining %d",
            user, amount, position.borrowed_amount,
        )
        return position

    def withdraw_collateral(
        self, user: str, user_collateral_account: str, vault: str, amount: int
    ) -> UserPosition:
        with self._operation("withdraw_collateral", self._position_key(user)):
            pool = self.pools.load()
            position = self.positions.withdraw(
                pool, self.pools.authority(pool),
                user, user_collateral_account, vault, amount,
            )
        logger.info(
            "Withdraw — %s · %d collateral · remaining %d",
            user, amount, position.collateral_amount,
        )
        return position

    def liquidate_position(
        self,
        liquidator: str,
        position_owner: str,
        treasury: str,
        vault: str,
        liquidator_debt_account: str,
        liquidator_collateral_account: str,
        amount: int,
    ) -> UserPosition:
        with self._operation(
            "liquidate_position", self._position_key(position_owner)
        ):
            pool = self.pools.load()
            position = self.liquidations.liquidate(
                pool,
                self.pools.authority(pool),
                liquidator,
                position_owner,
                treasury,
                vault,
                liquidator_debt_account,
                liquidator_collateral_account,
                amount,
            )
        logger.info(
            "Liquidation — %s by %s · repaid %d · collateral %d debt %d",
            position_owner, liquidator, amount,
            position.collateral_amount, position.borrowed_amount,
        )
        return position
