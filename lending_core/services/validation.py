"""Account checks shared by the engines."""
from __future__ import annotations

from ..addressing import position_address
from ..errors import (
    AccountNotInitializedError,
    ConstraintViolationError,
    InvalidTreasuryError,
)
from ..interfaces.store import AccountStore
from ..interfaces.transfer_gateway import TransferGateway
from ..models import LendingPool, TokenAccount, UserPosition


def require_token_account(
    gateway: TransferGateway,
    address: str,
    *,
    asset: str,
    owner: str | None,
    label: str,
) -> TokenAccount:
    """Load ``address`` and check it holds ``asset`` and belongs to ``owner``.

    Pass ``owner=None`` to check the asset only.
    """
    account = gateway.get_account(address)
    if account.asset != asset:
        raise ConstraintViolationError(
            f"{label} {address} holds {account.asset}, expected {asset}"
        )
    if owner is not None and account.owner != owner:
        raise ConstraintViolationError(
            f"{label} {address} is owned by {account.owner}, expected {owner}"
        )
    return account


def require_treasury(pool: LendingPool, treasury: str) -> None:
    if treasury != pool.treasury:
        raise InvalidTreasuryError(f"got {treasury}, pool uses {pool.treasury}")


def load_position(store: AccountStore, owner: str, program_id: str) -> UserPosition:
    """Fetch the position derived for ``owner``; it must exist and match."""
    address = position_address(owner, program_id)
    position = store.get(address)
    if position is None:
        raise AccountNotInitializedError(f"no position for {owner}")
    if position.owner != owner:
        raise ConstraintViolationError(
            f"position at {address} belongs to {position.owner}, not {owner}"
        )
    return position
