"""Token ledger held in process memory.

Implements the ``TransferGateway`` protocol with SPL-token-like rules:
accounts hold one asset, transfers must be signed by the owner or an
approved delegate, and pool-owned accounts only move under the pool's
derived authority.
"""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace

from ..arithmetic import checked_add, checked_sub, require_u64
from ..errors import TransferFailedError
from ..models import (
    Authority,
    PoolAuthority,
    TokenAccount,
    TransferReceipt,
    UserAuthority,
)

logger = logging.getLogger(__name__)


class InMemoryTokenLedger:
    """Balances and allowances for every token account."""

    def __init__(self) -> None:
        self._accounts: dict[str, TokenAccount] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()
        self.history: list[TransferReceipt] = []

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------

    def open_account(
        self, address: str, asset: str, owner: str, amount: int = 0
    ) -> TokenAccount:
        with self._lock:
            if address in self._accounts:
                raise ValueError(f"Token account {address} already exists")
            account = TokenAccount(
                address=address, asset=asset, owner=owner, amount=require_u64(amount)
            )
            self._accounts[address] = account
            return account

    def mint_to(self, address: str, amount: int) -> None:
        with self._lock:
            account = self.get_account(address)
            self._accounts[address] = replace(
                account, amount=checked_add(account.amount, require_u64(amount))
            )

    def approve(self, address: str, owner: str, delegate: str, amount: int) -> None:
        """Let ``delegate`` move up to ``amount`` out of ``address``."""
        with self._lock:
            account = self.get_account(address)
            if account.owner != owner:
                raise TransferFailedError(
                    f"{owner} does not own {address} and cannot approve a delegate"
                )
            self._accounts[address] = replace(
                account, delegate=delegate, delegated_amount=require_u64(amount)
            )

    def get_account(self, address: str) -> TokenAccount:
        account = self._accounts.get(address)
        if account is None:
            raise TransferFailedError(f"Unknown token account {address}")
        return account

    def balance(self, address: str) -> int:
        return self.get_account(address).amount

    def accounts(self) -> list[TokenAccount]:
        with self._lock:
            return list(self._accounts.values())

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def _debit_authorized(
        self, account: TokenAccount, amount: int, authority: Authority
    ) -> TokenAccount:
        """Return ``account`` with any consumed allowance, or raise."""
        if isinstance(authority, PoolAuthority):
            if authority.address != account.owner:
                raise TransferFailedError(
                    f"Pool authority does not own {account.address}"
                )
            return account
        if isinstance(authority, UserAuthority):
            if authority.identity == account.owner:
                return account
            if authority.identity == account.delegate:
                if amount > account.delegated_amount:
                    raise TransferFailedError(
                        f"Delegate allowance on {account.address} is "
                        f"{account.delegated_amount}, requested {amount}"
                    )
                return replace(
                    account, delegated_amount=account.delegated_amount - amount
                )
        raise TransferFailedError(
            f"{authority!r} is not authorized to move funds from {account.address}"
        )

    def transfer(
        self,
        asset: str,
        source: str,
        destination: str,
        amount: int,
        authority: Authority,
    ) -> TransferReceipt:
        with self._lock:
            require_u64(amount)
            src = self.get_account(source)
            dst = self.get_account(destination)
            if src.asset != asset or dst.asset != asset:
                raise TransferFailedError(
                    f"Asset mismatch moving {asset}: {src.asset} -> {dst.asset}"
                )
            allowance_before = src.delegated_amount
            src = self._debit_authorized(src, amount, authority)
            src = replace(
                src,
                amount=checked_sub(src.amount, amount, error=TransferFailedError),
            )
            if source == destination:
                dst = src
            credited = replace(dst, amount=checked_add(dst.amount, amount))

            self._accounts[source] = src
            self._accounts[destination] = credited

            receipt = TransferReceipt(
                transfer_id=next(self._ids),
                asset=asset,
                source=source,
                destination=destination,
                amount=amount,
                allowance_used=allowance_before - src.delegated_amount,
            )
            self.history.append(receipt)
            logger.debug(
                "Transfer #%d: %d %s %s -> %s",
                receipt.transfer_id, amount, asset, source, destination,
            )
            return receipt

    def revert(self, receipt: TransferReceipt) -> None:
        """Undo a completed transfer, restoring both balances."""
        with self._lock:
            dst = self.get_account(receipt.destination)
            self._accounts[receipt.destination] = replace(
                dst, amount=checked_sub(dst.amount, receipt.amount)
            )
            src = self.get_account(receipt.source)
            self._accounts[receipt.source] = replace(
                src,
                amount=checked_add(src.amount, receipt.amount),
                delegated_amount=src.delegated_amount + receipt.allowance_used,
            )
            self.history.remove(receipt)
            logger.debug("Reverted transfer #%d", receipt.transfer_id)
