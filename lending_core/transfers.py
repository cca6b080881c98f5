"""Unit of work for transfer requests.

Engines request transfers and write records inside a ``TransferBatch``.
If anything in the block raises, completed transfers are reverted newest
first and the original error propagates unchanged, even when a revert
itself fails.
"""
from __future__ import annotations

import logging
from types import TracebackType

from .errors import LendingError
from .interfaces.transfer_gateway import TransferGateway
from .models import Authority, TransferReceipt

logger = logging.getLogger(__name__)


class TransferBatch:
    """Collects transfer receipts and undoes them on failure."""

    def __init__(self, gateway: TransferGateway) -> None:
        self._gateway = gateway
        self._receipts: list[TransferReceipt] = []

    @property
    def receipts(self) -> tuple[TransferReceipt, ...]:
        return tuple(self._receipts)

    def transfer(
        self,
        asset: str,
        source: str,
        destination: str,
        amount: int,
        authority: Authority,
    ) -> TransferReceipt:
        receipt = self._gateway.transfer(asset, source, destination, amount, authority)
        self._receipts.append(receipt)
        return receipt

    def __enter__(self) -> TransferBatch:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            return
        while self._receipts:
            receipt = self._receipts.pop()
            logger.warning(
                "Reverting transfer #%d after failure: %s", receipt.transfer_id, exc
            )
            try:
                self._gateway.revert(receipt)
            except LendingError:
                # Keep unwinding; the original error is the one that propagates.
                logger.exception("Could not revert transfer #%d", receipt.transfer_id)
