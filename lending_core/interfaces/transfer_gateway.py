"""Transfer gateway protocol — asset movement abstraction."""
from typing import Protocol

from ..models import Authority, TokenAccount, TransferReceipt


class TransferGateway(Protocol):
    """Abstract interface for moving asset balances between accounts."""

    def get_account(self, address: str) -> TokenAccount: ...

    def transfer(
        self,
        asset: str,
        source: str,
        destination: str,
        amount: int,
        authority: Authority,
    ) -> TransferReceipt: ...

    def revert(self, receipt: TransferReceipt) -> None: ...
