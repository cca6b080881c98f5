"""In-memory implementations of the storage and transfer seams."""
from .account_store import InMemoryAccountStore
from .token_ledger import InMemoryTokenLedger

__all__ = ["InMemoryAccountStore", "InMemoryTokenLedger"]
