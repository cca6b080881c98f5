"""Account store protocol — keyed record storage abstraction."""
from contextlib import AbstractContextManager
from typing import Any, Protocol


class AccountStore(Protocol):
    """Abstract interface for durable record storage keyed by derived address."""

    def create(self, address: str, record: Any) -> None: ...

    def get(self, address: str) -> Any | None: ...

    def put(self, address: str, record: Any) -> None: ...

    def lock(self, address: str) -> AbstractContextManager[None]: ...
