"""Keyed record store held in process memory."""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ..errors import AccountAlreadyInitializedError

logger = logging.getLogger(__name__)


class InMemoryAccountStore:
    """Dict-backed store with one lock per record address."""

    def __init__(self) -> None:
        self._records: dict[str, Any] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def create(self, address: str, record: Any) -> None:
        with self._guard:
            if address in self._records:
                raise AccountAlreadyInitializedError(address)
            self._records[address] = record
        logger.debug("Created record at %s", address)

    def get(self, address: str) -> Any | None:
        return self._records.get(address)

    def put(self, address: str, record: Any) -> None:
        self._records[address] = record

    def items(self) -> list[tuple[str, Any]]:
        with self._guard:
            return list(self._records.items())

    @contextmanager
    def lock(self, address: str) -> Iterator[None]:
        """Hold the writer lock for ``address`` for the duration of the block."""
        with self._guard:
            record_lock = self._locks.setdefault(address, threading.Lock())
        with record_lock:
            yield
