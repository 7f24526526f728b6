"""
In-process keyed locks.

Serializes check-then-act sequences (service generation per template,
form lookup-then-write per lookup key) within one process. Multi-process
deployments still rely on the UNIQUE constraint on services.date.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class InProcessLocks:
    """A lock per key, created on first use and dropped when idle."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._holders[key] = self._holders.get(key, 0) + 1

        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._holders[key] -= 1
                if self._holders[key] == 0:
                    del self._holders[key]
                    del self._locks[key]

    def active_keys(self) -> list[str]:
        """Keys currently held or waited on."""
        with self._guard:
            return sorted(self._locks)
