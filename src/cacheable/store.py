"""Cache store contract and the in-process implementation."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Protocol, runtime_checkable

from .entry import CacheEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheStore(Protocol):
    """Minimal store consumed by the coordinator. Keys are plain strings."""

    def contains(self, key: str) -> bool:
        ...

    def read(self, key: str) -> CacheEntry:
        ...

    def write(self, key: str, entry: CacheEntry) -> None:
        ...


class InMemoryCacheStore:
    """
    Dict-backed store shared by every function bound to one service.

    Each operation holds the lock for its own duration only, so reads never
    observe a half-written entry and a write replaces the previous entry
    for its key in one step.
    """

    def __init__(self) -> None:
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    def read(self, key: str) -> CacheEntry:
        with self._lock:
            return self._store[key]

    def write(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._store[key] = entry

    def clear(self) -> int:
        with self._lock:
            cleared = len(self._store)
            self._store.clear()
        if cleared > 0:
            logger.info(f"Cleared {cleared} cache entries")
        return cleared

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
