#!/usr/bin/env python3
"""
Cache Service — the explicit owner of cache state

Holds the store, the service-wide TTL settings, the argument reconciler and
the hit/miss counters. Every cached function is bound to one service at
decoration time; there is no global lookup.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, Optional

from .config import CacheConfig
from .key_builder import DEFAULT_MAX_KEY_LENGTH
from .observability import CacheDecisionRecord
from .reconciler import ArgumentReconciler
from .store import CacheStore, InMemoryCacheStore

logger = logging.getLogger(__name__)

DecisionSink = Callable[[CacheDecisionRecord], None]


class CacheService:
    """
    Process-local cache service.

    Design principles:
    - Explicitly constructed and passed to ``cacheable``
    - Graceful degradation: a failing store means a miss, never an error
    - Metrics: every decision counted, optionally recorded
    """

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        ttl_sec: float = 60.0,
        ignore_ttl: bool = False,
        max_key_length: int = DEFAULT_MAX_KEY_LENGTH,
        reconciler: Optional[ArgumentReconciler] = None,
        clock: Optional[Callable[[], float]] = None,
        decision_sink: Optional[DecisionSink] = None,
        log_decisions: bool = False,
    ):
        if ttl_sec < 0:
            raise ValueError(f"ttl_sec must be >= 0, got {ttl_sec}")

        self.store = store if store is not None else InMemoryCacheStore()
        self.ttl_sec = ttl_sec
        self.ignore_ttl = ignore_ttl
        self.max_key_length = max_key_length
        self.reconciler = reconciler or ArgumentReconciler()
        self.decision_sink = decision_sink
        self.log_decisions = log_decisions
        self._clock = clock
        self._lock = threading.Lock()

        self.stats = {
            "hits": 0,
            "misses": 0,
            "expired": 0,
            "writes": 0,
            "store_errors": 0,
            "reconciled_members": 0,
            "start_time": time.time(),
        }

        logger.info(f"CacheService initialized (ttl={ttl_sec}s, ignore_ttl={ignore_ttl})")

    @classmethod
    def from_config(cls, config: CacheConfig, **kwargs: Any) -> "CacheService":
        return cls(
            ttl_sec=config.ttl_sec,
            ignore_ttl=config.ignore_ttl,
            max_key_length=config.max_key_length,
            log_decisions=config.log_decisions,
            **kwargs,
        )

    def now(self) -> float:
        if self._clock is not None:
            return self._clock()
        return time.time()

    def register(self, cls: type, members: Optional[Iterable[str]] = None) -> None:
        """Declare ``cls`` eligible for argument reconciliation on cache hits."""
        self.reconciler.register(cls, members)

    def record_decision(
        self,
        function: str,
        key: str,
        outcome: str,
        age_seconds: Optional[float] = None,
        reconciled_members: int = 0,
        error: Optional[str] = None,
    ) -> None:
        with self._lock:
            if outcome == "hit":
                self.stats["hits"] += 1
                self.stats["reconciled_members"] += reconciled_members
            elif outcome == "miss":
                self.stats["misses"] += 1
            elif outcome == "expired":
                self.stats["misses"] += 1
                self.stats["expired"] += 1
            elif outcome == "store_error":
                self.stats["misses"] += 1
                self.stats["store_errors"] += 1
            elif outcome == "write":
                self.stats["writes"] += 1
            elif outcome == "write_error":
                self.stats["store_errors"] += 1

        if self.decision_sink is None and not self.log_decisions:
            return

        record = CacheDecisionRecord(
            function=function,
            key=key,
            outcome=outcome,
            age_seconds=max(age_seconds, 0.0) if age_seconds is not None else None,
            reconciled_members=reconciled_members,
            error=error,
        )
        if self.log_decisions:
            logger.debug(f"Cache decision: {record.to_dict()}")
        if self.decision_sink is not None:
            try:
                self.decision_sink(record)
            except Exception as e:
                logger.warning(f"Decision sink error: {e}")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            stats = dict(self.stats)

        total_requests = stats["hits"] + stats["misses"]
        hit_rate = (stats["hits"] / total_requests * 100) if total_requests > 0 else 0

        try:
            cache_entries = len(self.store)  # type: ignore[arg-type]
        except TypeError:
            cache_entries = None

        return {
            "hits": stats["hits"],
            "misses": stats["misses"],
            "expired": stats["expired"],
            "hit_rate_percent": round(hit_rate, 1),
            "total_requests": total_requests,
            "writes": stats["writes"],
            "store_errors": stats["store_errors"],
            "reconciled_members": stats["reconciled_members"],
            "cache_entries": cache_entries,
            "uptime_seconds": int(time.time() - stats["start_time"]),
        }

    def print_report(self):
        """Print cache statistics report."""
        stats = self.get_stats()

        print("\n" + "=" * 60)
        print("CACHE SERVICE REPORT")
        print("=" * 60)
        print(f"Hit Rate: {stats['hit_rate_percent']}% ({stats['hits']}/{stats['total_requests']})")
        print(f"Expired: {stats['expired']} | Store errors: {stats['store_errors']}")
        print(f"Cache Size: {stats['cache_entries']} entries")
        print(f"Writes: {stats['writes']} | Reconciled members: {stats['reconciled_members']}")
        print(f"Uptime: {stats['uptime_seconds']}s")
        print("=" * 60 + "\n")
