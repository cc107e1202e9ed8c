"""Before-call and after-success hooks that drive one cached function."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

from .entry import CacheEntry
from .expiry import is_expired
from .key_builder import KeyBuilder

if TYPE_CHECKING:
    from .service import CacheService

logger = logging.getLogger(__name__)


@dataclass
class InvocationContext:
    """State of one intercepted call, shared by both hooks."""
    arguments: List[Any] = field(default_factory=list)
    instance: Any = None
    return_value: Any = None
    skip_body: bool = False
    tag: Optional[str] = None


def snapshot_arguments(arguments: Sequence[Any]) -> Tuple[Any, ...]:
    """Deep-copy each argument; slots that cannot be copied become None."""
    snapshot = []
    for value in arguments:
        try:
            snapshot.append(copy.deepcopy(value))
        except Exception as e:  # noqa: BLE001
            logger.debug(f"Argument of type {type(value).__qualname__} not snapshotted: {e}")
            snapshot.append(None)
    return tuple(snapshot)


def copy_value(value: Any) -> Any:
    """Deep copy of a return value; the value itself when it cannot be copied."""
    try:
        return copy.deepcopy(value)
    except Exception as e:  # noqa: BLE001
        logger.debug(f"Return value of type {type(value).__qualname__} shared, not copied: {e}")
        return value


class InterceptionCoordinator:
    def __init__(self, key_builder: KeyBuilder, service: "CacheService"):
        self.key_builder = key_builder
        self.service = service

    @property
    def function_name(self) -> str:
        return self.key_builder.config.method_name

    def on_entry(self, context: InvocationContext) -> None:
        """Short-circuit the call on a fresh hit, otherwise tag it with its key."""
        key = self.key_builder.build_key(context.instance, context.arguments)
        entry = self._lookup(key)

        if entry is not None:
            now = self.service.now()
            age = entry.age(now)
            expired = is_expired(
                entry.created_at,
                self.key_builder.config.policy,
                now,
                self.service.ttl_sec,
                ignore_ttl=self.service.ignore_ttl,
            )
            if not expired:
                reconciled = self.service.reconciler.reconcile(context.arguments, entry.arguments)
                context.return_value = copy_value(entry.return_value)
                context.skip_body = True
                logger.debug(f"Cache hit for {self.function_name} (key={key}, age={age:.1f}s)")
                self.service.record_decision(self.function_name, key, "hit", age, reconciled)
                return
            logger.debug(f"Cache entry expired for {self.function_name} (key={key}, age={age:.1f}s)")
            self.service.record_decision(self.function_name, key, "expired", age)

        context.tag = key

    def on_success(self, context: InvocationContext) -> None:
        """Store the result of a call that ran to completion."""
        key = context.tag
        if key is None:
            logger.warning(f"on_success without a tagged key for {self.function_name}; not cached")
            return

        entry = CacheEntry(
            return_value=copy_value(context.return_value),
            arguments=snapshot_arguments(context.arguments),
            created_at=self.service.now(),
        )
        try:
            self.service.store.write(key, entry)
        except Exception as e:
            logger.error(f"Cache write error for {self.function_name}: {e}")
            self.service.record_decision(self.function_name, key, "write_error", error=str(e))
            return

        self.service.record_decision(self.function_name, key, "write")

    def _lookup(self, key: str) -> Optional[CacheEntry]:
        store = self.service.store
        try:
            if not store.contains(key):
                self.service.record_decision(self.function_name, key, "miss")
                return None
            entry = store.read(key)
        except KeyError:
            self.service.record_decision(self.function_name, key, "miss")
            return None
        except Exception as e:
            logger.error(f"Cache read error for {self.function_name}: {e}")
            self.service.record_decision(self.function_name, key, "store_error", error=str(e))
            return None

        if not isinstance(entry, CacheEntry):
            logger.error(f"Corrupt cache entry for {self.function_name}: {type(entry).__qualname__}")
            self.service.record_decision(
                self.function_name, key, "store_error", error="corrupt entry"
            )
            return None
        return entry
