"""Replay cached argument side effects onto live arguments after a hit."""

from __future__ import annotations

import copy
import dataclasses
import logging
import threading
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

_MISSING = object()


class ArgumentReconciler:
    """
    Copies registered members from a cached argument snapshot onto the
    caller's argument objects.

    Only types registered with ``register`` take part. Slots whose cached
    value is None, whose live value is None, or whose runtime types differ
    are left alone. Members are copied one level deep, by value.
    """

    def __init__(self) -> None:
        self._members: Dict[type, Tuple[str, ...]] = {}
        self._lock = threading.Lock()

    def register(self, cls: type, members: Optional[Iterable[str]] = None) -> None:
        if members is None:
            if not dataclasses.is_dataclass(cls):
                raise ValueError(
                    f"{cls.__qualname__} is not a dataclass; name the members to reconcile"
                )
            names = tuple(f.name for f in dataclasses.fields(cls))
        else:
            names = (members,) if isinstance(members, str) else tuple(members)
        if not names:
            raise ValueError(f"No members to reconcile for {cls.__qualname__}")

        with self._lock:
            self._members[cls] = names
        logger.debug(f"Registered {cls.__qualname__} for reconciliation: {names}")

    def is_registered(self, cls: type) -> bool:
        return cls in self._members

    def members_for(self, cls: type) -> Tuple[str, ...]:
        return self._members.get(cls, ())

    def reconcile(self, live_arguments: Sequence[Any], cached_arguments: Sequence[Any]) -> int:
        """Copy cached member values onto live arguments; returns members copied."""
        copied = 0
        for live, cached in zip(live_arguments, cached_arguments):
            if cached is None or live is None:
                continue
            if type(live) is not type(cached):
                continue
            members = self.members_for(type(live))
            if not members:
                continue
            copied += self._copy_members(live, cached, members)
        return copied

    def _copy_members(self, live: Any, cached: Any, members: Tuple[str, ...]) -> int:
        copied = 0
        for name in members:
            try:
                cached_value = getattr(cached, name, _MISSING)
                live_value = getattr(live, name, _MISSING)
                if cached_value is _MISSING or live_value is _MISSING:
                    continue
                if live_value == cached_value:
                    continue
                setattr(live, name, copy.deepcopy(cached_value))
                copied += 1
            except Exception as exc:  # noqa: BLE001 - read-only or frozen members are skipped
                logger.debug(f"Skipped {type(live).__qualname__}.{name}: {exc}")
        return copied
