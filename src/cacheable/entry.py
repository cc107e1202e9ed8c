"""Cache entry stored per key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class CacheEntry:
    return_value: Any
    arguments: Tuple[Any, ...]
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at
