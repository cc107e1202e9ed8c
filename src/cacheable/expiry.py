"""Expiry rules for cache entries."""

from __future__ import annotations

from .policy import KeyPolicy


def is_expired(
    created_at: float,
    policy: KeyPolicy,
    now: float,
    ttl: float,
    ignore_ttl: bool = False,
) -> bool:
    """Return True when an entry written at ``created_at`` is stale at ``now``.

    An entry exactly ``ttl`` seconds old is still fresh.
    """
    if ignore_ttl or policy == KeyPolicy.IGNORE_TTL:
        return False
    return now - created_at > ttl
