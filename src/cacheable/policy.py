"""Key and expiry policies for cached functions."""

from __future__ import annotations

from enum import Enum


class KeyPolicy(str, Enum):
    USE_ALL_PARAMETERS = "use_all_parameters"
    USE_PROPERTIES = "use_properties"
    # Keys like USE_ALL_PARAMETERS; entries never expire.
    IGNORE_TTL = "ignore_ttl"
