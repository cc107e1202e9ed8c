"""Configuration loader for the cache service."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from .key_builder import DEFAULT_MAX_KEY_LENGTH

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CacheConfig:
    ttl_sec: float = 60.0
    ignore_ttl: bool = False
    max_key_length: int = DEFAULT_MAX_KEY_LENGTH
    log_decisions: bool = False

    def __post_init__(self) -> None:
        if self.ttl_sec < 0:
            raise ValueError(f"ttl_sec must be >= 0, got {self.ttl_sec}")
        if self.max_key_length <= 0:
            raise ValueError(f"max_key_length must be > 0, got {self.max_key_length}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheConfig":
        return cls(
            ttl_sec=float(data.get("ttl_sec", 60)),
            ignore_ttl=_as_bool(data.get("ignore_ttl", False)),
            max_key_length=int(data.get("max_key_length", DEFAULT_MAX_KEY_LENGTH)),
            log_decisions=_as_bool(data.get("log_decisions", False)),
        )


ENV_MAP = {
    "ttl_sec": "CACHE_TTL_SEC",
    "ignore_ttl": "CACHE_IGNORE_TTL",
    "max_key_length": "CACHE_MAX_KEY_LENGTH",
    "log_decisions": "CACHE_LOG_DECISIONS",
}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE
    return bool(value)


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def merge_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
    merged = json.loads(json.dumps(config_data))  # deep copy via json

    for key, env_name in ENV_MAP.items():
        if env_name not in os.environ:
            continue
        value: Any = os.environ[env_name]
        if key == "ttl_sec":
            value = float(value)
        elif key == "max_key_length":
            value = int(value)
        else:
            value = _as_bool(value)
        merged[key] = value

    return merged


def load_config(config_path: str | Path = "config/cacheable.defaults.yml") -> CacheConfig:
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = load_yaml(path)
    data = merge_env_overrides(data)
    return CacheConfig.from_dict(data)
