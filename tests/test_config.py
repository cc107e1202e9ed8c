from pathlib import Path

import pytest

from cacheable.config import CacheConfig, load_config
from cacheable.service import CacheService


def test_load_config_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("ttl_sec: 30", encoding="utf-8")

    cfg = load_config(path)

    assert isinstance(cfg, CacheConfig)
    assert cfg.ttl_sec == 30.0
    assert cfg.ignore_ttl is False
    assert cfg.max_key_length == 250


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")

    cfg = load_config(path)

    assert cfg == CacheConfig()


def test_env_overrides(monkeypatch, tmp_path):
    source = tmp_path / "config.yml"
    source.write_text("ttl_sec: 60\nignore_ttl: false", encoding="utf-8")

    monkeypatch.setenv("CACHE_TTL_SEC", "5.5")
    monkeypatch.setenv("CACHE_IGNORE_TTL", "true")
    monkeypatch.setenv("CACHE_MAX_KEY_LENGTH", "120")

    cfg = load_config(source)

    assert cfg.ttl_sec == 5.5
    assert cfg.ignore_ttl is True
    assert cfg.max_key_length == 120


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yml")


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        CacheConfig.from_dict({"ttl_sec": -1})
    with pytest.raises(ValueError):
        CacheConfig.from_dict({"max_key_length": 0})


def test_shipped_defaults_build_a_service(monkeypatch):
    for name in ("CACHE_TTL_SEC", "CACHE_IGNORE_TTL", "CACHE_MAX_KEY_LENGTH", "CACHE_LOG_DECISIONS"):
        monkeypatch.delenv(name, raising=False)
    path = Path(__file__).parent.parent / "config" / "cacheable.defaults.yml"

    service = CacheService.from_config(load_config(path))

    assert service.ttl_sec == 60.0
    assert service.ignore_ttl is False
    assert service.max_key_length == 250
