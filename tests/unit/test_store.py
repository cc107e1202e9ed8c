#!/usr/bin/env python3
"""
Unit tests for the in-memory cache store
"""

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from cacheable.entry import CacheEntry
from cacheable.store import CacheStore, InMemoryCacheStore


@pytest.fixture
def store():
    return InMemoryCacheStore()


def test_satisfies_store_contract(store):
    assert isinstance(store, CacheStore)


def test_write_and_read(store):
    entry = CacheEntry(return_value=5, arguments=(2, 3), created_at=0.0)

    store.write("Add|2|3", entry)

    assert store.contains("Add|2|3")
    assert store.read("Add|2|3") is entry
    assert len(store) == 1


def test_missing_key(store):
    assert not store.contains("nope")
    with pytest.raises(KeyError):
        store.read("nope")


def test_write_overwrites(store):
    store.write("k", CacheEntry(1, (), 0.0))
    store.write("k", CacheEntry(2, (), 10.0))

    assert len(store) == 1
    assert store.read("k").return_value == 2
    assert store.read("k").created_at == 10.0


def test_clear(store):
    store.write("a", CacheEntry(1, (), 0.0))
    store.write("b", CacheEntry(2, (), 0.0))

    assert store.clear() == 2
    assert len(store) == 0


def test_entry_is_immutable():
    entry = CacheEntry(1, (), 0.0)
    with pytest.raises(AttributeError):
        entry.return_value = 2


def test_concurrent_writes_last_write_wins(store):
    def writer(n):
        for i in range(200):
            store.write("shared", CacheEntry(n, (n,), float(i)))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    entry = store.read("shared")
    assert len(store) == 1
    assert entry.arguments == (entry.return_value,)
