#!/usr/bin/env python3
"""
Unit tests for argument reconciliation on cache hits
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from cacheable.reconciler import ArgumentReconciler


@dataclass
class Order:
    id: int
    status: str = "Pending"
    tags: List[str] = field(default_factory=list)
    note: str = ""


@dataclass
class RushOrder(Order):
    pass


@dataclass(frozen=True)
class Point:
    x: int
    y: int


class Account:
    def __init__(self, number, balance):
        self._number = number
        self.balance = balance

    @property
    def label(self):
        return f"acct-{self._number}"


@pytest.fixture
def reconciler():
    rec = ArgumentReconciler()
    rec.register(Order)
    return rec


class TestRegistration:

    def test_dataclass_members_default_to_fields(self, reconciler):
        assert reconciler.members_for(Order) == ("id", "status", "tags", "note")

    def test_plain_class_requires_members(self):
        rec = ArgumentReconciler()
        with pytest.raises(ValueError):
            rec.register(Account)

    def test_single_member_name(self):
        rec = ArgumentReconciler()
        rec.register(Account, "balance")
        assert rec.members_for(Account) == ("balance",)

    def test_empty_members_rejected(self):
        rec = ArgumentReconciler()
        with pytest.raises(ValueError):
            rec.register(Account, [])


class TestReconcile:

    def test_status_copied_in_place(self, reconciler):
        """Test: cached Done status replayed onto a fresh Pending order."""
        live = Order(1)
        cached = Order(1, status="Done")
        original = live

        copied = reconciler.reconcile([live], [cached])

        assert copied == 1
        assert live is original
        assert live.status == "Done"

    def test_values_copied_not_aliased(self, reconciler):
        live = Order(1)
        cached = Order(1, tags=["urgent"])

        reconciler.reconcile([live], [cached])

        assert live.tags == ["urgent"]
        assert live.tags is not cached.tags

    def test_equal_members_not_counted(self, reconciler):
        assert reconciler.reconcile([Order(1, "Done")], [Order(1, "Done")]) == 0

    def test_none_slots_skipped(self, reconciler):
        live = Order(1)
        assert reconciler.reconcile([live, None], [None, Order(2, "Done")]) == 0
        assert live.status == "Pending"

    def test_type_mismatch_skipped(self, reconciler):
        live = RushOrder(1)
        assert reconciler.reconcile([live], [Order(1, "Done")]) == 0
        assert live.status == "Pending"

    def test_unregistered_type_skipped(self, reconciler):
        live = Account(1, 10)
        assert reconciler.reconcile([live], [Account(1, 99)]) == 0
        assert live.balance == 10

    def test_primitive_slots_skipped(self, reconciler):
        assert reconciler.reconcile([1, "a"], [2, "b"]) == 0

    def test_only_registered_members_copied(self):
        rec = ArgumentReconciler()
        rec.register(Order, ["status"])
        live = Order(1, note="mine")

        rec.reconcile([live], [Order(1, "Done", note="theirs")])

        assert live.status == "Done"
        assert live.note == "mine"

    def test_read_only_property_skipped(self):
        rec = ArgumentReconciler()
        rec.register(Account, ["balance", "label"])
        live = Account(1, 10)

        copied = rec.reconcile([live], [Account(2, 99)])

        assert copied == 1
        assert live.balance == 99
        assert live.label == "acct-1"

    def test_frozen_dataclass_skipped_silently(self):
        rec = ArgumentReconciler()
        rec.register(Point)
        live = Point(1, 1)

        assert rec.reconcile([live], [Point(2, 2)]) == 0
        assert live == Point(1, 1)

    def test_slots_aligned_positionally(self, reconciler):
        first, second = Order(1), Order(2)

        reconciler.reconcile([first, second], [Order(1, "Done"), Order(2, "Failed")])

        assert first.status == "Done"
        assert second.status == "Failed"
