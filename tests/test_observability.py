import pytest

from cacheable.observability import CacheDecisionRecord


def test_decision_record_schema_roundtrip():
    record = CacheDecisionRecord(
        function="billing.add",
        key="billing.add|2|3",
        outcome="hit",
        age_seconds=1.5,
        reconciled_members=2,
    )

    payload = record.to_dict()

    assert payload["outcome"] == "hit"
    assert payload["reconciled_members"] == 2
    assert payload["error"] is None


def test_unknown_outcome_rejected():
    record = CacheDecisionRecord(function="f", key="f", outcome="maybe")

    with pytest.raises(ValueError, match="validation failed"):
        record.to_dict()


def test_negative_age_rejected():
    record = CacheDecisionRecord(function="f", key="f", outcome="expired", age_seconds=-3)

    with pytest.raises(ValueError):
        record.to_dict()
