"""Cache decision record schema enforcement."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator

OUTCOMES = ["hit", "miss", "expired", "store_error", "write", "write_error"]

DECISION_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": [
        "function",
        "key",
        "outcome",
        "age_seconds",
        "reconciled_members",
        "recorded_at",
    ],
    "properties": {
        "function": {"type": "string", "minLength": 1},
        "key": {"type": "string", "minLength": 1},
        "outcome": {"type": "string", "enum": OUTCOMES},
        "age_seconds": {"type": ["number", "null"], "minimum": 0},
        "reconciled_members": {"type": "integer", "minimum": 0},
        "recorded_at": {"type": "string", "format": "date-time"},
        "error": {"type": ["string", "null"]},
    },
}

_validator = Draft7Validator(DECISION_SCHEMA)


def validate_decision(payload: Dict[str, Any]) -> None:
    errors = sorted(_validator.iter_errors(payload), key=lambda e: e.path)
    if errors:
        messages = ", ".join(error.message for error in errors)
        raise ValueError(f"cache decision validation failed: {messages}")


@dataclass
class CacheDecisionRecord:
    function: str
    key: str
    outcome: str
    age_seconds: Optional[float] = None
    reconciled_members: int = 0
    error: Optional[str] = None
    recorded_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "function": self.function,
            "key": self.key,
            "outcome": self.outcome,
            "age_seconds": self.age_seconds,
            "reconciled_members": self.reconciled_members,
            "recorded_at": self.recorded_at,
            "error": self.error,
        }
        validate_decision(payload)
        return payload
