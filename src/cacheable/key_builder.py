#!/usr/bin/env python3
"""
Cache Key Generation — argument-aware keys for cached functions

Implements:
- KeyBuilder.build_key(instance, arguments) → deterministic key
- USE_ALL_PARAMETERS: every argument contributes its canonical text
- USE_PROPERTIES: structured arguments contribute only the named properties
- Long keys collapse to a SHA-256 digest behind the identity prefix
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import functools
import hashlib
import inspect
import json
import logging
import marshal
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from .policy import KeyPolicy

logger = logging.getLogger(__name__)

DELIMITER = "|"
DEFAULT_MAX_KEY_LENGTH = 250

_MISSING = object()
_PRIMITIVES = (str, bytes, bytearray, int, float, bool, type(None))


@dataclass(frozen=True)
class KeyBuilderConfig:
    method_name: str
    group_name: str = ""
    policy: KeyPolicy = KeyPolicy.USE_ALL_PARAMETERS
    property_names: Tuple[str, ...] = ()
    parameters: Tuple[inspect.Parameter, ...] = ()
    max_key_length: int = DEFAULT_MAX_KEY_LENGTH


def normalize_properties(properties: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    if not properties:
        return ()
    if isinstance(properties, str):
        return (properties,)
    return tuple(properties)


def _qualified(obj: Any) -> str:
    module = getattr(obj, "__module__", None) or "builtins"
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or type(obj).__qualname__
    return f"{module}.{name}"


def _type_token(value: Any) -> str:
    return f"<{_qualified(type(value))}>"


def _dumps(form: Any) -> str:
    return json.dumps(form, sort_keys=True, separators=(",", ":"))


def _object_fields(value: Any) -> Optional[Dict[str, Any]]:
    """Instance state of a structured object, private attributes included, or None."""
    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    fields: Dict[str, Any] = {}
    found = False
    attrs = getattr(value, "__dict__", None)
    if isinstance(attrs, dict):
        fields.update(attrs)
        found = True
    for klass in type(value).__mro__:
        names = klass.__dict__.get("__slots__", ())
        for name in [names] if isinstance(names, str) else names:
            if name in ("__dict__", "__weakref__"):
                continue
            found = True
            if hasattr(value, name):
                fields[name] = getattr(value, name)
    return fields if found else None


def _callable_form(value: Any, active: List[int]) -> Dict[str, Any]:
    if inspect.ismethod(value):
        return {
            "__type__": "method",
            "self": _normalize(value.__self__, active),
            "func": _normalize(value.__func__, active),
        }
    if inspect.isfunction(value):
        # Same name, different body or captured values: lambdas, closures.
        code = value.__code__
        form: Dict[str, Any] = {
            "__type__": "function",
            "name": _qualified(value),
            "code": hashlib.sha256(marshal.dumps(code)).hexdigest(),
        }
        if value.__defaults__:
            form["defaults"] = _normalize(value.__defaults__, active)
        if value.__kwdefaults__:
            form["kwdefaults"] = _normalize(value.__kwdefaults__, active)
        if value.__closure__:
            cells = []
            for cell in value.__closure__:
                try:
                    cells.append(_normalize(cell.cell_contents, active))
                except ValueError:
                    cells.append({"__empty__": True})
            form["closure"] = cells
        return form
    form = {"__type__": "routine", "name": _qualified(value)}
    owner = getattr(value, "__self__", None)
    if owner is not None and not inspect.ismodule(owner):
        form["self"] = _normalize(owner, active)
    return form


def _normalize(value: Any, active: List[int]) -> Any:
    """
    Turn one value into a JSON-encodable form that keeps its type.

    Containers and objects are tagged with ``__type__`` so a tuple, a list
    and a set of the same items stay apart, and mapping keys are encoded
    with their own type. Cycles become ``{"__ref__": depth}``. Values with
    no inspectable state become ``{"__opaque__": <type>}``.
    """
    if value is None or type(value) in (bool, int, float, str):
        return value
    if isinstance(value, enum.Enum):
        return {"__type__": _qualified(type(value)), "value": _normalize(value.value, active)}
    for base in (bool, int, float, str):
        if isinstance(value, base):
            return {"__type__": _qualified(type(value)), "value": base(value)}

    marker = id(value)
    if marker in active:
        return {"__ref__": len(active) - active.index(marker)}
    active.append(marker)
    try:
        return _normalize_structured(value, active)
    finally:
        active.pop()


def _normalize_structured(value: Any, active: List[int]) -> Any:
    type_name = _qualified(type(value))
    if type(value) is list:
        return [_normalize(item, active) for item in value]
    if isinstance(value, (list, tuple)):
        return {"__type__": type_name, "items": [_normalize(item, active) for item in value]}
    if isinstance(value, (set, frozenset)):
        items = sorted(_dumps(_normalize(item, active)) for item in value)
        return {"__type__": type_name, "items": items}
    if isinstance(value, Mapping):
        pairs = [[_dumps(_normalize(k, active)), _normalize(v, active)] for k, v in value.items()]
        pairs.sort(key=lambda pair: pair[0])
        return {"__type__": type_name, "items": pairs}
    if isinstance(value, (bytes, bytearray)):
        return {"__type__": type_name, "hex": value.hex()}
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return {"__type__": type_name, "value": value.isoformat()}
    if isinstance(value, (decimal.Decimal, uuid.UUID, PurePath)):
        return {"__type__": type_name, "value": str(value)}
    if isinstance(value, type):
        return {"__type__": "builtins.type", "name": _qualified(value)}
    if inspect.ismodule(value):
        return {"__type__": "builtins.module", "name": value.__name__}
    if inspect.isroutine(value):
        return _callable_form(value, active)
    if isinstance(value, functools.partial):
        return {
            "__type__": type_name,
            "func": _normalize(value.func, active),
            "args": _normalize(value.args, active),
            "keywords": _normalize(value.keywords, active),
        }

    fields = _object_fields(value)
    if fields is None:
        return {"__opaque__": type_name}
    return {
        "__type__": type_name,
        "fields": {name: _normalize(field_value, active) for name, field_value in fields.items()},
    }


def canonical(value: Any) -> str:
    """
    Stable text for one argument value.

    JSON keeps ``None`` (``null``) apart from the string ``"null"`` and
    quotes strings, so the delimiter inside a string cannot forge an extra
    segment. A value with no inspectable state, or one whose state cannot
    be read, degrades to its type name.
    """
    try:
        form = _normalize(value, [])
        if isinstance(form, dict) and set(form) == {"__opaque__"}:
            return _type_token(value)
        return _dumps(form)
    except Exception as exc:  # noqa: BLE001 - deep nesting, raising getters
        logger.debug(f"Falling back to type token for {type(value).__qualname__}: {exc}")
        return _type_token(value)


def _read_property(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name, _MISSING)
    try:
        return getattr(value, name, _MISSING)
    except Exception:  # noqa: BLE001
        return _MISSING


class KeyBuilder:
    """
    Derive cache keys from a function's identity and one call's arguments.

    Design:
    - key = [group] | module.qualname | arg1 | arg2 ...
    - The identity segment is always present, so zero-argument functions
      sharing a group still get distinct keys
    - The receiver is never read; only arguments and the static identity
    """

    def __init__(self, config: KeyBuilderConfig):
        self.config = config
        prefix: List[str] = []
        if config.group_name:
            prefix.append(config.group_name)
        prefix.append(config.method_name)
        self._prefix = tuple(prefix)

    @classmethod
    def for_function(
        cls,
        func: Callable[..., Any],
        group_name: str = "",
        policy: KeyPolicy = KeyPolicy.USE_ALL_PARAMETERS,
        properties: Union[str, Sequence[str], None] = None,
        max_key_length: int = DEFAULT_MAX_KEY_LENGTH,
        skip_receiver: bool = False,
    ) -> "KeyBuilder":
        parameters = tuple(inspect.signature(func).parameters.values())
        if skip_receiver:
            parameters = parameters[1:]
        config = KeyBuilderConfig(
            method_name=f"{func.__module__}.{func.__qualname__}",
            group_name=group_name or "",
            policy=policy,
            property_names=normalize_properties(properties),
            parameters=parameters,
            max_key_length=max_key_length,
        )
        return cls(config)

    def build_key(self, instance: Any, arguments: Sequence[Any]) -> str:
        """
        Build the key for one invocation.

        Args:
            instance: Receiver of a method call, or None. Not part of the key.
            arguments: Argument values in declared parameter order.

        Returns:
            Deterministic key string
        """
        segments = list(self._prefix)
        for value in arguments:
            segments.append(self._segment(value))

        key = DELIMITER.join(segments)
        if len(key) > self.config.max_key_length:
            digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
            key = DELIMITER.join(self._prefix + (f"#{digest}",))

        logger.debug(f"Generated key: {key} (policy={self.config.policy.value})")
        return key

    def _segment(self, value: Any) -> str:
        if self.config.policy != KeyPolicy.USE_PROPERTIES or not self.config.property_names:
            return canonical(value)
        if isinstance(value, _PRIMITIVES):
            return canonical(value)

        parts = []
        for name in self.config.property_names:
            prop = _read_property(value, name)
            if prop is _MISSING:
                return canonical(value)
            parts.append(f"{name}={canonical(prop)}")
        return ",".join(parts)


# Test
if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    def add(a, b):
        return a + b

    builder = KeyBuilder.for_function(add)
    key1 = builder.build_key(None, [2, 3])
    key2 = builder.build_key(None, [2, 3])
    key3 = builder.build_key(None, [None, "null"])

    print(f"\nSame inputs → same key: {key1 == key2} ({key1})")
    print(f"None vs 'null': {key3}")
