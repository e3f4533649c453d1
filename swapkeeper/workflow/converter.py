"""Custom Temporal DataConverter for swapkeeper frozen-dataclass types.

Handles serialization of Enum, tuple, Optional fields, and nested
dataclasses (TradeCommand -> ParticipantTerms, EscrowResult ->
CommandOutput) by adding __type__ tags during encoding.
"""

from __future__ import annotations

import dataclasses
import importlib
import json
import types
from enum import Enum
from typing import Any, Union, get_args, get_origin, get_type_hints

from temporalio.converter import (
    CompositePayloadConverter,
    DataConverter,
    DefaultPayloadConverter,
    JSONPlainPayloadConverter,
    JSONTypeConverter,
)

# ---------------------------------------------------------------------------
# Recursive serializer (replaces dataclasses.asdict)
# ---------------------------------------------------------------------------


def _to_json(obj: Any) -> Any:
    """Recursively convert swapkeeper objects to JSON-compatible values.

    Adds ``__type__`` tags to dataclass instances so nested and optional
    dataclass fields can be rebuilt on the other side.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        d: dict[str, Any] = {
            "__type__": f"{type(obj).__module__}.{type(obj).__qualname__}",
        }
        for field in dataclasses.fields(obj):
            d[field.name] = _to_json(getattr(obj, field.name))
        return d
    if isinstance(obj, (tuple, list)):
        return [_to_json(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_json(v) for k, v in obj.items()}
    raise TypeError(f"Cannot encode {type(obj).__name__} for a workflow payload")


class SwapkeeperJSONEncoder(json.JSONEncoder):
    """JSON encoder using _to_json for swapkeeper types."""

    def default(self, o: Any) -> Any:
        return _to_json(o)


# ---------------------------------------------------------------------------
# Recursive deserializer
# ---------------------------------------------------------------------------

# Only classes from these modules are ever instantiated from a payload.
_ALLOWED_MODULES: frozenset[str] = frozenset({
    "swapkeeper.workflow.types",
})

_CLASS_CACHE: dict[str, type] = {}


def _resolve_class(fqn: str) -> type | None:
    """Resolve a fully qualified class name within ``_ALLOWED_MODULES``."""
    if fqn in _CLASS_CACHE:
        return _CLASS_CACHE[fqn]
    parts = fqn.rsplit(".", 1)
    if len(parts) != 2:
        return None
    module_name, class_name = parts
    if module_name not in _ALLOWED_MODULES:
        return None
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    cls = getattr(module, class_name, None)
    if isinstance(cls, type):
        _CLASS_CACHE[fqn] = cls
        return cls
    return None


def _strip_optional(hint: Any) -> Any:
    """``X | None`` -> ``X``; every other hint unchanged."""
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _item_hint(hint: Any) -> Any:
    """Element hint of ``tuple[X, ...]``; Any otherwise."""
    if get_origin(hint) is tuple:
        args = get_args(hint)
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
    return Any


def _from_json(hint: Any, value: Any) -> Any:
    """Recursively convert JSON values back to swapkeeper types."""
    if value is None:
        return None
    hint = _strip_optional(hint)

    # Tagged dataclass
    if isinstance(value, dict) and "__type__" in value:
        cls = _resolve_class(value["__type__"])
        if cls is None or not dataclasses.is_dataclass(cls):
            raise TypeError(f"Refusing to decode {value['__type__']!r}")
        hints = get_type_hints(cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(cls):
            if field.name in value:
                kwargs[field.name] = _from_json(hints.get(field.name, Any), value[field.name])
        return cls(**kwargs)

    # Enum
    if isinstance(hint, type) and issubclass(hint, Enum) and not isinstance(value, Enum):
        return hint(value)

    # tuple from list
    if isinstance(value, list):
        item = _item_hint(hint)
        return tuple(_from_json(item, x) for x in value)

    return value


class SwapkeeperJSONTypeConverter(JSONTypeConverter):
    """Deserialize tagged JSON values back to swapkeeper types."""

    def to_typed_value(
        self, hint: type, value: Any,
    ) -> Any:
        if value is None:
            return JSONTypeConverter.Unhandled
        if isinstance(value, dict) and "__type__" in value:
            return _from_json(hint, value)
        target = _strip_optional(hint)
        if isinstance(target, type) and issubclass(target, Enum):
            return target(value)
        if isinstance(value, list) and get_origin(target) is tuple:
            return _from_json(target, value)
        return JSONTypeConverter.Unhandled


# ---------------------------------------------------------------------------
# Wire up
# ---------------------------------------------------------------------------


class SwapkeeperPayloadConverter(CompositePayloadConverter):
    """Payload converter with swapkeeper-aware JSON handling."""

    def __init__(self) -> None:
        json_converter = JSONPlainPayloadConverter(
            encoder=SwapkeeperJSONEncoder,
            custom_type_converters=[SwapkeeperJSONTypeConverter()],
        )
        super().__init__(
            *(
                c
                for c in DefaultPayloadConverter.default_encoding_payload_converters
                if not isinstance(c, JSONPlainPayloadConverter)
            ),
            json_converter,
        )


SWAPKEEPER_DATA_CONVERTER = DataConverter(
    payload_converter_class=SwapkeeperPayloadConverter,
)
