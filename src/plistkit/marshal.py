"""Conversion of Python values into Value trees.

Dispatch order for each value:

1. ``None`` is rejected; property lists have no null.
2. Objects implementing :class:`Marshaler` are replaced by whatever their
   ``marshal_plist`` returns, which is then marshaled in turn.
3. Everything else maps by type: ``bool`` to Bool, integers and floats to
   Number, ``str`` to String, ``bytes``/``bytearray`` to Bytes, ``datetime`` to
   Timestamp, mappings with string keys to Dictionary, lists and tuples to
   Array, and dataclass instances to Dictionary using their field layout.

Any other type raises :class:`UnsupportedTypeError`. The first error aborts
the whole call.
"""

from __future__ import annotations

import dataclasses
import math
from datetime import datetime
from typing import Any, Mapping, Protocol, runtime_checkable

import numpy as np

from plistkit.exceptions import UnsupportedTypeError, UnsupportedValueError
from plistkit.native_types import NativeKind, classify
from plistkit.scalar_codec import repair_string, truncate_timestamp
from plistkit.type_cache import describe
from plistkit.value_model import (
    Array,
    Bool,
    Bytes,
    Dictionary,
    Number,
    String,
    Timestamp,
    Value,
)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


@runtime_checkable
class Marshaler(Protocol):
    """Implemented by objects that choose their own property list form."""

    def marshal_plist(self) -> object: ...


def marshal_value(value: object) -> Value:
    return _marshal(value, None)


def _marshal(value: object, hint: Any) -> Value:
    if value is None:
        raise UnsupportedValueError(value, _nil_text(hint))
    if isinstance(value, Marshaler) and not isinstance(value, type):
        return _marshal(value.marshal_plist(), Any)
    if isinstance(value, (bool, np.bool_)):
        return Bool(bool(value))
    if isinstance(value, (int, np.integer)):
        number = int(value)
        if number < INT64_MIN or number > INT64_MAX:
            raise UnsupportedValueError(value, str(number))
        return Number(number)
    if isinstance(value, (float, np.floating)):
        real = float(value)
        if math.isnan(real) or math.isinf(real):
            raise UnsupportedValueError(value, str(real))
        return Number(real)
    if isinstance(value, str):
        return String(repair_string(value))
    if isinstance(value, (bytes, bytearray)):
        return Bytes(bytes(value))
    if isinstance(value, datetime):
        return Timestamp(truncate_timestamp(value))
    if isinstance(value, Mapping):
        return _marshal_mapping(value, hint)
    if isinstance(value, (list, tuple)):
        return _marshal_sequence(value, hint)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _marshal_record(value)
    raise UnsupportedTypeError(type(value))


def _nil_text(hint: Any) -> str:
    if hint is None:
        return "invalid value"
    if classify(hint).kind is NativeKind.POINTER:
        return "nil pointer"
    return "nil interface"


def _element_hints(hint: Any, count: int) -> list[Any]:
    if hint is None:
        return [Any] * count
    native = classify(hint)
    if native.kind is NativeKind.POINTER:
        return _element_hints(native.args[0], count)
    if native.kind is NativeKind.SEQUENCE:
        return [native.args[0]] * count
    if native.kind is NativeKind.ARRAY and len(native.args) == count:
        return list(native.args)
    return [Any] * count


def _marshal_sequence(items: list[object] | tuple[object, ...], hint: Any) -> Array:
    hints = _element_hints(hint, len(items))
    return Array(tuple(_marshal(item, item_hint) for item, item_hint in zip(items, hints)))


def _marshal_mapping(mapping: Mapping[object, object], hint: Any) -> Dictionary:
    value_hint: Any = Any
    if hint is not None:
        native = classify(hint)
        if native.kind is NativeKind.POINTER:
            native = classify(native.args[0])
        if native.kind is NativeKind.MAPPING:
            value_hint = native.args[1]
    entries: dict[str, Value] = {}
    for key, item in mapping.items():
        if not isinstance(key, str):
            raise UnsupportedTypeError(Mapping[type(key), Any])
        entries[repair_string(key)] = _marshal(item, value_hint)
    return Dictionary(entries)


def _marshal_record(record: object) -> Dictionary:
    descriptor = describe(type(record))
    entries: dict[str, Value] = {}
    for field in descriptor.fields:
        item = getattr(record, field.name)
        if field.omit_empty and is_empty(item):
            continue
        entries[field.key] = _marshal(item, field.hint)
    return Dictionary(entries)


def is_empty(value: object) -> bool:
    """Report whether an ``omitempty`` field should be left out."""
    if value is None:
        return True
    if isinstance(value, (bool, np.bool_)):
        return not value
    if isinstance(value, (int, float, np.integer, np.floating)):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, list, tuple, Mapping)):
        return len(value) == 0
    return False
