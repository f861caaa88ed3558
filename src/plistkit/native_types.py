"""Classification of Python type hints into native kinds."""

from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

import numpy as np


class NativeKind(Enum):
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    TIME = "time"
    SEQUENCE = "sequence"
    ARRAY = "array"
    MAPPING = "mapping"
    RECORD = "record"
    POINTER = "pointer"
    INTERFACE = "interface"
    UNSUPPORTED = "unsupported"


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_SEQUENCE_ORIGINS = {list, collections.abc.Sequence, collections.abc.MutableSequence}
_MAPPING_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}


@dataclass(frozen=True)
class NativeType:
    """A classified type hint.

    ``args`` holds the element hints: one for sequences, one per position for
    fixed arrays, ``(key, value)`` for mappings, the referent for pointers,
    and the members of a narrowed interface.
    """

    hint: Any
    kind: NativeKind
    args: tuple[Any, ...] = ()
    bits: int = 64

    @property
    def container(self) -> type:
        if self.kind in {NativeKind.SEQUENCE, NativeKind.ARRAY}:
            origin = typing.get_origin(self.hint) or self.hint
            return tuple if origin is tuple else list
        return dict


def is_union(hint: object) -> bool:
    return typing.get_origin(hint) in {Union, types.UnionType}


def classify(hint: Any) -> NativeType:
    if hint is Any or hint is object:
        return NativeType(hint, NativeKind.INTERFACE)
    if is_union(hint):
        members = tuple(arg for arg in typing.get_args(hint) if arg is not type(None))
        if len(members) == 1 and len(typing.get_args(hint)) == 2:
            return NativeType(hint, NativeKind.POINTER, members)
        return NativeType(hint, NativeKind.INTERFACE, members)
    origin = typing.get_origin(hint)
    if origin is typing.Annotated:
        return classify(typing.get_args(hint)[0])
    if origin is not None:
        args = typing.get_args(hint)
        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return NativeType(hint, NativeKind.SEQUENCE, (args[0],))
            if args == ((),):
                return NativeType(hint, NativeKind.ARRAY, ())
            return NativeType(hint, NativeKind.ARRAY, args)
        if origin in _SEQUENCE_ORIGINS:
            return NativeType(hint, NativeKind.SEQUENCE, args or (Any,))
        if origin in _MAPPING_ORIGINS:
            return NativeType(hint, NativeKind.MAPPING, args or (str, Any))
        return NativeType(hint, NativeKind.UNSUPPORTED)
    if not isinstance(hint, type):
        return NativeType(hint, NativeKind.UNSUPPORTED)
    if issubclass(hint, (bool, np.bool_)):
        return NativeType(hint, NativeKind.BOOL)
    if issubclass(hint, np.signedinteger):
        return NativeType(hint, NativeKind.INT, bits=np.iinfo(hint).bits)
    if issubclass(hint, np.unsignedinteger):
        return NativeType(hint, NativeKind.UINT, bits=np.iinfo(hint).bits)
    if issubclass(hint, np.floating):
        return NativeType(hint, NativeKind.FLOAT, bits=np.finfo(hint).bits)
    if issubclass(hint, int):
        return NativeType(hint, NativeKind.INT)
    if issubclass(hint, float):
        return NativeType(hint, NativeKind.FLOAT)
    if issubclass(hint, str):
        return NativeType(hint, NativeKind.STRING)
    if issubclass(hint, (bytes, bytearray)):
        return NativeType(hint, NativeKind.BYTES)
    if issubclass(hint, datetime):
        return NativeType(hint, NativeKind.TIME)
    if dataclasses.is_dataclass(hint):
        return NativeType(hint, NativeKind.RECORD)
    if hint in {list, tuple}:
        return NativeType(hint, NativeKind.SEQUENCE, (Any,))
    if hint is dict:
        return NativeType(hint, NativeKind.MAPPING, (str, Any))
    return NativeType(hint, NativeKind.UNSUPPORTED)


def int_bounds(native: NativeType) -> tuple[int, int]:
    if native.kind is NativeKind.UINT:
        return 0, (1 << native.bits) - 1
    return -(1 << (native.bits - 1)), (1 << (native.bits - 1)) - 1


def float_max(native: NativeType) -> float:
    if native.hint is float:
        return float(np.finfo(np.float64).max)
    return float(np.finfo(native.hint).max)


def zero_value(hint: Any) -> Any:
    """Return the zero value of ``hint``.

    Records are allocated without running ``__init__`` so that dataclasses
    with required fields still have a zero value.
    """
    native = classify(hint)
    kind = native.kind
    if kind is NativeKind.BOOL:
        return native.hint(False)
    if kind in {NativeKind.INT, NativeKind.UINT, NativeKind.FLOAT}:
        return native.hint(0)
    if kind is NativeKind.STRING:
        return ""
    if kind is NativeKind.BYTES:
        return b"" if issubclass(native.hint, bytes) else bytearray()
    if kind is NativeKind.TIME:
        return EPOCH
    if kind is NativeKind.SEQUENCE:
        return native.container()
    if kind is NativeKind.ARRAY:
        return tuple(zero_value(arg) for arg in native.args)
    if kind is NativeKind.MAPPING:
        return {}
    if kind is NativeKind.RECORD:
        from plistkit.type_cache import describe

        record = object.__new__(native.hint)
        hints = describe(native.hint).hints
        for field in dataclasses.fields(native.hint):
            object.__setattr__(record, field.name, zero_value(hints[field.name]))
        return record
    return None
