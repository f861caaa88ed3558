"""Decoding of Value trees into typed Python targets.

Decoding is best effort. A value that does not fit its target leaves the
target as it was and is remembered as an :class:`UnmarshalTypeError`; the walk
carries on and the first such error is raised once everything else has been
stored. Unknown leaves, non-string keys, keys naming unexported fields, and
errors raised by ``unmarshal_plist`` hooks abort the walk immediately.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import typing
from datetime import datetime
from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

import numpy as np

from plistkit.exceptions import (
    InvalidUnmarshalError,
    PlistError,
    UnexpectedKeyKindError,
    UnknownLeafKindError,
    UnmarshalFieldError,
    UnmarshalTypeError,
)
from plistkit.native_types import (
    NativeKind,
    NativeType,
    classify,
    float_max,
    int_bounds,
    zero_value,
)
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
    ValueKind,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_VARIANTS = (Bool, Number, String, Bytes, Timestamp, Array, Dictionary)


@runtime_checkable
class Unmarshaler(Protocol):
    """Implemented by objects that decode themselves.

    ``unmarshal_plist`` receives the plain Python form of the value (``bool``,
    ``int``/``float``, ``str``, ``bytes``, ``datetime``, ``list``, ``dict``)
    and updates ``self``.
    """

    def unmarshal_plist(self, plist: object) -> None: ...


class Ref(Generic[T]):
    """A typed slot to unmarshal into.

    ``Ref(list[int])`` starts out holding the zero value of ``list[int]``;
    after a successful unmarshal the decoded value is in ``.value``.
    """

    def __init__(self, tp: Any, value: T | None = None):
        self.type = tp
        self.value = zero_value(tp) if value is None else value

    def __repr__(self) -> str:
        return f"Ref({self.type!r}, {self.value!r})"


_DEFAULT_HINTS: dict[ValueKind, Any] = {
    ValueKind.BOOL: bool,
    ValueKind.STRING: str,
    ValueKind.BYTES: bytes,
    ValueKind.TIMESTAMP: datetime,
    ValueKind.ARRAY: list[Any],
    ValueKind.DICTIONARY: dict[str, Any],
}


def default_hint(value: Value) -> Any:
    if isinstance(value, Number):
        return float if value.is_float else int
    return _DEFAULT_HINTS[value.kind]


def generic_form(value: Value) -> object:
    """Map a Value to the plain object an interface slot would receive."""
    if isinstance(value, Array):
        return [generic_form(item) for item in value.items]
    if isinstance(value, Dictionary):
        return {key: generic_form(item) for key, item in _entries(value)}
    if isinstance(value, (Bool, Number, String, Bytes, Timestamp)):
        return value.value
    raise UnknownLeafKindError(value)


def _entries(value: Dictionary) -> list[tuple[str, Value]]:
    for key in value.entries:
        if not isinstance(key, str):
            raise UnexpectedKeyKindError(key)
    return list(value.entries.items())


def unmarshal_value(value: Value, target: object) -> None:
    hint, current, store = resolve_target(target)
    state = _DecodeState()
    store(state.decode(value, hint, current))
    if state.error is not None:
        raise state.error


def resolve_target(target: object) -> tuple[Any, object, Callable[[object], None]]:
    if isinstance(target, Ref):

        def store_ref(result: object) -> None:
            target.value = result

        return target.type, target.value, store_ref
    if dataclasses.is_dataclass(target) and not isinstance(target, type):
        return type(target), target, _discard
    if isinstance(target, list):

        def store_list(result: object) -> None:
            if result is not target:
                target[:] = result

        return list[Any], target, store_list
    if isinstance(target, dict):
        return dict[str, Any], target, _discard
    raise InvalidUnmarshalError(target)


def _discard(result: object) -> None:
    return None


def _hook_class(native: NativeType) -> type | None:
    candidate = native.hint
    if native.kind is NativeKind.POINTER:
        candidate = native.args[0]
    if isinstance(candidate, type) and callable(getattr(candidate, "unmarshal_plist", None)):
        return candidate
    return None


class _DecodeState:
    def __init__(self) -> None:
        self.error: PlistError | None = None

    def record(self, error: UnmarshalTypeError) -> None:
        logger.debug("recoverable decode error: %s", error)
        if self.error is None:
            self.error = error

    def mismatch(self, description: str, hint: Any, current: object) -> object:
        self.record(UnmarshalTypeError(description, hint))
        return current

    def decode(self, value: Value, hint: Any, current: object) -> object:
        if not isinstance(value, _VARIANTS):
            raise UnknownLeafKindError(value)
        native = classify(hint)
        if isinstance(current, Unmarshaler) and not isinstance(current, type):
            current.unmarshal_plist(generic_form(value))
            return current
        hook_class = _hook_class(native)
        if hook_class is not None:
            target = zero_value(hook_class)
            if target is None:
                target = hook_class.__new__(hook_class)
            target.unmarshal_plist(generic_form(value))
            return target
        if native.kind is NativeKind.POINTER:
            referent = native.args[0]
            if current is None:
                current = zero_value(referent)
            return self.decode(value, referent, current)
        if native.kind is NativeKind.INTERFACE:
            return self.decode_interface(value, native, current)
        if isinstance(value, Array):
            return self.decode_array(value, native, current)
        if isinstance(value, Dictionary):
            return self.decode_dictionary(value, native, current)
        if isinstance(value, Number):
            return self.decode_number(value, native, current)
        if isinstance(value, Bool):
            if native.kind is NativeKind.BOOL:
                return native.hint(value.value)
            return self.mismatch(value.kind.value, hint, current)
        if isinstance(value, String):
            if native.kind is NativeKind.STRING:
                return self.convert(native, value.value, value.kind.value, current)
            return self.mismatch(value.kind.value, hint, current)
        if isinstance(value, Bytes):
            if native.kind is NativeKind.BYTES:
                return native.hint(value.value)
            return self.mismatch(value.kind.value, hint, current)
        if native.kind is NativeKind.TIME:
            return value.value
        return self.mismatch(value.kind.value, hint, current)

    def convert(self, native: NativeType, raw: object, description: str, current: object) -> object:
        # str / int subclasses such as enums may reject the raw value
        try:
            return native.hint(raw)
        except (TypeError, ValueError):
            return self.mismatch(description, native.hint, current)

    def decode_interface(self, value: Value, native: NativeType, current: object) -> object:
        if current is not None:
            return self.decode(value, type(current), current)
        chosen = default_hint(value)
        if native.args:
            chosen = _compatible_member(chosen, native.args)
            if chosen is None:
                return self.mismatch(value.kind.value, native.hint, current)
        return self.decode(value, chosen, zero_value(chosen))

    def decode_array(self, value: Array, native: NativeType, current: object) -> object:
        if native.kind is NativeKind.SEQUENCE:
            item_hint = native.args[0]
            items = [self.decode(item, item_hint, zero_value(item_hint)) for item in value.items]
            return native.container(items)
        if native.kind is NativeKind.ARRAY:
            if isinstance(current, tuple) and len(current) == len(native.args):
                slots = list(current)
            else:
                slots = list(zero_value(native.hint))
            # elements past the fixed length are dropped
            for index, item in enumerate(value.items[: len(slots)]):
                slots[index] = self.decode(item, native.args[index], slots[index])
            return tuple(slots)
        return self.mismatch(value.kind.value, native.hint, current)

    def decode_dictionary(self, value: Dictionary, native: NativeType, current: object) -> object:
        if native.kind is NativeKind.MAPPING:
            key_hint, item_hint = native.args
            if key_hint not in {str, Any, object}:
                return self.mismatch(ValueKind.STRING.value, key_hint, current)
            mapping = current if isinstance(current, dict) else {}
            for key, item in _entries(value):
                mapping[key] = self.decode(item, item_hint, zero_value(item_hint))
            return mapping
        if native.kind is NativeKind.RECORD:
            return self.decode_record(value, native.hint, current)
        return self.mismatch(value.kind.value, native.hint, current)

    def decode_record(self, value: Dictionary, tp: type, current: object) -> object:
        record = current if isinstance(current, tp) else zero_value(tp)
        descriptor = describe(tp)
        for key, item in _entries(value):
            field = descriptor.match(key)
            if field is None:
                continue
            if not field.exported:
                raise UnmarshalFieldError(key, tp, dataclasses.fields(tp)[field.index])
            decoded = self.decode(item, field.hint, getattr(record, field.name))
            object.__setattr__(record, field.name, decoded)
        return record

    def decode_number(self, value: Number, native: NativeType, current: object) -> object:
        if native.kind in {NativeKind.INT, NativeKind.UINT}:
            if not math.isfinite(value.value):
                return self.mismatch(f"Number {value.text()}", native.hint, current)
            number = int(value.value)
            low, high = int_bounds(native)
            if number < low or number > high:
                return self.mismatch(f"Number {number}", native.hint, current)
            return self.convert(native, number, f"Number {number}", current)
        if native.kind is NativeKind.FLOAT:
            real = float(value.value)
            # infinities and NaN are stored as is at every width
            if math.isfinite(real) and abs(real) > float_max(native):
                text = np.format_float_positional(real, trim="-")
                return self.mismatch(f"Number {text}", native.hint, current)
            return native.hint(real)
        return self.mismatch(value.kind.value, native.hint, current)


def _compatible_member(chosen: Any, members: tuple[Any, ...]) -> Any:
    chosen_origin = typing.get_origin(chosen) or chosen
    chosen_kind = classify(chosen).kind
    for member in members:
        if member is Any or member is object:
            return chosen
        member_origin = typing.get_origin(member) or member
        if not isinstance(member_origin, type):
            continue
        # bool is an int subclass but Bool values never decode into int
        if issubclass(chosen_origin, member_origin) and classify(member).kind is chosen_kind:
            return member
    return None
