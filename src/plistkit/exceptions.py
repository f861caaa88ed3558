"""Error types raised by plistkit."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from dataclasses import Field


def type_name(tp: object) -> str:
    if tp is None:
        return "None"
    if isinstance(tp, type):
        if tp.__module__ in {"builtins", "datetime"}:
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return str(tp).replace("typing.", "")


class PlistError(Exception):
    """Base class for every error plistkit raises."""


class UnsupportedTypeError(PlistError):
    """Marshal met a value whose type has no property list mapping."""

    def __init__(self, tp: object):
        super().__init__(f"plistkit: unsupported type: {type_name(tp)}")
        self.type = tp


class UnsupportedValueError(PlistError):
    def __init__(self, value: object, text: str):
        super().__init__(f"plistkit: unsupported value: {text}")
        self.value = value
        self.text = text


class UnknownLeafKindError(PlistError):
    """A boxed object that is not one of the property list leaf kinds."""

    def __init__(self, leaf: object):
        super().__init__(
            f"plistkit: unknown property list object of type {type_name(type(leaf))}"
        )
        self.leaf = leaf


class UnexpectedKeyKindError(PlistError):
    """A dictionary key that is not a string.

    Property list dictionaries require string keys, so this only shows up for
    corrupt or hand-built input.
    """

    def __init__(self, key: object):
        super().__init__(
            f"plistkit: unexpected dictionary key of type {type_name(type(key))}"
        )
        self.key = key


class UnmarshalTypeError(PlistError):
    """A property list value that cannot be stored in the target type.

    ``value`` describes the property list side ("Bool", "Array",
    "Number -70000"), ``type`` is the Python type hint of the target.
    """

    def __init__(self, value: str, tp: object):
        super().__init__(
            f"plistkit: cannot unmarshal {value} into Python value of type {type_name(tp)}"
        )
        self.value = value
        self.type = tp


class UnmarshalFieldError(PlistError):
    def __init__(self, key: str, tp: type, field: Field):
        super().__init__(
            f"plistkit: cannot unmarshal dictionary key {key!r} into unexported "
            f"field {field.name} of type {type_name(tp)}"
        )
        self.key = key
        self.type = tp
        self.field = field


class InvalidUnmarshalError(PlistError):
    """The unmarshal target is not something values can be stored into."""

    def __init__(self, target: object):
        if target is None:
            message = "plistkit: Unmarshal(None)"
        elif isinstance(target, type):
            message = f"plistkit: Unmarshal(type {type_name(target)})"
        else:
            message = f"plistkit: Unmarshal(non-pointer {type_name(type(target))})"
        super().__init__(message)
        self.target = target


class FieldNameCollisionError(PlistError):
    def __init__(self, tp: type, name: str, fields: tuple[str, ...]):
        super().__init__(
            f"plistkit: fields {', '.join(fields)} of {type_name(tp)} "
            f"share the property list key {name!r}"
        )
        self.type = tp
        self.name = name
        self.fields = fields


class CodecError(PlistError):
    """Failure reported by a format codec while reading or writing bytes."""

    def __init__(
        self,
        domain: str,
        code: int,
        description: str,
        *,
        user_info: Mapping[str, object] | None = None,
    ):
        super().__init__(f"plistkit: {description}")
        self.domain = domain
        self.code = code
        self.description = description
        self.user_info = dict(user_info or {})
