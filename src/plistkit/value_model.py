"""Canonical property list value tree.

A ``Value`` is one of seven variants. Trees are built fresh for each call,
are finite and acyclic, and dictionary keys are always strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, Mapping, TypeAlias


class ValueKind(Enum):
    BOOL = "Bool"
    NUMBER = "Number"
    STRING = "String"
    BYTES = "Bytes"
    TIMESTAMP = "Timestamp"
    ARRAY = "Array"
    DICTIONARY = "Dictionary"


@dataclass(frozen=True)
class Bool:
    kind: ClassVar[ValueKind] = ValueKind.BOOL
    value: bool


@dataclass(frozen=True)
class Number:
    """Signed or unsigned integer of at most 64 bits, or a finite float."""

    kind: ClassVar[ValueKind] = ValueKind.NUMBER
    value: int | float

    @property
    def is_float(self) -> bool:
        return isinstance(self.value, float)

    def text(self) -> str:
        return repr(self.value) if self.is_float else str(self.value)


@dataclass(frozen=True)
class String:
    kind: ClassVar[ValueKind] = ValueKind.STRING
    value: str


@dataclass(frozen=True)
class Bytes:
    kind: ClassVar[ValueKind] = ValueKind.BYTES
    value: bytes


@dataclass(frozen=True)
class Timestamp:
    # aware UTC, millisecond precision
    kind: ClassVar[ValueKind] = ValueKind.TIMESTAMP
    value: datetime


@dataclass(frozen=True)
class Array:
    kind: ClassVar[ValueKind] = ValueKind.ARRAY
    items: tuple[Value, ...] = ()


@dataclass(frozen=True)
class Dictionary:
    kind: ClassVar[ValueKind] = ValueKind.DICTIONARY
    entries: Mapping[str, Value] = field(default_factory=dict)


Value: TypeAlias = Bool | Number | String | Bytes | Timestamp | Array | Dictionary
