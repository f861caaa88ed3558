from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import numpy as np
import pytest

from plistkit import Format, marshal, marshal_value
from plistkit.exceptions import UnsupportedTypeError, UnsupportedValueError
from plistkit.format_codec import create_with_data
from plistkit.unmarshal import generic_form
from plistkit.value_model import (
    Array,
    Bool,
    Bytes,
    Dictionary,
    Number,
    String,
    Timestamp,
)


@dataclass
class Optionals:
    sr: str = field(default="", metadata={"plist": "sr"})
    so: str = field(default="", metadata={"plist": "so,omitempty"})
    sw: str = field(default="", metadata={"plist": "-"})

    # actually named omitempty, not an option
    ir: int = field(default=0, metadata={"plist": "omitempty"})
    io: int = field(default=0, metadata={"plist": "io,omitempty"})

    slr: list[str] = field(default_factory=list, metadata={"plist": "slr,random"})
    slo: list[str] = field(default_factory=list, metadata={"plist": "slo,omitempty"})

    mr: dict[str, Any] = field(default_factory=dict, metadata={"plist": "mr"})
    mo: dict[str, Any] = field(default_factory=dict, metadata={"plist": ",omitempty"})


class RefHook(int):
    def marshal_plist(self) -> object:
        return "ref"


class ValHook(int):
    def marshal_plist(self) -> object:
        return "val"


@dataclass
class Hooks:
    r0: RefHook = field(default=RefHook(0), metadata={"plist": "R0"})
    r1: Optional[RefHook] = field(default=None, metadata={"plist": "R1"})
    v0: ValHook = field(default=ValHook(0), metadata={"plist": "V0"})
    v1: Optional[ValHook] = field(default=None, metadata={"plist": "V1"})


@dataclass
class Pointers:
    required: Optional[int] = None
    optional: Optional[int] = field(default=None, metadata={"plist": ",omitempty"})


@dataclass
class Nested:
    name: str
    children: list[Nested] = field(default_factory=list)


def _roundtrip(value: object) -> object:
    tree, fmt = create_with_data(marshal(value, Format.XML))
    assert fmt is Format.XML
    return generic_form(tree)


def test_omit_empty() -> None:
    optionals = Optionals(sw="something")
    assert _roundtrip(optionals) == {"sr": "", "omitempty": 0, "slr": [], "mr": {}}


def test_marshal_hooks_on_values_and_pointers() -> None:
    hooks = Hooks(r0=RefHook(12), r1=RefHook(0), v0=ValHook(13), v1=ValHook(0))
    assert _roundtrip(hooks) == {"R0": "ref", "R1": "ref", "V0": "val", "V1": "val"}


def test_marshal_hook_result_is_marshaled_again() -> None:
    class Wrapper:
        def marshal_plist(self) -> object:
            return {"inner": [1, b"\x00"]}

    assert marshal_value(Wrapper()) == Dictionary(
        {"inner": Array((Number(1), Bytes(b"\x00")))}
    )


@pytest.mark.parametrize("value", [math.nan, -math.inf, math.inf, np.float32("nan")])
def test_unsupported_float_values(value: float) -> None:
    with pytest.raises(UnsupportedValueError):
        marshal(value, Format.XML)


def test_integers_outside_int64_are_unsupported() -> None:
    with pytest.raises(UnsupportedValueError) as exc:
        marshal_value(1 << 63)
    assert str(exc.value) == f"plistkit: unsupported value: {1 << 63}"
    with pytest.raises(UnsupportedValueError):
        marshal_value(np.uint64((1 << 64) - 1))
    assert marshal_value(np.uint32(7)) == Number(7)
    assert marshal_value(-(1 << 63)) == Number(-(1 << 63))


def test_none_texts() -> None:
    with pytest.raises(UnsupportedValueError) as exc:
        marshal_value(None)
    assert exc.value.text == "invalid value"
    with pytest.raises(UnsupportedValueError) as exc:
        marshal_value([1, None])
    assert exc.value.text == "nil interface"
    with pytest.raises(UnsupportedValueError) as exc:
        marshal_value(Pointers())
    assert exc.value.text == "nil pointer"


def test_omitted_nil_pointer_is_skipped() -> None:
    assert marshal_value(Pointers(required=3)) == Dictionary({"required": Number(3)})


def test_unsupported_types() -> None:
    with pytest.raises(UnsupportedTypeError) as exc:
        marshal_value({"ok": object()})
    assert str(exc.value) == "plistkit: unsupported type: object"
    with pytest.raises(UnsupportedTypeError):
        marshal_value({1: "one"})
    with pytest.raises(UnsupportedTypeError):
        marshal_value({"set": {1, 2}})


def test_scalar_mapping() -> None:
    moment = datetime(2021, 6, 1, 12, 30, 15, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert marshal_value(True) == Bool(True)
    assert marshal_value(np.bool_(False)) == Bool(False)
    assert marshal_value(np.int8(-3)) == Number(-3)
    assert marshal_value(2.5) == Number(2.5)
    assert marshal_value(bytearray(b"ab")) == Bytes(b"ab")
    assert marshal_value("bad \udc80 text") == String("bad \ufffd text")
    assert marshal_value(moment) == Timestamp(
        datetime(2021, 6, 1, 10, 30, 15, 123000, tzinfo=timezone.utc)
    )


def test_sequences_and_records() -> None:
    tree = Nested("root", [Nested("leaf")])
    assert marshal_value(tree) == Dictionary(
        {
            "name": String("root"),
            "children": Array(
                (Dictionary({"name": String("leaf"), "children": Array()}),)
            ),
        }
    )
    assert marshal_value((1, "two")) == Array((Number(1), String("two")))


def test_bool_is_not_a_number() -> None:
    assert marshal_value([True, 1]) == Array((Bool(True), Number(1)))
