from __future__ import annotations

import plistlib
from datetime import datetime, timedelta, timezone

import pytest

from plistkit.exceptions import UnexpectedKeyKindError, UnknownLeafKindError
from plistkit.scalar_codec import (
    box,
    repair_bytes,
    repair_string,
    truncate_timestamp,
    unbox,
)
from plistkit.value_model import (
    Array,
    Bool,
    Bytes,
    Dictionary,
    Number,
    String,
    Timestamp,
)


def test_repair_string_replaces_lone_surrogates() -> None:
    assert repair_string("a\ud800b") == "a\ufffdb"
    assert repair_string("clean \U0001f600") == "clean \U0001f600"


def test_repair_bytes_replaces_invalid_utf8() -> None:
    assert repair_bytes(b"a\xffb") == "a\ufffdb"
    assert repair_bytes("ok".encode()) == "ok"


def test_truncate_timestamp() -> None:
    naive = datetime(2000, 5, 6, 7, 8, 9, 999999)
    assert truncate_timestamp(naive) == datetime(2000, 5, 6, 7, 8, 9, 999000, tzinfo=timezone.utc)
    shifted = datetime(2000, 5, 6, 7, 8, 9, 1500, tzinfo=timezone(timedelta(hours=-5)))
    result = truncate_timestamp(shifted)
    assert result.tzinfo is timezone.utc
    assert result == datetime(2000, 5, 6, 12, 8, 9, 1000, tzinfo=timezone.utc)


def test_unbox_maps_plistlib_objects() -> None:
    moment = datetime(2010, 1, 1, 0, 0, 0, 123456)
    assert unbox(
        {"b": True, "n": 3, "f": 0.5, "s": "x", "d": b"\x00", "t": moment, "a": [1]}
    ) == Dictionary(
        {
            "b": Bool(True),
            "n": Number(3),
            "f": Number(0.5),
            "s": String("x"),
            "d": Bytes(b"\x00"),
            "t": Timestamp(datetime(2010, 1, 1, 0, 0, 0, 123000, tzinfo=timezone.utc)),
            "a": Array((Number(1),)),
        }
    )


def test_unbox_bool_before_number() -> None:
    assert unbox(False) == Bool(False)
    assert unbox(0) == Number(0)


def test_unbox_rejects_unknown_leaves() -> None:
    with pytest.raises(UnknownLeafKindError):
        unbox(plistlib.UID(1))
    with pytest.raises(UnknownLeafKindError):
        unbox([None])


def test_unbox_rejects_non_string_keys() -> None:
    with pytest.raises(UnexpectedKeyKindError) as exc:
        unbox({1: "one"})
    assert exc.value.key == 1


def test_box_produces_naive_utc_datetimes() -> None:
    moment = datetime(2010, 1, 1, 5, 0, tzinfo=timezone(timedelta(hours=5)))
    assert box(Timestamp(moment)) == datetime(2010, 1, 1, 0, 0)
    assert box(Array((String("a\ud800"), Bool(True)))) == ["a\ufffd", True]


def test_box_rejects_foreign_objects() -> None:
    with pytest.raises(UnknownLeafKindError):
        box(Array((object(),)))
