"""Conversion between Value trees and the boxed objects plistlib reads and writes.

The boxed form is the plain object graph of ``plistlib``: ``bool``, ``int``,
``float``, ``str``, ``bytes``, naive UTC ``datetime``, ``list`` and ``dict``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from plistkit.exceptions import UnexpectedKeyKindError, UnknownLeafKindError
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

_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def repair_string(text: str) -> str:
    """Replace lone surrogates, the ``str`` form of invalid UTF-8, with U+FFFD."""
    return _SURROGATE_RE.sub("\ufffd", text)


def repair_bytes(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def truncate_timestamp(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def box(value: Value) -> object:
    if isinstance(value, Bool):
        return bool(value.value)
    if isinstance(value, Number):
        return value.value
    if isinstance(value, String):
        return repair_string(value.value)
    if isinstance(value, Bytes):
        return bytes(value.value)
    if isinstance(value, Timestamp):
        return truncate_timestamp(value.value).replace(tzinfo=None)
    if isinstance(value, Array):
        return [box(item) for item in value.items]
    if isinstance(value, Dictionary):
        return {repair_string(key): box(item) for key, item in value.entries.items()}
    raise UnknownLeafKindError(value)


def unbox(obj: object) -> Value:
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, (int, float)):
        return Number(obj)
    if isinstance(obj, str):
        return String(repair_string(obj))
    if isinstance(obj, (bytes, bytearray)):
        return Bytes(bytes(obj))
    if isinstance(obj, datetime):
        return Timestamp(truncate_timestamp(obj))
    if isinstance(obj, (list, tuple)):
        return Array(tuple(unbox(item) for item in obj))
    if isinstance(obj, dict):
        entries: dict[str, Value] = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise UnexpectedKeyKindError(key)
            entries[repair_string(key)] = unbox(item)
        return Dictionary(entries)
    raise UnknownLeafKindError(obj)
