from __future__ import annotations

import base64
import json
from typing import Mapping

from plistkit.json_types import JSONValue
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


def value_to_json(value: Value) -> JSONValue:
    """Render a Value tree with JSON carriers.

    Bytes become base64 text and timestamps ISO-8601 text, so the rendering is
    for display only and does not round-trip.
    """
    if isinstance(value, Dictionary):
        return {
            key: value_to_json(value.entries[key])
            for key in sorted(value.entries)
        }
    if isinstance(value, Array):
        return [value_to_json(item) for item in value.items]
    if isinstance(value, Bytes):
        return base64.b64encode(value.value).decode("ascii")
    if isinstance(value, Timestamp):
        return value.value.isoformat(timespec="milliseconds")
    if isinstance(value, (Bool, Number, String)):
        return value.value
    raise TypeError(f"value_to_json does not support {type(value).__name__}")


def dump_json_pretty(payload: object) -> str:
    return json.dumps(canonicalize_json(payload), indent=2, sort_keys=False)


def canonicalize_json(value: object) -> object:
    if isinstance(value, Mapping):
        return {
            str(key): canonicalize_json(value[key])
            for key in sorted(value, key=str)
        }
    if isinstance(value, list):
        return [canonicalize_json(item) for item in value]
    return value
