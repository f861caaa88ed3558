"""Serialization of Value trees to and from property list bytes."""

from __future__ import annotations

import logging
import plistlib
from enum import Enum
from xml.parsers.expat import ExpatError

from plistkit import openstep
from plistkit.exceptions import CodecError
from plistkit.scalar_codec import box, repair_bytes, unbox
from plistkit.value_model import Value

logger = logging.getLogger(__name__)

ERROR_DOMAIN = "NSCocoaErrorDomain"
READ_CORRUPT_ERROR = 3840
WRITE_INVALID_ERROR = 3851

_BINARY_MAGIC = b"bplist"
_XML_MARKERS = (b"<?xml", b"<plist", b"<!DOCTYPE")
_UTF16_BOMS = (b"\xff\xfe", b"\xfe\xff")


class Format(Enum):
    OPENSTEP = 1
    XML = 100
    BINARY = 200

    def __str__(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def parse(cls, name: str) -> Format:
        key = name.strip().lower()
        for fmt, aliases in _ALIASES.items():
            if key in aliases:
                return fmt
        raise ValueError(f"unknown property list format {name!r}")


_DESCRIPTIONS = {
    Format.OPENSTEP: "OpenStep format",
    Format.XML: "XML format version 1.0",
    Format.BINARY: "Binary format version 1.0",
}
_ALIASES = {
    Format.OPENSTEP: {"openstep", "ascii", "text", "legacy"},
    Format.XML: {"xml", "xml1"},
    Format.BINARY: {"binary", "binary1", "bplist"},
}


def detect_format(data: bytes) -> Format:
    if data.startswith(_BINARY_MAGIC):
        return Format.BINARY
    head = data[:256].lstrip(b"\xef\xbb\xbf").lstrip()
    if head.startswith(_XML_MARKERS):
        return Format.XML
    return Format.OPENSTEP


def create_data(value: Value, fmt: Format, *, sort_keys: bool = True) -> bytes:
    boxed = box(value)
    try:
        if fmt is Format.XML:
            return plistlib.dumps(boxed, fmt=plistlib.FMT_XML, sort_keys=sort_keys)
        if fmt is Format.BINARY:
            return plistlib.dumps(boxed, fmt=plistlib.FMT_BINARY, sort_keys=sort_keys)
        if fmt is Format.OPENSTEP:
            return openstep.dumps(boxed, sort_keys=sort_keys).encode("utf-8")
    except (TypeError, ValueError, OverflowError) as exc:
        raise CodecError(
            ERROR_DOMAIN,
            WRITE_INVALID_ERROR,
            f"Property list invalid for format: {fmt} ({exc})",
            user_info={"format": fmt.name, "reason": str(exc)},
        ) from exc
    raise CodecError(
        ERROR_DOMAIN,
        WRITE_INVALID_ERROR,
        f"Property list format {fmt!r} is not supported for writing",
        user_info={"format": str(fmt)},
    )


def create_with_data(data: bytes) -> tuple[Value, Format]:
    if not data.strip():
        raise CodecError(
            ERROR_DOMAIN,
            READ_CORRUPT_ERROR,
            "Cannot parse a NULL or zero-length data",
        )
    fmt = detect_format(data)
    logger.debug("detected %s for %d bytes", fmt, len(data))
    try:
        if fmt is Format.BINARY:
            boxed = plistlib.loads(data, fmt=plistlib.FMT_BINARY)
        elif fmt is Format.XML:
            boxed = plistlib.loads(data, fmt=plistlib.FMT_XML)
        else:
            boxed = openstep.loads(_decode_text(data))
    except openstep.OpenStepError as exc:
        raise CodecError(
            ERROR_DOMAIN,
            READ_CORRUPT_ERROR,
            f"The data couldn't be read because it isn't in the correct format. ({exc})",
            user_info={"format": fmt.name, "offset": exc.position},
        ) from exc
    except (
        plistlib.InvalidFileException,
        ExpatError,
        ValueError,
        TypeError,
        AttributeError,
        OverflowError,
        RecursionError,
    ) as exc:
        raise CodecError(
            ERROR_DOMAIN,
            READ_CORRUPT_ERROR,
            f"The data couldn't be read because it isn't in the correct format. ({exc})",
            user_info={"format": fmt.name},
        ) from exc
    try:
        value = unbox(boxed)
    except RecursionError as exc:
        raise CodecError(
            ERROR_DOMAIN,
            READ_CORRUPT_ERROR,
            "The data couldn't be read because it is nested too deeply.",
            user_info={"format": fmt.name},
        ) from exc
    return value, fmt


def _decode_text(data: bytes) -> str:
    if data.startswith(_UTF16_BOMS):
        return data.decode("utf-16")
    return repair_bytes(data)
