"""plistkit package root."""

from plistkit.exceptions import (
    CodecError,
    FieldNameCollisionError,
    InvalidUnmarshalError,
    PlistError,
    UnexpectedKeyKindError,
    UnknownLeafKindError,
    UnmarshalFieldError,
    UnmarshalTypeError,
    UnsupportedTypeError,
    UnsupportedValueError,
)
from plistkit.format_codec import Format
from plistkit.marshal import Marshaler, marshal_value
from plistkit.plist import marshal, unmarshal
from plistkit.unmarshal import Ref, Unmarshaler, unmarshal_value

__all__ = [
    "__version__",
    "CodecError",
    "FieldNameCollisionError",
    "Format",
    "InvalidUnmarshalError",
    "Marshaler",
    "PlistError",
    "Ref",
    "UnexpectedKeyKindError",
    "UnknownLeafKindError",
    "UnmarshalFieldError",
    "UnmarshalTypeError",
    "Unmarshaler",
    "UnsupportedTypeError",
    "UnsupportedValueError",
    "marshal",
    "marshal_value",
    "unmarshal",
    "unmarshal_value",
]

__version__ = "0.1.0"
