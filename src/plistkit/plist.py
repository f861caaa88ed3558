"""Byte-level entry points: Python values to property list bytes and back."""

from __future__ import annotations

import logging

from plistkit.format_codec import Format, create_data, create_with_data
from plistkit.marshal import marshal_value
from plistkit.unmarshal import resolve_target, unmarshal_value

logger = logging.getLogger(__name__)


def marshal(value: object, fmt: Format, *, sort_keys: bool = True) -> bytes:
    """Return the property list encoding of ``value`` in ``fmt``.

    ``value`` is converted with :func:`plistkit.marshal.marshal_value` and the
    resulting tree is written by the format codec. Codec failures surface as
    :class:`plistkit.exceptions.CodecError`.
    """
    tree = marshal_value(value)
    return create_data(tree, fmt, sort_keys=sort_keys)


def unmarshal(data: bytes, target: object) -> Format:
    """Decode ``data`` into ``target`` and return the detected format.

    ``target`` must be a :class:`plistkit.Ref`, a dataclass instance, a list
    or a dict; anything else raises
    :class:`plistkit.exceptions.InvalidUnmarshalError` before ``data`` is
    read. When some values do not fit their targets, everything else is
    still stored and the first :class:`UnmarshalTypeError` is raised at the
    end.
    """
    resolve_target(target)
    tree, fmt = create_with_data(data)
    logger.debug("decoding %s into %s", fmt, type(target).__name__)
    unmarshal_value(tree, target)
    return fmt
