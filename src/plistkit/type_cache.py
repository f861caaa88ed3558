"""Per-type field layout for dataclass records.

Descriptors are computed on first use and cached for the life of the process.
Reads take no lock; a miss takes the cache lock and re-checks before building,
so two threads missing the same type build it once.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import typing
import unicodedata
from dataclasses import dataclass
from typing import Any, Mapping

from plistkit.exceptions import FieldNameCollisionError

logger = logging.getLogger(__name__)

TAG_KEY = "plist"
EMBEDDED_KEY = "plist_embedded"

_TAG_PUNCTUATION = frozenset("!#$%&()*+-./:<=>?@[]^_{|}~")


@dataclass(frozen=True)
class FieldDescriptor:
    index: int
    name: str
    key: str
    tag_name: str
    hint: Any
    omit_empty: bool
    exported: bool


@dataclass(frozen=True)
class TypeDescriptor:
    type: type
    # exported fields, in declaration order, as they are written
    fields: tuple[FieldDescriptor, ...]
    # every field a dictionary key may resolve to, unexported ones included
    candidates: tuple[FieldDescriptor, ...]
    hints: Mapping[str, Any]

    def match(self, key: str) -> FieldDescriptor | None:
        """Resolve a dictionary key to a field.

        An exact match on a tag-declared name wins outright, then an exact
        match on a declared field name, then the first case-insensitive match
        on a declared field name.
        """
        exact: FieldDescriptor | None = None
        folded: FieldDescriptor | None = None
        lowered = key.casefold()
        for candidate in self.candidates:
            if candidate.tag_name and candidate.tag_name == key:
                return candidate
            if candidate.name == key:
                exact = candidate
            elif folded is None and candidate.name.casefold() == lowered:
                folded = candidate
        return exact if exact is not None else folded


_CACHE: dict[type, TypeDescriptor] = {}
_CACHE_LOCK = threading.Lock()


def parse_tag(tag: str) -> tuple[str, frozenset[str]]:
    name, _, options = tag.partition(",")
    return name, frozenset(option for option in options.split(",") if option)


def is_valid_name(name: str) -> bool:
    if not name:
        return False
    for char in name:
        if char in _TAG_PUNCTUATION:
            continue
        category = unicodedata.category(char)
        if not (category.startswith("L") or category == "Nd"):
            return False
    return True


def describe(tp: type) -> TypeDescriptor:
    descriptor = _CACHE.get(tp)
    if descriptor is not None:
        return descriptor
    with _CACHE_LOCK:
        descriptor = _CACHE.get(tp)
        if descriptor is None:
            descriptor = _build_descriptor(tp)
            _CACHE[tp] = descriptor
            logger.debug(
                "described %s: %d exported fields",
                tp.__qualname__,
                len(descriptor.fields),
            )
    return descriptor


def _build_descriptor(tp: type) -> TypeDescriptor:
    hints = typing.get_type_hints(tp, include_extras=True)
    fields: list[FieldDescriptor] = []
    candidates: list[FieldDescriptor] = []
    for index, field in enumerate(dataclasses.fields(tp)):
        if field.metadata.get(EMBEDDED_KEY):
            continue
        tag = str(field.metadata.get(TAG_KEY, ""))
        if tag == "-":
            continue
        tag_name, options = parse_tag(tag)
        if not is_valid_name(tag_name):
            tag_name = ""
        descriptor = FieldDescriptor(
            index=index,
            name=field.name,
            key=tag_name or field.name,
            tag_name=tag_name,
            hint=hints[field.name],
            omit_empty="omitempty" in options,
            exported=not field.name.startswith("_"),
        )
        candidates.append(descriptor)
        if descriptor.exported:
            fields.append(descriptor)
    _check_collisions(tp, fields)
    return TypeDescriptor(
        type=tp,
        fields=tuple(fields),
        candidates=tuple(candidates),
        hints=hints,
    )


def _check_collisions(tp: type, fields: list[FieldDescriptor]) -> None:
    seen: dict[str, str] = {}
    for field in fields:
        previous = seen.get(field.key)
        if previous is not None:
            raise FieldNameCollisionError(tp, field.key, (previous, field.name))
        seen[field.key] = field.name
