"""Reader and writer for the legacy OpenStep (ASCII) property list format.

Only strings, data, arrays and dictionaries exist in this format. ``loads``
also accepts the "strings file" form, a bare sequence of ``key = value;``
pairs with no enclosing braces.
"""

from __future__ import annotations

import re
from typing import Mapping, Sequence

_UNQUOTED_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_$+/:.-"
)
_UNQUOTED_RE = re.compile(r"[A-Za-z0-9_$+/:.-]+\Z")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    '"': '"',
    "'": "'",
    "\\": "\\",
    "\n": "\n",
}
_WRITE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}


class OpenStepError(ValueError):
    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at offset {position}")
        self.position = position


class OpenStepWriteError(TypeError):
    pass


class _Reader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def skip_space(self) -> None:
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    raise OpenStepError("unterminated comment", self.pos)
                self.pos = end + 2
            else:
                return

    def peek(self) -> str:
        self.skip_space()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise OpenStepError(f"expected {char!r}", self.pos)
        self.pos += 1

    def at_end(self) -> bool:
        return self.peek() == ""

    def read_object(self) -> object:
        char = self.peek()
        if char == "{":
            self.pos += 1
            return self.read_pairs("}")
        if char == "(":
            self.pos += 1
            return self.read_array()
        if char == "<":
            self.pos += 1
            return self.read_data()
        if char in {'"', "'"}:
            return self.read_quoted(char)
        if char and char in _UNQUOTED_CHARS:
            return self.read_unquoted()
        if not char:
            raise OpenStepError("unexpected end of input", self.pos)
        raise OpenStepError(f"unexpected character {char!r}", self.pos)

    def read_pairs(self, closer: str) -> dict[str, object]:
        result: dict[str, object] = {}
        while True:
            char = self.peek()
            if char == closer:
                self.pos += 1
                return result
            if not char:
                if closer:
                    raise OpenStepError("unterminated dictionary", self.pos)
                return result
            key_pos = self.pos
            key = self.read_object()
            if not isinstance(key, str):
                raise OpenStepError("dictionary key is not a string", key_pos)
            if self.peek() == ";":
                # strings-file shorthand: "key"; means "key" = "key";
                self.pos += 1
                result[key] = key
                continue
            self.expect("=")
            result[key] = self.read_object()
            self.expect(";")

    def read_array(self) -> list[object]:
        result: list[object] = []
        while True:
            if self.peek() == ")":
                self.pos += 1
                return result
            result.append(self.read_object())
            char = self.peek()
            if char == ",":
                self.pos += 1
            elif char != ")":
                raise OpenStepError("expected ',' or ')'", self.pos)

    def read_data(self) -> bytes:
        digits: list[str] = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise OpenStepError("unterminated data", self.pos)
            char = text[self.pos]
            self.pos += 1
            if char == ">":
                break
            if char.isspace():
                continue
            if char not in _HEX_DIGITS:
                raise OpenStepError(f"invalid data digit {char!r}", self.pos - 1)
            digits.append(char)
        if len(digits) % 2:
            raise OpenStepError("odd number of data digits", self.pos - 1)
        return bytes.fromhex("".join(digits))

    def read_unquoted(self) -> str:
        start = self.pos
        text = self.text
        while self.pos < len(text) and text[self.pos] in _UNQUOTED_CHARS:
            self.pos += 1
        return text[start : self.pos]

    def read_quoted(self, quote: str) -> str:
        text = self.text
        self.pos += 1
        parts: list[str] = []
        while True:
            if self.pos >= len(text):
                raise OpenStepError("unterminated string", self.pos)
            char = text[self.pos]
            self.pos += 1
            if char == quote:
                return "".join(parts)
            if char != "\\":
                parts.append(char)
                continue
            if self.pos >= len(text):
                raise OpenStepError("unterminated escape", self.pos)
            escaped = text[self.pos]
            self.pos += 1
            if escaped in _ESCAPES:
                parts.append(_ESCAPES[escaped])
            elif escaped in "01234567":
                digits = text[self.pos - 1 : self.pos + 2]
                octal = len(digits) - len(digits.lstrip("01234567"))
                parts.append(chr(int(digits[:octal], 8)))
                self.pos += octal - 1
            elif escaped in "Uu":
                digits = text[self.pos : self.pos + 4]
                if len(digits) != 4 or not set(digits) <= _HEX_DIGITS:
                    raise OpenStepError("invalid unicode escape", self.pos)
                parts.append(chr(int(digits, 16)))
                self.pos += 4
            else:
                parts.append(escaped)


def loads(text: str) -> object:
    reader = _Reader(text.lstrip("\ufeff"))
    if reader.at_end():
        # an empty strings file is an empty dictionary
        return {}
    start = reader.pos
    value = reader.read_object()
    if isinstance(value, str) and reader.peek() in {"=", ";"}:
        reader.pos = start
        return reader.read_pairs("")
    if not reader.at_end():
        raise OpenStepError("junk after property list", reader.pos)
    return value


def dumps(obj: object, *, sort_keys: bool = True) -> str:
    parts: list[str] = []
    _write(obj, parts, 0, sort_keys)
    parts.append("\n")
    return "".join(parts)


def _quote(text: str) -> str:
    if _UNQUOTED_RE.match(text):
        return text
    escaped = "".join(_WRITE_ESCAPES.get(char, char) for char in text)
    return f'"{escaped}"'


def _write(obj: object, parts: list[str], depth: int, sort_keys: bool) -> None:
    indent = "\t" * (depth + 1)
    if isinstance(obj, str):
        parts.append(_quote(obj))
    elif isinstance(obj, (bytes, bytearray)):
        hex_text = bytes(obj).hex()
        words = [hex_text[i : i + 8] for i in range(0, len(hex_text), 8)]
        parts.append("<" + " ".join(words) + ">")
    elif isinstance(obj, Mapping):
        keys = sorted(obj) if sort_keys else list(obj)
        if not keys:
            parts.append("{}")
            return
        parts.append("{\n")
        for key in keys:
            if not isinstance(key, str):
                raise OpenStepWriteError(f"dictionary key {key!r} is not a string")
            parts.append(f"{indent}{_quote(key)} = ")
            _write(obj[key], parts, depth + 1, sort_keys)
            parts.append(";\n")
        parts.append("\t" * depth + "}")
    elif isinstance(obj, Sequence):
        if not obj:
            parts.append("()")
            return
        parts.append("(\n")
        for index, item in enumerate(obj):
            parts.append(indent)
            _write(item, parts, depth + 1, sort_keys)
            parts.append(",\n" if index < len(obj) - 1 else "\n")
        parts.append("\t" * depth + ")")
    else:
        raise OpenStepWriteError(
            f"{type(obj).__name__} values cannot be written in OpenStep format"
        )
