"""PHP-literal codec: ``<?php return [...];`` files without code execution.

Purpose
-------
Support the "config as code" files many PHP applications ship
(``config.php`` returning an array) while refusing to run anything. The
decoder is a restricted parser that accepts only literal expressions:
``[...]`` / ``array(...)`` with optional ``key => value`` pairs, single and
double quoted strings, integers (decimal or hex), floats, ``true``, ``false``,
``null``, ``INF``, ``NAN`` and comments. Variables, constants, function calls
and string interpolation raise :class:`~lib_tree_config.domain.errors.InvalidFormat`.

Contents
--------
* :class:`PHPLiteralCodec` – decode/encode pair.
* :class:`_Parser` – recursive-descent parser over :func:`_tokenize` output.
* :func:`_render` – short-array pretty printer used by ``encode``.

Decoding Notes
--------------
Arrays whose keys end up exactly ``0..n-1`` become lists, other arrays become
mappings. Numeric-string keys are cast to integers and keyless entries take
the next free index, as PHP does. An empty array decodes to ``{}``.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterator

from ...domain.values import ValueKind, is_index, kind_of, next_index
from .structured import BaseCodec

_TOKEN = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<comment>//[^\n]*|\#[^\n]*|/\*.*?\*/)
    | (?P<open_tag><\?php\b)
    | (?P<close_tag>\?>)
    | (?P<single>'(?:[^'\\]|\\.)*')
    | (?P<double>"(?:[^"\\]|\\.)*")
    | (?P<number>-INF|[-+]?(?:0[xX][0-9a-fA-F]+|[0-9]+\.[0-9]*(?:[eE][-+]?[0-9]+)?|\.[0-9]+(?:[eE][-+]?[0-9]+)?|[0-9]+[eE][-+]?[0-9]+|[0-9]+))
    | (?P<arrow>=>)
    | (?P<word>[A-Za-z_]\w*)
    | (?P<punct>[\[\](),;])
    """,
    re.VERBOSE | re.DOTALL,
)

_DOUBLE_ESCAPE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|x[0-9a-fA-F]{1,2}|[0-7]{1,3}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "v": "\v", "e": "\x1b", "f": "\f", "\\": "\\", "$": "$", '"': '"'}
_INTERPOLATION = re.compile(r"(?<!\\)(?:\\\\)*\$[A-Za-z_{]")
_NUMERIC_KEY = re.compile(r"^(?:0|-?[1-9][0-9]*)$")
_INDENT = "    "


class PHPLiteralCodec(BaseCodec):
    """PHP files that ``return`` a literal array."""

    format = "php"

    def decode(self, text: str, *, source: str = "<string>") -> Any:
        """Return the array literal returned by *text*.

        Examples
        --------
        >>> PHPLiteralCodec().decode("<?php return ['foo' => 'bar', 'list' => array(1, 2.5, true, null)];")
        {'foo': 'bar', 'list': [1, 2.5, True, None]}
        """

        try:
            data = _Parser(list(_tokenize(text))).document()
        except ValueError as exc:
            raise self._invalid(source, exc) from exc
        return self._ensure_container(data, source=source)

    def encode(self, data: Any) -> str:
        """Return a ``<?php return [...];`` file for *data*.

        Examples
        --------
        >>> print(PHPLiteralCodec().encode({"foo": "bar", "list": [1, None]}), end="")
        <?php
        <BLANKLINE>
        return [
            'foo' => 'bar',
            'list' => [
                1,
                null,
            ],
        ];
        """

        return f"<?php\n\nreturn {_render(data, 0)};\n"


def _tokenize(text: str) -> Iterator[tuple[str, str]]:
    position = 0
    while position < len(text):
        match = _TOKEN.match(text, position)
        if match is None:
            raise ValueError(f"unexpected character {text[position]!r} at offset {position}")
        position = match.end()
        kind = match.lastgroup or ""
        if kind not in ("ws", "comment"):
            yield kind, match.group()


class _Parser:
    """Recursive-descent parser for ``return <literal>;`` documents."""

    def __init__(self, tokens: list[tuple[str, str]]) -> None:
        self._tokens = tokens
        self._position = 0

    def document(self) -> Any:
        self._accept("open_tag")
        kind, text = self._next()
        if kind != "word" or text.lower() != "return":
            raise ValueError(f"expected 'return', found {text!r}")
        value = self._expression()
        self._accept("punct", ";")
        self._accept("close_tag")
        if self._position < len(self._tokens):
            raise ValueError(f"unexpected {self._tokens[self._position][1]!r} after the returned value")
        return value

    def _expression(self) -> Any:
        kind, text = self._next()
        if kind == "punct" and text == "[":
            return self._array("]")
        if kind == "word":
            return self._word(text)
        if kind == "single":
            return re.sub(r"\\([\\'])", r"\1", text[1:-1])
        if kind == "double":
            return _unescape_double(text[1:-1])
        if kind == "number":
            return _number(text)
        raise ValueError(f"unexpected {text!r}")

    def _word(self, text: str) -> Any:
        lowered = text.lower()
        if lowered == "array":
            self._expect("punct", "(")
            return self._array(")")
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        if lowered == "null":
            return None
        if text == "INF":
            return math.inf
        if text == "NAN":
            return math.nan
        raise ValueError(f"only literal values are allowed, found {text!r}")

    def _array(self, closing: str) -> Any:
        entries: list[tuple[Any, Any]] = []
        while not self._accept("punct", closing):
            first = self._expression()
            if self._accept("arrow"):
                entries.append((_array_key(first), self._expression()))
            else:
                entries.append((None, first))
            if not self._accept("punct", ","):
                self._expect("punct", closing)
                break
        return _assemble(entries)

    def _next(self) -> tuple[str, str]:
        if self._position >= len(self._tokens):
            raise ValueError("unexpected end of input")
        token = self._tokens[self._position]
        self._position += 1
        return token

    def _accept(self, kind: str, text: str | None = None) -> bool:
        if self._position < len(self._tokens):
            current_kind, current_text = self._tokens[self._position]
            if current_kind == kind and (text is None or current_text == text):
                self._position += 1
                return True
        return False

    def _expect(self, kind: str, text: str) -> None:
        if not self._accept(kind, text):
            found = self._tokens[self._position][1] if self._position < len(self._tokens) else "end of input"
            raise ValueError(f"expected {text!r}, found {found!r}")


def _array_key(key: Any) -> Any:
    """Apply PHP's array key casts."""

    if isinstance(key, bool):
        return int(key)
    if isinstance(key, float):
        if not math.isfinite(key):
            raise ValueError(f"{key!r} cannot be used as an array key")
        return int(key)
    if key is None:
        return ""
    if isinstance(key, str) and _NUMERIC_KEY.match(key):
        return int(key)
    if isinstance(key, (str, int)):
        return key
    raise ValueError("arrays cannot be used as array keys")


def _assemble(entries: list[tuple[Any, Any]]) -> Any:
    result: dict[Any, Any] = {}
    for key, value in entries:
        result[next_index(result) if key is None else key] = value
    if result and list(result) == list(range(len(result))):
        return list(result.values())
    return result


def _number(text: str) -> int | float:
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("+-")
    if digits == "INF":
        return sign * math.inf
    if digits[:2].lower() == "0x":
        return sign * int(digits, 16)
    if any(char in digits for char in ".eE"):
        return sign * float(digits)
    return sign * int(digits)


def _unescape_double(body: str) -> str:
    if _INTERPOLATION.search(body):
        raise ValueError("variable interpolation is not allowed in double-quoted strings")
    return _DOUBLE_ESCAPE.sub(_replace_escape, body)


def _replace_escape(match: re.Match[str]) -> str:
    sequence = match.group(1)
    if sequence in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[sequence]
    if sequence.startswith("u{"):
        return chr(int(sequence[2:-1], 16))
    if sequence.startswith("x") and len(sequence) > 1:
        return chr(int(sequence[1:], 16))
    if sequence[0] in "01234567":
        return chr(int(sequence, 8) & 0xFF)
    return match.group(0)


def _render(value: Any, depth: int) -> str:
    kind = kind_of(value)
    if kind is ValueKind.SCALAR:
        return _scalar(value)
    if not value:
        return "[]"
    pad = _INDENT * (depth + 1)
    if kind is ValueKind.NODE:
        lines = [f"{pad}{_scalar(key)} => {_render(item, depth + 1)}," for key, item in value.items()]
    else:
        lines = [f"{pad}{_render(item, depth + 1)}," for item in value]
    return "[\n" + "\n".join(lines) + "\n" + _INDENT * depth + "]"


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if is_index(value):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        return repr(value)
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"
