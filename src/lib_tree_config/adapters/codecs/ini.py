"""INI codec with section and ``key[]`` array support.

Purpose
-------
Read and write the classic INI dialect used by web application configs:
sectionless keys at the top, ``[section]`` blocks, and ``key[]`` /
``key[sub]`` entries for lists and mappings. :mod:`configparser` has no notion
of sectionless keys or array entries, hence the small line parser here.

Contents
--------
* :class:`INICodec` – decode/encode pair.
* :func:`_parse_value` / :func:`_format_value` – scalar typing rules.
* :func:`_listify` – turn contiguous ``0..n-1`` mappings back into lists.

Format Notes
------------
* Top-level scalars are written first (``key = value``); INI has no way to
  return to the sectionless area once a section has started.
* Inside section ``K`` a scalar entry is written ``K[sub] = value`` and a
  container entry ``sub`` is written ``sub[k] = value``. A container entry
  named like its own section, and anything nested deeper, is dropped and
  reported through ``ini_value_dropped`` debug events.
* Strings are double-quoted with ``\\"``, ``\\\\``, ``\\n`` and ``\\r``
  escaped; numbers are bare; booleans are ``true``/``false``; ``None`` is
  ``null``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterable

from ...domain.values import ValueKind, is_index, kind_of, next_index, normalise_key
from ...observability import log_event
from .structured import BaseCodec

_SECTION = re.compile(r"^\[(?P<name>[^\]]+)\]$")
_ENTRY = re.compile(r"^(?P<key>[^=\[\]]+?)\s*(?:\[(?P<sub>[^\]]*)\])?\s*=\s*(?P<value>.*)$")
_DOUBLE_QUOTED = re.compile(r'^"(?P<body>(?:[^"\\]|\\.)*)"')
_INT = re.compile(r"^[-+]?[0-9]+$")
_FLOAT = re.compile(r"^[-+]?(?:[0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)(?:[eE][-+]?[0-9]+)?$")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPE = re.compile(r"\\(.)")
_UNESCAPED = {"n": "\n", "r": "\r"}

_TRUE = frozenset({"true", "on", "yes"})
_FALSE = frozenset({"false", "off", "no"})
_NULL = frozenset({"null", "none"})


class INICodec(BaseCodec):
    """INI documents; lossy beyond the section/entry/sub-entry depth."""

    format = "ini"

    def decode(self, text: str, *, source: str = "<string>") -> Any:
        """Return the mapping described by INI *text*.

        Sections become nested mappings. Inside section ``S`` an ``S[x]``
        entry targets the section itself, which is how :meth:`encode` writes
        top-level containers.

        Examples
        --------
        >>> INICodec().decode('debug = true\\n[urls]\\nurls[git] = "https://git"\\nurls[svn] = "https://svn"')
        {'debug': True, 'urls': {'git': 'https://git', 'svn': 'https://svn'}}
        >>> INICodec().decode('[versions]\\nversions[] = 5.1\\nversions[] = 5.2')
        {'versions': [5.1, 5.2]}
        """

        root: dict[Any, Any] = {}
        section: str | None = None
        target = root
        for number, raw in enumerate(_LINE_BREAK.split(text), start=1):
            line = raw.strip()
            if not line or line[0] in ";#":
                continue
            match = _SECTION.match(line)
            if match:
                section = match["name"].strip()
                if not isinstance(root.get(section), dict):
                    root[section] = {}
                target = root[section]
                continue
            match = _ENTRY.match(line)
            if match is None:
                raise self._invalid(source, ValueError(f"line {number}: cannot parse {raw!r}"))
            key = match["key"].strip()
            value = self._value(match["value"], source=source, number=number)
            sub = match["sub"]
            if sub is None:
                target[key] = value
            elif key == section:
                _assign(target, sub, value)
            else:
                container = target.get(key)
                if not isinstance(container, dict):
                    container = target[key] = {}
                _assign(container, sub, value)
        return _listify(root)

    def encode(self, data: Any) -> str:
        """Return INI text for *data*.

        Examples
        --------
        >>> print(INICodec().encode({"one": 1, "animal": "BIRD", "urls": {"git": "https://git"}}), end="")
        one = 1
        animal = "BIRD"
        <BLANKLINE>
        [urls]
        urls[git] = "https://git"
        """

        scalars: list[str] = []
        sections: list[str] = []
        for key, value in _items(data):
            if kind_of(value) is ValueKind.SCALAR:
                scalars.append(f"{key} = {_format_value(value)}")
            else:
                sections.append(self._section(key, value))
        blocks = (["\n".join(scalars)] if scalars else []) + sections
        return "\n\n".join(blocks) + "\n" if blocks else ""

    def _section(self, name: Any, value: Any) -> str:
        lines = [f"[{name}]"]
        for sub, item in _items(value):
            if kind_of(item) is ValueKind.SCALAR:
                lines.append(f"{name}[{_subkey(sub)}] = {_format_value(item)}")
                continue
            # ``name[k]`` would read back as an entry of the section itself.
            if str(sub) == str(name):
                log_event("ini_value_dropped", self.format, None, key=f"{name}.{sub}")
                continue
            for inner, leaf in _items(item):
                if kind_of(leaf) is ValueKind.SCALAR:
                    lines.append(f"{sub}[{_subkey(inner)}] = {_format_value(leaf)}")
                else:
                    log_event("ini_value_dropped", self.format, None, key=f"{name}.{sub}.{inner}")
        return "\n".join(lines)

    def _value(self, raw: str, *, source: str, number: int) -> Any:
        try:
            return _parse_value(raw)
        except ValueError as exc:
            raise self._invalid(source, ValueError(f"line {number}: {exc}")) from exc


def _items(value: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return value.items()
    return enumerate(value)


def _subkey(key: Any) -> str:
    return "" if is_index(key) else str(key)


def _assign(container: dict[Any, Any], sub: str, value: Any) -> None:
    sub = sub.strip()
    if not sub:
        container[next_index(container)] = value
    else:
        container[normalise_key(sub)] = value


def _listify(value: Any) -> Any:
    """Recursively turn mappings keyed exactly ``0..n-1`` into lists."""

    if not isinstance(value, dict):
        return value
    converted = {key: _listify(item) for key, item in value.items()}
    if converted and list(converted) == list(range(len(converted))):
        return list(converted.values())
    return converted


def _parse_value(raw: str) -> Any:
    """Type an INI value: quoted text stays a string, bare words are coerced.

    Examples
    --------
    >>> _parse_value('"a \\\\"b\\\\""'), _parse_value("42"), _parse_value("off"), _parse_value("null")
    ('a "b"', 42, False, None)
    """

    raw = raw.strip()
    if raw.startswith('"'):
        match = _DOUBLE_QUOTED.match(raw)
        if match is None:
            raise ValueError(f"unterminated string {raw!r}")
        return _ESCAPE.sub(lambda escape: _UNESCAPED.get(escape[1], escape[1]), match["body"])
    if raw.startswith("'"):
        end = raw.find("'", 1)
        if end < 0:
            raise ValueError(f"unterminated string {raw!r}")
        return raw[1:end]
    raw = raw.split(";", 1)[0].strip()
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    if lowered in _NULL:
        return None
    if _INT.match(raw):
        return int(raw)
    if _FLOAT.match(raw):
        return float(raw)
    return raw


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return repr(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\r", "\\r")
    return f'"{escaped}"'
