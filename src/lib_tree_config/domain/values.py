"""Value classification shared by the tree, the merge policies and the codecs.

Purpose
-------
Give every consumer one place that decides whether a value is a scalar, a
sequence, or a node. Flattening, merging and each encoder branch on the
returned :class:`ValueKind` instead of probing objects on their own.

Contents
--------
* :class:`ValueKind` – the three-way tag.
* :func:`kind_of` – classify a stored or plain value.
* :func:`to_plain` – recursively convert nodes, foreign mappings and tuples
  into ``dict``/``list``/scalar data.
* :func:`normalise_key` – coerce a key into ``str`` or a non-negative ``int``.
* :func:`parse_index` – read a canonical decimal index out of a string.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

_INDEX = re.compile(r"0|[1-9][0-9]*")


class ValueKind(Enum):
    """Tag describing how a configuration value is stored and serialised."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    NODE = "node"


def kind_of(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` of *value*.

    Any :class:`~collections.abc.Mapping` (including a ``ConfigNode``) is a
    node; lists and tuples are sequences; everything else, strings included,
    is a scalar.

    Examples
    --------
    >>> kind_of({"a": 1}).value, kind_of((1, 2)).value, kind_of("abc").value
    ('node', 'sequence', 'scalar')
    """

    if isinstance(value, Mapping):
        return ValueKind.NODE
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR


def to_plain(value: Any) -> Any:
    """Return *value* with every node turned into a ``dict`` and every sequence into a ``list``.

    Examples
    --------
    >>> to_plain({"a": ({"b": 1}, 2)})
    {'a': [{'b': 1}, 2]}
    """

    kind = kind_of(value)
    if kind is ValueKind.NODE:
        return {key: to_plain(item) for key, item in value.items()}
    if kind is ValueKind.SEQUENCE:
        return [to_plain(item) for item in value]
    return value


def normalise_key(key: Any) -> str | int:
    """Return *key* as a non-negative ``int`` or a ``str``.

    Non-negative integers and strings holding a canonical decimal index
    (``"0"``, ``"12"``, but not ``"012"`` or ``"-1"``) become ``int``, so a key
    reads back the same after a trip through a text format. Every other key is
    stringified.

    Examples
    --------
    >>> normalise_key("name"), normalise_key(3), normalise_key("3"), normalise_key("03")
    ('name', 3, 3, '03')
    >>> normalise_key(True), normalise_key(-1), normalise_key("²")
    ('True', '-1', '²')
    """

    if isinstance(key, str):
        index = parse_index(key)
        return key if index is None else index
    if isinstance(key, int) and not isinstance(key, bool) and key >= 0:
        return key
    return str(key)


def parse_index(text: str) -> int | None:
    """Return the index spelled by *text*, or ``None`` when it is not plain ASCII decimal.

    Examples
    --------
    >>> parse_index("7"), parse_index("07"), parse_index("-7"), parse_index("٣")
    (7, None, None, None)
    """

    if _INDEX.fullmatch(text):
        return int(text)
    return None


def is_index(key: Any) -> bool:
    """Return ``True`` when *key* is a positional (integer) key."""

    return isinstance(key, int) and not isinstance(key, bool)


def next_index(mapping: Mapping[Any, Any]) -> int:
    """Return one past the highest integer key in *mapping*, or ``0``.

    Examples
    --------
    >>> next_index({"a": 1, 0: "x", 4: "y"}), next_index({})
    (5, 0)
    """

    indices = [key for key in mapping if is_index(key)]
    return max(indices) + 1 if indices else 0
