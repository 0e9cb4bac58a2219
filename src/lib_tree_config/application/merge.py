"""Application-layer merge policies.

Purpose
-------
Combine two plain configuration trees under one of two conflict policies. The
functions are free of I/O and never touch ``ConfigNode`` instances: callers
flatten first and re-wrap the result afterwards.

Contents
    - ``merge_replace``: incoming values win; mappings merge recursively.
    - ``merge_preserve``: nothing is lost; collisions turn into sequences and
      positional keys are appended.
    - ``_combine`` / ``_indexed`` / ``_as_list``: helpers
      that narrate how a collision is resolved under ``merge_preserve``.

System Role
-----------
Called by :meth:`lib_tree_config.domain.node.ConfigNode.merge`, which guards
mutation and rebuilds child nodes from the merged result.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

from ..domain.values import ValueKind, is_index, kind_of, next_index


def merge_replace(base: Mapping[Any, Any], incoming: Mapping[Any, Any]) -> dict[Any, Any]:
    """Merge *incoming* into a copy of *base*; incoming values win on conflict.

    Why
    ----
    Layering an override file over defaults must only touch the keys the
    override names while keeping sibling keys of nested sections.

    What
    ----
    Two mappings under the same key are merged recursively. Any other
    collision (scalar, sequence, or mixed kinds) is resolved by taking the
    incoming value whole, so sequences are replaced rather than concatenated.
    Existing keys keep their position; new keys are appended.

    Side Effects
    ------------
    None; both inputs are left untouched.

    Examples
    --------
    >>> merge_replace({"db": {"host": "a", "port": 1}, "tags": [1]}, {"db": {"host": "b"}, "tags": [2]})
    {'db': {'host': 'b', 'port': 1}, 'tags': [2]}
    """

    result = deepcopy(dict(base))
    for key, value in incoming.items():
        current = result.get(key)
        if kind_of(current) is ValueKind.NODE and kind_of(value) is ValueKind.NODE:
            result[key] = merge_replace(current, value)
        else:
            result[key] = deepcopy(value)
    return result


def merge_preserve(base: Mapping[Any, Any], incoming: Mapping[Any, Any]) -> dict[Any, Any]:
    """Merge *incoming* into a copy of *base* without losing any value.

    Why
    ----
    Some sources (plugin lists, route tables) are meant to accumulate rather
    than override.

    What
    ----
    * Integer keys of *incoming* are appended under the next free index.
    * String keys present on both sides are combined: two mappings recurse,
      two sequences concatenate, two scalars become ``[left, right]``, a scalar
      next to a sequence joins it, and a mapping next to anything else absorbs
      the other side as positional entries.
    * Keys only present on one side are copied as-is.

    Examples
    --------
    >>> merge_preserve({"a": 1}, {"a": 2})
    {'a': [1, 2]}
    >>> merge_preserve({"list": [1, 2]}, {"list": [3]})
    {'list': [1, 2, 3]}
    >>> merge_preserve({0: "x"}, {0: "y"})
    {0: 'x', 1: 'y'}
    """

    result = deepcopy(dict(base))
    for key, value in incoming.items():
        value = deepcopy(value)
        if is_index(key):
            result[next_index(result)] = value
        elif key in result:
            result[key] = _combine(result[key], value)
        else:
            result[key] = value
    return result


def _combine(left: Any, right: Any) -> Any:
    """Resolve a string-key collision under :func:`merge_preserve`."""

    left_kind = kind_of(left)
    right_kind = kind_of(right)
    if left_kind is ValueKind.NODE and right_kind is ValueKind.NODE:
        return merge_preserve(left, right)
    if left_kind is ValueKind.NODE:
        return merge_preserve(left, _indexed(right))
    if right_kind is ValueKind.NODE:
        return merge_preserve(_indexed(left), right)
    return _as_list(left) + _as_list(right)


def _indexed(value: Any) -> dict[int, Any]:
    """Promote a scalar or sequence into a mapping with positional keys."""

    return dict(enumerate(_as_list(value)))


def _as_list(value: Any) -> list[Any]:
    if kind_of(value) is ValueKind.SEQUENCE:
        return list(value)
    return [value]
