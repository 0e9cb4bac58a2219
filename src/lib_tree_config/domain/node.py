"""Domain-level configuration tree.

Purpose
-------
Anchor :class:`ConfigNode`, the mutation-guarded, insertion-ordered tree that
carries configuration through the system. The module contains no I/O; parsing
and rendering live in the codecs and the composition root.

Contents
--------
* :class:`ConfigNode` – ``MutableMapping`` with item and attribute access,
  guarded writes, recursive merge, and flattening.
* :func:`_entries` – turn constructor/merge input into ``(key, value)`` pairs.
* :func:`_namespace` – build the ``SimpleNamespace`` view used by
  :meth:`ConfigNode.to_array_object`.

System Role
-----------
:class:`lib_tree_config.core.Config` subclasses :class:`ConfigNode` to add the
file-backed operations. Merge policies are delegated to
:mod:`lib_tree_config.application.merge`, which only sees plain data.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from types import SimpleNamespace
from typing import Any, Iterable

from ..application.merge import merge_preserve, merge_replace
from .errors import ChangesNotAllowed, InvalidFormat
from .values import ValueKind, kind_of, normalise_key, parse_index, to_plain

_MISSING = object()


class ConfigNode(MutableMapping):
    """Insertion-ordered configuration tree with controlled mutability.

    Why
    ----
    Applications want to read configuration with ``cfg.db.host`` or
    ``cfg["db"]["host"]`` while being protected from accidental runtime
    changes, yet still be able to opt into a writable tree for overrides.

    What
    ----
    Stores one ``dict`` of values. Nested mappings become child nodes of the
    same class and sequences become tuples, both carrying the parent's
    ``allow_changes`` flag. Item access, attribute access and the explicit
    ``get``/``set``/``has``/``unset`` methods all share that single store.

    Parameters
    ----------
    values:
        ``None``, a mapping (another node included), or a list/tuple whose
        positions become integer keys. Bare scalars are rejected.
    allow_changes:
        Fixed for the lifetime of the node and propagated to every child.

    Examples
    --------
    >>> cfg = ConfigNode({"db": {"host": "localhost"}, "tags": ["a", "b"]})
    >>> cfg.db.host, cfg["tags"]
    ('localhost', ('a', 'b'))
    >>> cfg.to_array()
    {'db': {'host': 'localhost'}, 'tags': ['a', 'b']}
    >>> cfg.set("db", {})
    Traceback (most recent call last):
    ...
    lib_tree_config.domain.errors.ChangesNotAllowed: Real-time configuration changes are not allowed.
    """

    def __init__(self, values: Mapping[Any, Any] | Iterable[Any] | None = None, allow_changes: bool = False) -> None:
        object.__setattr__(self, "_allow_changes", bool(allow_changes))
        object.__setattr__(self, "_values", {})
        self._populate(values)

    @property
    def changes_allowed(self) -> bool:
        """Return whether guarded writes are permitted on this tree."""

        return self._allow_changes

    # -- read access -----------------------------------------------------

    def get(self, name: Any, default: Any = None) -> Any:
        """Return the value stored under *name*, or *default* when absent."""

        return self._values.get(normalise_key(name), default)

    def has(self, name: Any) -> bool:
        return normalise_key(name) in self._values

    def count(self) -> int:
        """Return the number of top-level keys (children are not counted)."""

        return len(self._values)

    def lookup(self, dotted: str, default: Any = None) -> Any:
        """Resolve a dotted path through child nodes and sequences.

        Why
        ----
        Deeply nested settings are usually addressed as a single string in
        logs, CLIs and templates.

        What
        ----
        Splits *dotted* on ``.``; each segment selects a key of a node (keys
        are normalised like :meth:`set` does) or, when it is a plain decimal
        index, a position in a sequence.

        Examples
        --------
        >>> cfg = ConfigNode({"servers": [{"host": "a"}, {"host": "b"}]})
        >>> cfg.lookup("servers.1.host")
        'b'
        >>> cfg.lookup("servers.5.host", default="none")
        'none'
        """

        current: Any = self
        for part in dotted.split("."):
            current = _step(current, part)
            if current is _MISSING:
                return default
        return current

    def __getitem__(self, name: Any) -> Any:
        return self._values[normalise_key(name)]

    def __contains__(self, name: object) -> bool:
        return self.has(name)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    # -- guarded write access --------------------------------------------

    def set(self, name: Any, value: Any) -> None:
        """Store *value* under *name*, wrapping nested mappings and sequences.

        Raises
        ------
        ChangesNotAllowed
            When the node was built with ``allow_changes=False``; raised
            whether or not *name* already exists.
        """

        self._guard()
        self._values[normalise_key(name)] = self._wrap(value)

    def unset(self, name: Any) -> None:
        """Remove *name* if present; the order of the remaining keys is kept."""

        self._guard()
        self._values.pop(normalise_key(name), None)

    def __setitem__(self, name: Any, value: Any) -> None:
        self.set(name, value)

    def __delitem__(self, name: Any) -> None:
        self._guard()
        del self._values[normalise_key(name)]

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
        else:
            self.unset(name)

    # -- transforms ------------------------------------------------------

    def to_array(self) -> dict[Any, Any]:
        """Return a plain ``dict``/``list`` copy of the tree with insertion order kept.

        Examples
        --------
        >>> ConfigNode({"a": {"b": [1, {"c": None}]}}).to_array()
        {'a': {'b': [1, {'c': None}]}}
        """

        return {key: to_plain(value) for key, value in self._values.items()}

    def to_array_object(self, native: bool = False) -> Any:
        """Return an attribute-accessible copy of the tree.

        ``native=True`` builds nested :class:`types.SimpleNamespace` objects
        (keys become strings, sequences become lists). ``native=False`` builds
        a detached node of the same class with the same ``allow_changes`` flag.
        """

        if native:
            return _namespace(self.to_array())
        return type(self)(self.to_array(), allow_changes=self._allow_changes)

    def merge(self, other: Any, preserve: bool = False) -> ConfigNode:
        """Merge *other* into this node and return ``self``.

        Why
        ----
        Layer overrides, plugin fragments or environment-specific files on top
        of defaults.

        What
        ----
        * Raises :class:`ChangesNotAllowed` before touching anything when the
          node is read-only.
        * Flattens *other* (node, mapping, or sequence) with its keys normalised,
          then merges it with
          :func:`~lib_tree_config.application.merge.merge_replace` or, when
          *preserve* is true,
          :func:`~lib_tree_config.application.merge.merge_preserve`.
        * Rebuilds the contents from the merged result so that merged-in
          mappings become child nodes like constructor input does.

        Examples
        --------
        >>> cfg = ConfigNode({"a": 1, "db": {"host": "x"}}, allow_changes=True)
        >>> cfg.merge({"db": {"port": 5432}}).to_array()
        {'a': 1, 'db': {'host': 'x', 'port': 5432}}
        >>> cfg.merge({"a": 2}, preserve=True)["a"]
        (1, 2)
        """

        self._guard()
        incoming = ConfigNode(other).to_array()
        policy = merge_preserve if preserve else merge_replace
        merged = policy(self.to_array(), incoming)
        self._values.clear()
        self._populate(merged)
        return self

    # -- protocol helpers ------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return self.to_array() == to_plain(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_array()!r}, allow_changes={self._allow_changes})"

    # -- internals -------------------------------------------------------

    def _guard(self) -> None:
        if not self._allow_changes:
            raise ChangesNotAllowed()

    def _populate(self, values: Any) -> None:
        for key, value in _entries(values):
            self._values[normalise_key(key)] = self._wrap(value)

    def _wrap(self, value: Any) -> Any:
        """Convert *value* into its stored form (child node, tuple, or scalar)."""

        kind = kind_of(value)
        if kind is ValueKind.NODE:
            return type(self)(value, allow_changes=self._allow_changes)
        if kind is ValueKind.SEQUENCE:
            return tuple(self._wrap(item) for item in value)
        return value


def _entries(values: Any) -> Iterable[tuple[Any, Any]]:
    """Return ``(key, value)`` pairs for constructor or merge input."""

    if values is None:
        return ()
    kind = kind_of(values)
    if kind is ValueKind.NODE:
        return list(values.items())
    if kind is ValueKind.SEQUENCE:
        return list(enumerate(values))
    raise InvalidFormat(
        f"Unable to parse the config data: expected a mapping or sequence, got {type(values).__name__}"
    )


def _step(current: Any, part: str) -> Any:
    """Advance one dotted-path segment or return the missing sentinel."""

    kind = kind_of(current)
    if kind is ValueKind.NODE:
        return current.get(normalise_key(part), _MISSING)
    if kind is ValueKind.SEQUENCE:
        index = parse_index(part)
        if index is not None and index < len(current):
            return current[index]
    return _MISSING


def _namespace(value: Any) -> Any:
    kind = kind_of(value)
    if kind is ValueKind.NODE:
        return SimpleNamespace(**{str(key): _namespace(item) for key, item in value.items()})
    if kind is ValueKind.SEQUENCE:
        return [_namespace(item) for item in value]
    return value
