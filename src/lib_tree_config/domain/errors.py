"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the tree, the codecs, the
composition root, and consuming applications. The hierarchy lives in the
domain layer so inner code never imports from adapters.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration issues.
* :class:`ChangesNotAllowed` – a guarded write hit a read-only tree.
* :class:`UnsupportedFormat` – rendering was requested for a format without an
  encoder.
* :class:`InvalidFormat` – a recognised source could not be parsed into a
  mapping or sequence.
* :class:`NotFound` – a source file is missing or unreadable.

System Role
-----------
Callers catch :class:`ConfigError` to handle all library failures uniformly.
:class:`NotFound` never escapes :func:`lib_tree_config.core.parse_data`; it is
turned into an empty result there.
"""

from __future__ import annotations

CHANGES_NOT_ALLOWED_MESSAGE = "Real-time configuration changes are not allowed."


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_tree_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ChangesNotAllowed(ConfigError):
    """Raised by every guarded write on a node built with ``allow_changes=False``.

    The check runs before any side effect, so a rejected ``set``, ``unset`` or
    ``merge`` leaves the tree untouched.

    Examples
    --------
    >>> str(ChangesNotAllowed())
    'Real-time configuration changes are not allowed.'
    """

    def __init__(self, message: str = CHANGES_NOT_ALLOWED_MESSAGE) -> None:
        super().__init__(message)


class UnsupportedFormat(ConfigError):
    """Raised when a format token has no matching encoder.

    Attributes
    ----------
    format:
        The offending token exactly as it was normalised (lower case, without a
        leading dot).

    Examples
    --------
    >>> exc = UnsupportedFormat("bad-ext")
    >>> exc.format
    'bad-ext'
    >>> str(exc)
    "Unsupported configuration format: 'bad-ext'"
    """

    def __init__(self, fmt: str) -> None:
        self.format = fmt
        super().__init__(f"Unsupported configuration format: {fmt!r}")


class InvalidFormat(ConfigError):
    """Raised when input cannot be parsed into structured configuration data.

    Typical Sources
    ---------------
    Codecs (:mod:`json`, :mod:`yaml`, the INI/XML/PHP-literal parsers) and the
    :class:`~lib_tree_config.domain.node.ConfigNode` constructor when handed a
    bare scalar.
    """


class NotFound(ConfigError):
    """Represents a missing or unreadable source file.

    Reading is permissive: the composition root treats this as an empty
    configuration rather than a failure.
    """
