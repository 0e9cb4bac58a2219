"""Application-layer ports describing codec responsibilities.

Purpose
-------
Define the structural contract every format adapter satisfies so the
composition root can dispatch by file suffix without knowing concrete codecs.

Contents
--------
* :class:`Codec` – decode text into plain data, encode plain data into text,
  and load a file from disk.

System Role
-----------
The protocol enforces Dependency Inversion: :mod:`lib_tree_config.core` holds
a registry of ``Codec`` instances and never imports parser libraries itself.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Codec(Protocol):
    """Translate one external format to and from plain nested data.

    Why
    ----
    Segregate parsing and emitting concerns (JSON/YAML/INI/XML/PHP literal)
    from tree and dispatch logic.

    Attributes
    ----------
    format:
        Canonical format token (``"json"``, ``"yaml"``, ...).
    writable:
        ``False`` for read-only formats; the composition root then refuses to
        render them.
    """

    format: str
    writable: bool

    def decode(self, text: str, *, source: str = "<string>") -> Any:
        """Parse *text* into a mapping or sequence or raise ``InvalidFormat``."""

    def encode(self, data: Any) -> str:
        """Render plain nested *data* as text."""

    def load(self, path: str) -> Any:
        """Read *path* and decode it; raise ``NotFound`` when it cannot be read."""
