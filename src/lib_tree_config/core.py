"""Composition root for ``lib_tree_config``.

Purpose
-------
Provide the single place that wires codecs to the configuration tree: format
detection by file suffix, permissive parsing, strict rendering, and the public
:class:`Config` type that adds file-backed operations to
:class:`~lib_tree_config.domain.node.ConfigNode`.

Contents
--------
* :data:`_CODECS` – codec instances keyed by canonical format token.
* :data:`_SUFFIX_FORMATS` – file suffixes mapped to format tokens.
* :class:`Config` – ``ConfigNode`` plus ``create_from_data``,
  ``merge_from_data``, ``render``, ``to_*`` and ``write_to_file``.
* :func:`parse_data` / :func:`render_data` / :func:`write_data` – the loader
  and writer used by :class:`Config` and the CLI.
* :func:`create_from_data` / :func:`supported_formats` – convenience helpers.

System Role
-----------
Reading is permissive: unknown suffixes and missing files produce an empty
configuration. Writing is strict: a format without an encoder raises
:class:`~lib_tree_config.domain.errors.UnsupportedFormat`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Union

from .adapters.codecs.ini import INICodec
from .adapters.codecs.literal import PHPLiteralCodec
from .adapters.codecs.markup import XMLCodec
from .adapters.codecs.structured import JSONCodec, TOMLCodec, YAMLCodec
from .application.ports import Codec
from .domain.errors import ConfigError, InvalidFormat, NotFound, UnsupportedFormat
from .domain.node import ConfigNode
from .domain.values import ValueKind, kind_of, to_plain
from .observability import log_event

Source = Union[str, "os.PathLike[str]"]

# Codec instances keyed by canonical format token. Codecs are stateless, so a
# single shared instance per format is enough.
_CODECS: dict[str, Codec] = {
    "php": PHPLiteralCodec(),
    "json": JSONCodec(),
    "yaml": YAMLCodec(),
    "toml": TOMLCodec(),
    "ini": INICodec(),
    "xml": XMLCodec(),
}

_SUFFIX_FORMATS = {
    ".php": "php",
    ".phtml": "php",
    ".php3": "php",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".ini": "ini",
    ".xml": "xml",
}


class Config(ConfigNode):
    """Configuration tree with file-backed loading, merging and rendering.

    Why
    ----
    Applications usually start from a file and end with a file; this type
    keeps those steps next to the tree while the tree logic itself stays in
    the I/O-free domain layer.

    Examples
    --------
    >>> cfg = Config({"foo": "bar", "db": {"port": 5432}})
    >>> cfg.foo, cfg.db.port, cfg.count()
    ('bar', 5432, 2)
    >>> print(cfg.to_ini(), end="")
    foo = "bar"
    <BLANKLINE>
    [db]
    db[port] = 5432
    """

    @classmethod
    def create_from_data(cls, source: Source, allow_changes: bool = False) -> Config:
        """Parse *source* with :func:`parse_data` and build a root node.

        Unknown suffixes and missing files yield an empty configuration.
        """

        return cls(parse_data(source), allow_changes=allow_changes)

    def merge_from_data(self, source: Source, preserve: bool = False) -> Config:
        """Parse *source* and merge it into this node.

        The mutation guard runs before the file is touched, so a read-only
        node fails fast without any I/O.
        """

        self._guard()
        self.merge(parse_data(source), preserve=preserve)
        log_event("config_merged", None, os.fspath(source), preserve=preserve)
        return self

    def render(self, fmt: str) -> str:
        """Return the tree rendered as *fmt* (see :func:`render_data`)."""

        return render_data(self.to_array(), fmt)

    def to_php(self) -> str:
        return self.render("php")

    def to_json(self) -> str:
        return self.render("json")

    def to_yaml(self) -> str:
        return self.render("yaml")

    def to_ini(self) -> str:
        return self.render("ini")

    def to_xml(self) -> str:
        return self.render("xml")

    def write_to_file(self, path: Source) -> Path:
        """Render the tree in the format implied by *path*'s suffix and write it."""

        return write_data(self.to_array(), path)


def parse_data(source: Source) -> Any:
    """Return the plain data stored in *source*, dispatching on its suffix.

    Why
    ----
    Callers should be able to point at any configuration file and get data
    back without caring about the format.

    What
    ----
    * ``.php``/``.phtml``/``.php3`` → PHP literal, ``.json`` → JSON,
      ``.yaml``/``.yml`` → YAML, ``.toml`` → TOML, ``.ini`` → INI,
      ``.xml`` → XML (suffix match is case-insensitive).
    * Any other suffix, a missing file, or an unreadable file → ``{}``.

    Raises
    ------
    InvalidFormat
        When the suffix is recognised but the content cannot be parsed.

    Examples
    --------
    >>> parse_data("settings.unknown")
    {}
    >>> parse_data("/definitely/missing/config.json")
    {}
    """

    path = os.fspath(source)
    fmt = _SUFFIX_FORMATS.get(Path(path).suffix.lower())
    if fmt is None:
        log_event("config_source_skipped", None, path, reason="unknown_format")
        return {}
    try:
        return _CODECS[fmt].load(path)
    except NotFound as exc:
        log_event("config_source_skipped", fmt, path, reason=str(exc))
        return {}


def render_data(data: Any, fmt: str) -> str:
    """Render plain or node *data* as *fmt*.

    *fmt* is a format token or suffix; case and a leading dot are ignored and
    ``yml``/``phtml``/``php3`` are accepted as aliases.

    Raises
    ------
    UnsupportedFormat
        When *fmt* names no writable codec; the exception carries the token.

    Examples
    --------
    >>> render_data({"a": 1}, ".JSON")
    '{\\n    "a": 1\\n}\\n'
    >>> render_data({"a": 1}, "bad-ext")
    Traceback (most recent call last):
    ...
    lib_tree_config.domain.errors.UnsupportedFormat: Unsupported configuration format: 'bad-ext'
    """

    token = normalise_format(fmt)
    codec = _CODECS.get(token)
    if codec is None or not codec.writable:
        raise UnsupportedFormat(token)
    text = codec.encode(_plain_root(data))
    log_event("config_rendered", token, None, size=len(text))
    return text


def write_data(data: Any, path: Source) -> Path:
    """Render *data* in the format implied by *path* and write it as UTF-8.

    The format check happens before the file is opened, so an unsupported
    suffix never leaves an empty file behind.
    """

    target = Path(path)
    text = render_data(data, target.suffix)
    target.write_text(text, encoding="utf-8")
    log_event("config_written", normalise_format(target.suffix), str(target), level=logging.INFO, size=len(text))
    return target


def create_from_data(source: Source, allow_changes: bool = False) -> Config:
    """Module-level shortcut for :meth:`Config.create_from_data`."""

    return Config.create_from_data(source, allow_changes=allow_changes)


def normalise_format(fmt: str) -> str:
    """Return the canonical token for *fmt*.

    Examples
    --------
    >>> normalise_format(".YML"), normalise_format("phtml"), normalise_format("Bad-Ext")
    ('yaml', 'php', 'bad-ext')
    """

    token = fmt.strip().lower().lstrip(".")
    return _SUFFIX_FORMATS.get(f".{token}", token)


def supported_formats() -> dict[str, list[str]]:
    """Return the readable and writable format tokens.

    Examples
    --------
    >>> supported_formats()["write"]
    ['ini', 'json', 'php', 'xml', 'yaml']
    """

    return {
        "read": sorted(_CODECS),
        "write": sorted(token for token, codec in _CODECS.items() if codec.writable),
    }


def _plain_root(data: Any) -> dict[Any, Any]:
    """Flatten *data* into the top-level ``dict`` every encoder expects."""

    kind = kind_of(data)
    if kind is ValueKind.SEQUENCE:
        return dict(enumerate(to_plain(data)))
    if kind is ValueKind.NODE:
        return to_plain(data)
    raise InvalidFormat(f"Unable to render the config data: expected a mapping or sequence, got {type(data).__name__}")


__all__ = [
    "Config",
    "ConfigError",
    "ConfigNode",
    "InvalidFormat",
    "UnsupportedFormat",
    "create_from_data",
    "normalise_format",
    "parse_data",
    "render_data",
    "supported_formats",
    "write_data",
]
