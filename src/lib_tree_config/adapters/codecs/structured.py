"""Structured configuration codecs backed by established parsers.

Purpose
-------
Convert between on-disk artifacts and the plain nested data the tree
understands. Adapters are small wrappers around ``json``, ``yaml.safe_load``
and ``tomllib`` so error handling and observability live in one place.

Contents
--------
* :class:`BaseCodec` – shared helpers for reading files and validating parser
  output; also implements :meth:`BaseCodec.load`.
* :class:`JSONCodec` – pretty-printed JSON.
* :class:`YAMLCodec` – PyYAML safe loader/dumper.
* :class:`TOMLCodec` – read-only TOML.

System Role
-----------
Registered in :data:`lib_tree_config.core._CODECS`. The INI, XML and
PHP-literal codecs in sibling modules build on :class:`BaseCodec` too.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[assignment]

import yaml

from ...domain.errors import InvalidFormat, NotFound, UnsupportedFormat
from ...domain.values import normalise_key
from ...observability import log_event


class BaseCodec:
    """Common utilities shared by every codec."""

    format: str = ""
    writable: bool = True

    def load(self, path: str) -> Any:
        """Read *path* and return its decoded content.

        Why
        ----
        Every format reads the same way: bytes from disk, UTF-8 text (a BOM is
        tolerated), then the format-specific :meth:`decode`.

        Raises
        ------
        NotFound
            When the file is missing or cannot be read.
        InvalidFormat
            When the bytes are not UTF-8 or the parser rejects the content.
        """

        payload = self._read(path)
        try:
            text = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise self._invalid(path, exc) from exc
        data = self.decode(text, source=path)
        log_event("config_file_loaded", self.format, path)
        return data

    def decode(self, text: str, *, source: str = "<string>") -> Any:  # pragma: no cover - abstract
        raise NotImplementedError

    def encode(self, data: Any) -> str:  # pragma: no cover - abstract
        raise NotImplementedError

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing or unreadable.

        Side Effects
        ------------
        Emits ``config_file_read`` debug events.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b'{"key": "value"}')
        >>> tmp.close()
        >>> BaseCodec()._read(tmp.name)[:3]
        b'{"k'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        try:
            payload = file_path.read_bytes()
        except OSError as exc:
            raise NotFound(f"Configuration file not readable: {path}: {exc}") from exc
        log_event("config_file_read", self.format or None, path, size=len(payload))
        return payload

    def _invalid(self, source: str, exc: Exception) -> InvalidFormat:
        """Log a parser failure and return the :class:`InvalidFormat` to raise."""

        log_event("config_file_invalid", self.format, source, level=logging.ERROR, error=str(exc))
        return InvalidFormat(f"Invalid {self.format.upper()} in {source}: {exc}")

    @staticmethod
    def _ensure_container(data: object, *, source: str) -> Any:
        """Ensure *data* is a mapping or a list, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseCodec._ensure_container({"key": 1}, source="demo")
        {'key': 1}
        >>> BaseCodec._ensure_container(42, source="demo")
        Traceback (most recent call last):
        ...
        lib_tree_config.domain.errors.InvalidFormat: Unable to parse the config data in demo
        """

        if not isinstance(data, (Mapping, list)):
            raise InvalidFormat(f"Unable to parse the config data in {source}")
        return data


class JSONCodec(BaseCodec):
    """JSON documents, written with four-space indentation and insertion order."""

    format = "json"

    def decode(self, text: str, *, source: str = "<string>") -> Any:
        """Return the mapping or list encoded by *text*.

        Object keys spelling a decimal index come back as ``int``, undoing the
        stringification :meth:`encode` applies to integer keys.

        Examples
        --------
        >>> JSONCodec().decode('{"enabled": true}')
        {'enabled': True}
        >>> JSONCodec().decode('{"0": "a", "1": "b", "01": "c"}')
        {0: 'a', 1: 'b', '01': 'c'}
        """

        try:
            data = json.loads(text, object_pairs_hook=_indexed_object)
        except json.JSONDecodeError as exc:
            raise self._invalid(source, exc) from exc
        return self._ensure_container(data, source=source)

    def encode(self, data: Any) -> str:
        """Return human-readable JSON terminated by a newline.

        Examples
        --------
        >>> print(JSONCodec().encode({"foo": "bar"}), end="")
        {
            "foo": "bar"
        }
        """

        return json.dumps(data, indent=4, ensure_ascii=False) + "\n"


class YAMLCodec(BaseCodec):
    """YAML documents via PyYAML's safe loader and dumper."""

    format = "yaml"

    def decode(self, text: str, *, source: str = "<string>") -> Any:
        """Return the decoded document; an empty document yields ``{}``."""

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise self._invalid(source, exc) from exc
        if data is None:
            data = {}
        return self._ensure_container(data, source=source)

    def encode(self, data: Any) -> str:
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


class TOMLCodec(BaseCodec):
    """Read-only TOML documents using the standard library parser."""

    format = "toml"
    writable = False

    def decode(self, text: str, *, source: str = "<string>") -> Any:
        """Return mapping extracted from TOML *text*.

        Examples
        --------
        >>> TOMLCodec().decode('[db]\\nport = 5432')
        {'db': {'port': 5432}}
        """

        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:  # type: ignore[attr-defined]
            raise self._invalid(source, exc) from exc
        return self._ensure_container(data, source=source)

    def encode(self, data: Any) -> str:
        raise UnsupportedFormat(self.format)


def _indexed_object(pairs: list[tuple[str, Any]]) -> dict[Any, Any]:
    return {normalise_key(key): value for key, value in pairs}
