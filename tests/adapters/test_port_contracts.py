"""Adapter contract tests for the codec port.

Purpose
-------
Verify every registered codec satisfies the application-layer ``Codec``
protocol defined in ``src/lib_tree_config/application/ports.py`` so the
composition root can keep dispatching by suffix alone.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_tree_config import core
from lib_tree_config.application import ports
from lib_tree_config.domain.errors import NotFound


@pytest.mark.parametrize("token", sorted(core._CODECS))
def test_registered_codecs_fulfil_protocol(token: str) -> None:
    """Each codec must be a ``Codec`` and advertise the token it is registered under."""

    codec = core._CODECS[token]
    assert isinstance(codec, ports.Codec)
    assert codec.format == token


@pytest.mark.parametrize("token", sorted(core._CODECS))
def test_codecs_signal_missing_files_with_not_found(token: str, tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        core._CODECS[token].load(str(tmp_path / f"missing.{token}"))


@pytest.mark.parametrize("token", sorted(token for token, codec in core._CODECS.items() if codec.writable))
def test_writable_codecs_reload_their_own_output(token: str, tmp_path: Path) -> None:
    """Shallow string data must survive encode → file → load for every writable format."""

    codec = core._CODECS[token]
    data = {"name": "demo", "db": {"host": "localhost", "user": "root"}}
    path = tmp_path / f"config.{token}"
    path.write_text(codec.encode(data), encoding="utf-8")
    assert codec.load(str(path)) == data
