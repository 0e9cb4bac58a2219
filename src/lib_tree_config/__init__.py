"""Public package surface for ``lib_tree_config``.

Exposes the :class:`Config` tree, the loader/writer helpers from
:mod:`lib_tree_config.core`, the error taxonomy, and the observability hooks
so applications can ``import lib_tree_config`` and reach everything they need.
"""

from __future__ import annotations

from .core import (
    Config,
    create_from_data,
    normalise_format,
    parse_data,
    render_data,
    supported_formats,
    write_data,
)
from .domain.errors import ChangesNotAllowed, ConfigError, InvalidFormat, NotFound, UnsupportedFormat
from .domain.node import ConfigNode
from .domain.values import ValueKind, kind_of
from .observability import bind_trace_id, get_logger

__all__ = [
    "ChangesNotAllowed",
    "Config",
    "ConfigError",
    "ConfigNode",
    "InvalidFormat",
    "NotFound",
    "UnsupportedFormat",
    "ValueKind",
    "bind_trace_id",
    "create_from_data",
    "get_logger",
    "kind_of",
    "normalise_format",
    "parse_data",
    "render_data",
    "supported_formats",
    "write_data",
]
