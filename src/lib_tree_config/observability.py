"""Structured lifecycle events for configuration I/O.

Purpose
    Every read, decode, merge, render and write reports one named event with
    the same shape, so a host application can route or filter them without
    parsing message text. The library itself stays silent until a handler is
    attached.

Contents
    - ``TRACE_ID``: context variable holding the active trace identifier.
    - ``get_logger``: the ``lib_tree_config`` logger (``NullHandler`` attached).
    - ``bind_trace_id``: set or clear the trace identifier; returns the reset
      token.
    - ``log_event``: emit one event with ``format``/``path`` plus details.

Event Shape
    ``record.getMessage()`` is the event name (``config_file_read``,
    ``config_written``, ...). ``record.context`` holds ``trace_id``,
    ``format``, ``path`` and any detail fields.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from typing import Any, Final

TRACE_ID: ContextVar[str | None] = ContextVar("lib_tree_config_trace_id", default=None)
"""Trace identifier copied into every event emitted in the current context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_tree_config")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger so applications can attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> Token[str | None]:
    """Bind *trace_id* (``None`` clears it) and return the token for ``TRACE_ID.reset``.

    Examples
    --------
    >>> token = bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> TRACE_ID.reset(token)
    >>> TRACE_ID.get() is None
    True
    """

    return TRACE_ID.set(trace_id)


def log_event(
    event: str,
    fmt: str | None,
    path: str | None,
    *,
    level: int = logging.DEBUG,
    **details: Any,
) -> None:
    """Emit *event* for format *fmt* and source/target *path*.

    Detail fields are added after ``format`` and ``path``; the trace id always
    comes first. Nothing is formatted when *level* is disabled.
    """

    if not _LOGGER.isEnabledFor(level):
        return
    context: dict[str, Any] = {"trace_id": TRACE_ID.get(), "format": fmt, "path": path}
    context.update(details)
    _LOGGER.log(level, event, extra={"context": context})
