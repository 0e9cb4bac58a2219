"""``python -m lib_tree_config`` entry point; delegates to :func:`lib_tree_config.cli.main`."""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())
