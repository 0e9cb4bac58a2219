"""CLI adapter for ``lib_tree_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose loading, lookup and conversion of configuration files on the command
line so operators can inspect or translate a config without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling and the trace id.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_formats` – lists readable and writable format tokens.
* :func:`cli_show` – renders a file in another format on stdout.
* :func:`cli_get` – prints one value addressed by a dotted path.
* :func:`cli_convert` – merges files and writes the result to disk.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It only calls the composition root
(:mod:`lib_tree_config.core`); ``lib_cli_exit_tools`` centralises the exit code
strategy so all commands behave consistently across shells and CI.
"""

from __future__ import annotations

import json
from functools import partial
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import create_from_data, supported_formats
from .domain.values import ValueKind, kind_of, to_plain
from .observability import TRACE_ID, bind_trace_id

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_MISSING: Final = object()


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when metadata is missing."""

    try:
        return metadata.version("lib_tree_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Load, inspect and convert hierarchical configuration files",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_tree_config",
    message="lib_tree_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "--trace-id",
    default=None,
    help="Trace identifier attached to every structured log event",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, trace_id: Optional[str]) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color`` and binds the
        trace identifier for the duration of the invocation.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    ctx.call_on_close(partial(TRACE_ID.reset, bind_trace_id(trace_id)))


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_tree_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_tree_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_tree_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("formats", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_formats() -> None:
    """Print the readable and writable format tokens as JSON.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["formats"])
    >>> json.loads(result.output)["write"]
    ['ini', 'json', 'php', 'xml', 'yaml']
    """

    click.echo(json.dumps(supported_formats(), indent=2))


@cli.command("show", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--format",
    "fmt",
    default="json",
    show_default=True,
    help="Output format (php, json, yaml, ini, xml)",
)
def cli_show(source: Path, fmt: str) -> None:
    """Load SOURCE and print it rendered in the requested format.

    Unknown or missing files load as an empty configuration, mirroring
    :func:`lib_tree_config.core.parse_data`.
    """

    config = create_from_data(source)
    click.echo(config.render(fmt), nl=False)


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source", type=click.Path(path_type=Path, dir_okay=False))
@click.argument("key")
def cli_get(source: Path, key: str) -> None:
    """Print the value stored at dotted KEY in SOURCE.

    Strings are printed verbatim, everything else as JSON. Exits with status 1
    when the key is absent.
    """

    value = create_from_data(source).lookup(key, default=_MISSING)
    if value is _MISSING:
        click.echo(f"Key not found: {key}", err=True)
        raise SystemExit(1)
    click.echo(_format_value(value))


@cli.command("convert", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source", type=click.Path(path_type=Path, exists=True, dir_okay=False, readable=True))
@click.argument("destination", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--merge",
    "extras",
    multiple=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Additional file merged over SOURCE (repeatable, applied in order)",
)
@click.option(
    "--preserve/--replace",
    default=False,
    show_default=True,
    help="Keep both values on conflicts instead of letting later files win",
)
def cli_convert(source: Path, destination: Path, extras: Sequence[Path], preserve: bool) -> None:
    """Load SOURCE, merge any --merge files, and write DESTINATION.

    The output format follows the suffix of DESTINATION. The written path is
    echoed on success.
    """

    config = create_from_data(source, allow_changes=True)
    for extra in extras:
        config.merge_from_data(extra, preserve=preserve)
    written = config.write_to_file(destination)
    click.echo(str(written))


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if kind_of(value) is ValueKind.SCALAR:
        return json.dumps(value)
    return json.dumps(to_plain(value), indent=2, ensure_ascii=False)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_tree_config",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color
