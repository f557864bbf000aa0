"""Typer application and CLI entry point for specdesk.

:func:`main` is the console-script entry point declared in
``pyproject.toml``.  It installs a Ctrl-C handler and runs the Typer app;
:class:`~specdesk.exceptions.SpecdeskError` exits with its exit code and any
other exception leaves a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specdesk import __version__
from specdesk.commands.catalog import (
    apps_command,
    info_command,
    list_command,
    run_command,
    show_command,
    snippet_command,
    tags_command,
)
from specdesk.commands.config import config_app
from specdesk.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="specdesk",
    help="Browse an OpenAPI document, generate request snippets and call its operations.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("info")(info_command)
app.command("apps")(apps_command)
app.command("tags")(tags_command)
app.command("list")(list_command)
app.command("show")(show_command)
app.command("snippet")(snippet_command)
app.command("run")(run_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"specdesk {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    document: Optional[str] = typer.Option(
        None, "--document", "-d", help="API document URL, file path, or '-' for stdin."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write data output to this file."
    ),
) -> None:
    """Initialise output and shared options before every command."""
    from specdesk.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["document"] = document
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from specdesk.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return str(log_path)


def main() -> None:
    """Entry point for the ``specdesk`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specdesk.exceptions import SpecdeskError
        from specdesk.output import get_output

        output = get_output()
        if isinstance(exc, SpecdeskError):
            output.error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        output.error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
