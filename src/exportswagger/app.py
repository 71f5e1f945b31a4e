"""Typer application and CLI entry point for exportswagger.

Registers the built-in commands (``export``, ``resolve``, ``config``) on
the root Typer app. :func:`main` is the console-script entry point declared
in ``pyproject.toml``: it installs a SIGINT handler, invokes the app, maps
:class:`~exportswagger.exceptions.ExportSwaggerError` to its exit code and
writes a crash log for anything unexpected.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from exportswagger import __version__
from exportswagger.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="exportswagger",
    help="Export API Gateway specs after a deploy and publish them to S3.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"exportswagger {__version__}")
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
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show what would be uploaded without calling AWS."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~exportswagger.output.OutputManager` and
    stores shared flags in ``ctx.obj``. ``--verbose`` also turns on DEBUG
    logging for the ``exportswagger`` logger.
    """
    from exportswagger.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["dry_run"] = dry_run
    ctx.obj["verbose"] = verbose


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("exportswagger")
    if not verbose:
        logger.setLevel(logging.WARNING)
        return
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
        logger.addHandler(handler)


def register_commands() -> None:
    """Attach the built-in commands to :data:`app` (idempotent)."""
    from exportswagger.commands.config import config_app
    from exportswagger.commands.export import export_command, resolve_command

    if getattr(app, "_exportswagger_registered", False):
        return
    app.command("export")(export_command)
    app.command("resolve")(resolve_command)
    app.add_typer(config_app, name="config", help="Configuration management.")
    app._exportswagger_registered = True  # type: ignore[attr-defined]


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback under the data directory and return its path."""
    from exportswagger.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``exportswagger`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from exportswagger.exceptions import ExportSwaggerError
        from exportswagger.output import error

        if isinstance(exc, ExportSwaggerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
