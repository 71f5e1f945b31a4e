"""Config commands -- view the effective configuration.

Provides the ``exportswagger config`` sub-command group. Settings come
from the project file, ``EXPORTSWAGGER_*`` environment variables and
flags; see :func:`~exportswagger.config.resolve_config` for precedence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from exportswagger.exceptions import ExportSwaggerError
from exportswagger.output import error, format_response, info


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Project file (default: ./serverless.yml)."
    ),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Deployment stage."),
) -> None:
    """Show the configuration an export would use.

    Prints the project file that was loaded (if any) to stderr, followed
    by the merged settings and the object keys that would be written.

    Example::

        exportswagger config show
        exportswagger --json config show --stage prod
    """
    from exportswagger.config import resolve_config

    try:
        settings = resolve_config(Path(config) if config else None, stage=stage)
    except ExportSwaggerError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Project file: {settings.source or '(none)'}")
    data = settings.model_dump(mode="json", by_alias=True, exclude={"source"})
    target = settings.publish_target()
    data["destinations"]["exports"] = [str(r) for r in settings.destinations.exports]
    data["keys"] = [target.key_for(r) for r in settings.destinations.exports]
    format_response(data)
