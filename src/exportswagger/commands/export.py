"""Export commands -- run the pipeline or inspect what it would do.

Provides ``exportswagger export`` (fires the ``after:deploy:deploy``
lifecycle hook) and ``exportswagger resolve`` (looks up the REST API id
only). Both resolve the configuration from the project file, environment
and flags via :func:`~exportswagger.config.resolve_config`.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from exportswagger.aws import client_for
from exportswagger.exceptions import ExportSwaggerError
from exportswagger.exit_codes import EXIT_RESOLUTION_FAILURE
from exportswagger.output import debug, error, format_response, info, print_table, warning


def _fail(exc: ExportSwaggerError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def export_command(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Project file (default: ./serverless.yml)."
    ),
    service: Optional[str] = typer.Option(None, "--service", help="Service name."),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Deployment stage."),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region."),
    aws_profile: Optional[str] = typer.Option(
        None, "--aws-profile", help="Named AWS profile."
    ),
    bucket: Optional[str] = typer.Option(None, "--bucket", help="Destination S3 bucket."),
    key: Optional[str] = typer.Option(None, "--key", help="Object key prefix."),
    acl: Optional[str] = typer.Option(
        None, "--acl", help="Canned ACL to apply, e.g. public-read."
    ),
    exports: Optional[List[str]] = typer.Option(
        None,
        "--export",
        "-e",
        help="FORMAT:ENCODING to publish (repeatable), e.g. oas30:yaml.",
    ),
    lazy_resolution: bool = typer.Option(
        False,
        "--lazy-resolution",
        help="Continue with an empty API id when the stack output is missing.",
    ),
) -> None:
    """Export the deployed API's specs and upload them to S3.

    Runs the ``after:deploy:deploy`` hook: resolves the REST API id from
    the ``<service>-<stage>`` stack, exports each requested format and
    uploads it as ``<key>-<format>.<encoding>``. With the global
    ``--dry-run`` flag only the planned object keys are printed.

    Example::

        exportswagger export --stage prod
        exportswagger export --bucket docs --key orders-api --acl public-read
        exportswagger --dry-run export -e swagger:json -e oas30:yaml
    """
    from exportswagger.config import resolve_config
    from exportswagger.lifecycle import AFTER_DEPLOY, ExportSwagger
    from exportswagger.pipeline import ExportPipeline

    obj = ctx.obj or {}
    try:
        settings = resolve_config(
            Path(config) if config else None,
            service=service,
            stage=stage,
            region=region,
            aws_profile=aws_profile,
            bucket=bucket,
            key=key,
            acl=acl,
            exports=exports,
            strict_resolution=False if lazy_resolution else None,
        )
        if settings.source:
            debug(f"Loaded {settings.source}")

        target = settings.publish_target()
        if obj.get("dry_run"):
            keys = ExportPipeline().plan(target, settings.destinations.exports)
            info(f"Dry run: would upload {len(keys)} file(s) to s3://{target.bucket}")
            format_response(keys)
            return

        plugin = ExportSwagger(settings, client_factory=client_for)
        result = plugin.trigger(AFTER_DEPLOY)
    except ExportSwaggerError as exc:
        raise _fail(exc) from None

    rows = [
        [
            artifact.request.format.value,
            artifact.request.encoding.value,
            artifact.uri,
            artifact.access_policy.value if artifact.access_policy else "-",
        ]
        for artifact in result.artifacts
    ]
    print_table(
        ["Format", "Encoding", "Location", "ACL"],
        rows,
        title=f"API {result.api_id} -- {len(rows)} artifact(s)",
    )


def resolve_command(
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Project file (default: ./serverless.yml)."
    ),
    service: Optional[str] = typer.Option(None, "--service", help="Service name."),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Deployment stage."),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region."),
    aws_profile: Optional[str] = typer.Option(
        None, "--aws-profile", help="Named AWS profile."
    ),
) -> None:
    """Print the REST API id behind the deployed stack.

    Exits with code 4 when the stack or its ``ServiceEndpoint`` output is
    missing.

    Example::

        exportswagger --json resolve --stage prod
    """
    from exportswagger.aws import create_session, require_credentials
    from exportswagger.config import resolve_config
    from exportswagger.exceptions import ConfigurationError
    from exportswagger.pipeline import StackResolver

    try:
        settings = resolve_config(
            Path(config) if config else None,
            service=service,
            stage=stage,
            region=region,
            aws_profile=aws_profile,
        )
        if not settings.service:
            raise ConfigurationError("Service name is required (--service)")

        credentials = create_session(settings.aws_profile, settings.region)
        require_credentials(credentials)

        resolver = StackResolver(
            client_for, output_key=settings.destinations.endpoint_output_key
        )
        resolution = resolver.resolve(
            settings.service, settings.stage, settings.region, credentials
        )
    except ExportSwaggerError as exc:
        raise _fail(exc) from None

    format_response(
        {
            "stack": resolution.stack_name,
            "api_id": resolution.api_id,
            "status": resolution.status.value,
        }
    )
    if not resolution.found:
        warning(f"No REST API id found for stack {resolution.stack_name}")
        raise typer.Exit(code=EXIT_RESOLUTION_FAILURE)
