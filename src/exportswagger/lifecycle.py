"""Deployment lifecycle entry point.

:class:`ExportSwagger` is what a deploy tool (or the ``exportswagger export``
command) calls once a deployment has finished. It maps lifecycle event
names to handlers; the only event handled is :data:`AFTER_DEPLOY`, whose
handler builds the :class:`~exportswagger.models.DeploymentContext` and
:class:`~exportswagger.models.PublishTarget` from the resolved
configuration and runs the :class:`~exportswagger.pipeline.ExportPipeline`.

The pipeline itself never reads configuration; everything it needs is
passed in here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from exportswagger.aws import ClientFactory, client_for, create_session, require_credentials
from exportswagger.exceptions import ConfigurationError
from exportswagger.models import PipelineResult, ProjectConfig
from exportswagger.output import debug, success
from exportswagger.pipeline import (
    ArtifactPublisher,
    ExportPipeline,
    SpecExporter,
    StackResolver,
)
from exportswagger.plugins import PluginManager

logger = logging.getLogger(__name__)

AFTER_DEPLOY = "after:deploy:deploy"
"""Event fired once the stack update has completed."""

SUCCESS_MESSAGE = "ExportSwagger: Files uploaded to s3."


class ExportSwagger:
    """Hooks the export pipeline into the deployment lifecycle.

    Args:
        config: Effective configuration from
            :func:`~exportswagger.config.resolve_config`.
        credentials: Opaque credentials handle passed to every client.
            When ``None`` a :class:`boto3.session.Session` is created from
            ``config.aws_profile`` on first use.
        client_factory: Builds boto3 clients; replaced in tests.
        plugin_manager: Manager whose plugins observe the run. When
            ``None``, plugins are discovered from entry points.

    Example::

        plugin = ExportSwagger(resolve_config(stage="prod"))
        plugin.trigger(AFTER_DEPLOY)
    """

    def __init__(
        self,
        config: ProjectConfig,
        credentials: Any = None,
        client_factory: ClientFactory = client_for,
        plugin_manager: Optional[PluginManager] = None,
    ) -> None:
        self.config = config
        self._credentials = credentials
        self._client_factory = client_factory
        self._plugin_manager = plugin_manager
        self.hooks: dict[str, Callable[[], PipelineResult]] = {
            AFTER_DEPLOY: self.export_api,
        }

    def trigger(self, event: str) -> PipelineResult:
        """Run the handler registered for *event*.

        Raises:
            ConfigurationError: If no handler is registered for *event*.
        """
        handler = self.hooks.get(event)
        if handler is None:
            raise ConfigurationError(
                f"No handler for lifecycle event '{event}' "
                f"(supported: {', '.join(sorted(self.hooks))})"
            )
        debug(f"Lifecycle event: {event}")
        return handler()

    def build_pipeline(self, plugin_manager: Optional[PluginManager] = None) -> ExportPipeline:
        destinations = self.config.destinations
        return ExportPipeline(
            resolver=StackResolver(
                self._client_factory, output_key=destinations.endpoint_output_key
            ),
            exporter=SpecExporter(self._client_factory),
            publisher=ArtifactPublisher(self._client_factory, region=self.config.region),
            hooks=plugin_manager.get_hook_runner() if plugin_manager else None,
            strict_resolution=destinations.strict_resolution,
        )

    def export_api(self) -> PipelineResult:
        """Export every configured artifact and upload it to S3.

        The destination is validated before credentials are loaded, so a
        missing bucket or key never reaches AWS.
        """
        target = self.config.publish_target()
        requests = self.config.destinations.exports
        if not self.config.service:
            raise ConfigurationError(
                "Service name is required (set 'service' in serverless.yml or pass --service)"
            )

        plugin_manager = self._plugin_manager
        if plugin_manager is None:
            plugin_manager = PluginManager()
            plugin_manager.discover(self.config)

        try:
            pipeline = self.build_pipeline(plugin_manager)
            pipeline.plan(target, requests)

            credentials = self._credentials
            if credentials is None:
                credentials = create_session(self.config.aws_profile, self.config.region)
                require_credentials(credentials)
                self._credentials = credentials

            context = self.config.deployment_context(credentials)
            logger.info(
                "Exporting %d artifact(s) for stack %s", len(requests), context.stack_name
            )
            result = pipeline.run(context, target, requests)
        finally:
            plugin_manager.cleanup()

        success(SUCCESS_MESSAGE)
        return result
