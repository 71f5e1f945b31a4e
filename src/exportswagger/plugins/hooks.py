"""Hook runner for the pipeline lifecycle.

:class:`HookRunner` fans pipeline events out to every loaded plugin in
registration order. State and artifact hooks propagate plugin exceptions as
:class:`~exportswagger.exceptions.PluginError` (a misbehaving plugin stops
the run before the next AWS call); error hooks never raise.
"""

from __future__ import annotations

import logging
from typing import Optional

from exportswagger.exceptions import ExportSwaggerError, PluginError
from exportswagger.models import ExportRequest, PipelineState, PublishedArtifact
from exportswagger.plugins.base import Plugin

logger = logging.getLogger(__name__)


class HookRunner:
    """Executes plugin hooks across all loaded plugins in registration order.

    Holds an immutable snapshot of the plugin list. If new plugins are
    loaded, obtain a new runner from the manager.
    """

    def __init__(self, plugins: list[Plugin]) -> None:
        self._plugins = list(plugins)

    def run_state_change(
        self, state: PipelineState, request: Optional[ExportRequest] = None
    ) -> None:
        for plugin in self._plugins:
            try:
                plugin.on_state_change(state, request)
            except ExportSwaggerError:
                raise
            except Exception as exc:
                raise PluginError(
                    f"Plugin '{plugin.name}' failed in on_state_change: {exc}"
                ) from exc

    def run_artifact_published(self, artifact: PublishedArtifact) -> None:
        for plugin in self._plugins:
            try:
                plugin.on_artifact_published(artifact)
            except ExportSwaggerError:
                raise
            except Exception as exc:
                raise PluginError(
                    f"Plugin '{plugin.name}' failed in on_artifact_published: {exc}"
                ) from exc

    def run_error(self, error: Exception) -> None:
        """Execute ``on_error`` hooks; secondary exceptions are logged and dropped."""
        for plugin in self._plugins:
            try:
                plugin.on_error(error)
            except Exception as exc:
                logger.warning("Plugin '%s' raised in on_error: %s", plugin.name, exc)
