"""Abstract base class for exportswagger plugins.

Every plugin must subclass :class:`Plugin` and implement the :attr:`name`
property. The lifecycle hooks (``on_init``, ``on_state_change``,
``on_artifact_published``, ``on_error``, ``cleanup``) are optional --
default implementations are no-ops so plugins only override what they need.

Plugins are registered as entry points in the ``exportswagger.plugins``
group and discovered at runtime by
:class:`~exportswagger.plugins.manager.PluginManager`.

Example:
    Posting a notification for every published artifact::

        class NotifyPlugin(Plugin):
            @property
            def name(self) -> str:
                return "notify"

            def on_artifact_published(self, artifact):
                post_to_chat(f"New API docs: {artifact.uri}")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from exportswagger.models import (
    ExportRequest,
    PipelineState,
    ProjectConfig,
    PublishedArtifact,
)


class Plugin(ABC):
    """Base class for all exportswagger plugins.

    The plugin lifecycle is:

    1. Instantiation -- the :class:`PluginManager` calls the no-arg constructor.
    2. :meth:`on_init` -- called once with the resolved project configuration.
    3. Pipeline hooks -- called as the export pipeline advances.
    4. :meth:`cleanup` -- called once after the run, successful or not.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique plugin name used for discovery and logging."""
        ...

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return ""

    def on_init(self, config: ProjectConfig) -> None:
        """Called once when the plugin is loaded by the :class:`PluginManager`.

        Args:
            config: The effective project configuration for this run.
        """

    def on_state_change(
        self, state: PipelineState, request: Optional[ExportRequest]
    ) -> None:
        """Called on every pipeline state transition.

        Args:
            state: The state the pipeline just entered.
            request: The export request being processed in the
                ``exporting``/``publishing`` states, otherwise ``None``.
        """

    def on_artifact_published(self, artifact: PublishedArtifact) -> None:
        """Called after an artifact is written (and secured, in policy mode)."""

    def on_error(self, error: Exception) -> None:
        """Called when the pipeline fails, before the error propagates.

        Exceptions raised here are swallowed by the
        :class:`~exportswagger.plugins.hooks.HookRunner` so that a plugin
        cannot mask the original failure.
        """

    def cleanup(self) -> None:
        """Called once during shutdown to release plugin resources."""
