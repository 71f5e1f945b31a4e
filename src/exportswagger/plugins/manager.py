"""Plugin manager -- discovery, loading, and lifecycle management.

Plugins are discovered through the ``exportswagger.plugins`` entry-point
group. Third-party packages register a plugin in their ``pyproject.toml``::

    [project.entry-points."exportswagger.plugins"]
    notify = "my_package.plugin:NotifyPlugin"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from exportswagger.exceptions import PluginError
from exportswagger.models import ProjectConfig
from exportswagger.plugins.base import Plugin
from exportswagger.plugins.hooks import HookRunner

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "exportswagger.plugins"
"""The entry-point group name used for plugin discovery."""


class PluginManager:
    """Discovers, loads, and manages the lifecycle of exportswagger plugins.

    The ``enabled`` and ``disabled`` lists in
    :class:`~exportswagger.models.PluginsConfig` act as an explicit
    allowlist/blocklist. When ``enabled`` is non-empty only those plugins
    are loaded; otherwise every discovered plugin not in ``disabled`` is.

    Example::

        manager = PluginManager()
        manager.discover(config)
        pipeline = ExportPipeline(hooks=manager.get_hook_runner())
    """

    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}
        self._hook_runner: Optional[HookRunner] = None

    def discover(self, config: ProjectConfig) -> list[str]:
        """Discover and load plugins registered under :data:`ENTRY_POINT_GROUP`.

        Returns:
            Names of the plugins that loaded. Plugins that fail to load are
            logged as warnings and skipped.
        """
        loaded_names: list[str] = []
        plugins_cfg = config.destinations.plugins
        enabled_set = set(plugins_cfg.enabled)
        disabled_set = set(plugins_cfg.disabled)

        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            name = ep.name
            if enabled_set and name not in enabled_set:
                logger.debug("Plugin '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Plugin '%s' is disabled, skipping", name)
                continue

            try:
                plugin: Plugin = ep.load()()
                self.load_plugin(name, plugin, config)
                loaded_names.append(name)
            except Exception as exc:
                logger.warning("Failed to load plugin '%s': %s", name, exc)

        return loaded_names

    def load_plugin(self, name: str, plugin: Plugin, config: ProjectConfig) -> None:
        """Initialise *plugin* and register it under *name*.

        Raises:
            PluginError: If a plugin with the same *name* is already loaded.
        """
        if name in self._plugins:
            raise PluginError(f"Plugin '{name}' is already loaded")

        plugin.on_init(config)
        self._plugins[name] = plugin
        self._hook_runner = None
        logger.info("Loaded plugin '%s' v%s", name, plugin.version)

    def get_plugin(self, name: str) -> Plugin:
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginError(f"Plugin '{name}' is not loaded") from None

    def list_plugins(self) -> list[dict[str, str]]:
        return [
            {
                "name": plugin.name,
                "version": plugin.version,
                "description": plugin.description,
            }
            for plugin in self._plugins.values()
        ]

    def get_hook_runner(self) -> HookRunner:
        """Return a cached :class:`HookRunner` over the loaded plugins."""
        if self._hook_runner is None:
            self._hook_runner = HookRunner(list(self._plugins.values()))
        return self._hook_runner

    def cleanup(self) -> None:
        """Call ``cleanup`` on every plugin and reset internal state.

        One plugin's failure is logged and does not prevent the others from
        cleaning up.
        """
        for name, plugin in self._plugins.items():
            try:
                plugin.cleanup()
            except Exception as exc:
                logger.warning("Error cleaning up plugin '%s': %s", name, exc)
        self._plugins.clear()
        self._hook_runner = None
