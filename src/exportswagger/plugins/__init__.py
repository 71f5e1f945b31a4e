"""Plugin system for exportswagger -- discovery, loading, and lifecycle hooks.

Third-party packages register plugins under the ``exportswagger.plugins``
entry-point group. :class:`PluginManager` loads them and hands out a
:class:`HookRunner` that the export pipeline calls on every state change,
every published artifact, and on failure.
"""

from exportswagger.plugins.base import Plugin
from exportswagger.plugins.hooks import HookRunner
from exportswagger.plugins.manager import PluginManager

__all__ = ["Plugin", "HookRunner", "PluginManager"]
