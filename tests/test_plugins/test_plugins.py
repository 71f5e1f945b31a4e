"""Tests for the exportswagger plugin system."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest

from exportswagger.exceptions import PluginError, PublishError
from exportswagger.models import (
    DestinationsConfig,
    ExportRequest,
    PipelineState,
    PluginsConfig,
    ProjectConfig,
    PublishedArtifact,
)
from exportswagger.plugins.base import Plugin
from exportswagger.plugins.hooks import HookRunner
from exportswagger.plugins.manager import ENTRY_POINT_GROUP, PluginManager


# ---------------------------------------------------------------------------
# Test helpers -- concrete Plugin subclasses
# ---------------------------------------------------------------------------


class MinimalPlugin(Plugin):
    """Smallest valid plugin -- only implements the required ``name`` property."""

    @property
    def name(self) -> str:
        return "minimal"


class NotifyPlugin(Plugin):
    """Collects published artifact URIs."""

    def __init__(self) -> None:
        self.uris: list[str] = []

    @property
    def name(self) -> str:
        return "notify"

    def on_artifact_published(self, artifact: PublishedArtifact) -> None:
        self.uris.append(artifact.uri)


class StateLogPlugin(Plugin):
    def __init__(self, log: list[str]) -> None:
        self._log = log

    @property
    def name(self) -> str:
        return "state-log"

    def on_state_change(self, state, request) -> None:
        self._log.append(f"{self.name}:{state.value}")


class ExplodingPlugin(Plugin):
    """Raises from every hook."""

    @property
    def name(self) -> str:
        return "exploding"

    def on_state_change(self, state, request) -> None:
        raise RuntimeError("state boom")

    def on_artifact_published(self, artifact) -> None:
        raise ValueError("publish boom")

    def on_error(self, error: Exception) -> None:
        raise RuntimeError("error boom")

    def cleanup(self) -> None:
        raise RuntimeError("cleanup boom")


class ErrorCollectorPlugin(Plugin):
    def __init__(self) -> None:
        self.errors: list[Exception] = []

    @property
    def name(self) -> str:
        return "collector"

    def on_error(self, error: Exception) -> None:
        self.errors.append(error)


class CleanupTracker(Plugin):
    def __init__(self) -> None:
        self.cleaned = False

    @property
    def name(self) -> str:
        return "cleanup-tracker"

    def cleanup(self) -> None:
        self.cleaned = True


def _artifact() -> PublishedArtifact:
    return PublishedArtifact(
        bucket="b", key="orders-api-swagger.json", request=ExportRequest.parse("swagger")
    )


@pytest.fixture
def config() -> ProjectConfig:
    return ProjectConfig(service="orders")


@pytest.fixture
def manager() -> PluginManager:
    return PluginManager()


# ---------------------------------------------------------------------------
# Plugin ABC
# ---------------------------------------------------------------------------


class TestPluginABC:
    def test_cannot_instantiate_without_name(self) -> None:
        with pytest.raises(TypeError):

            class BadPlugin(Plugin):
                pass

            BadPlugin()  # type: ignore[abstract]

    def test_defaults(self, config: ProjectConfig) -> None:
        plugin = MinimalPlugin()
        assert plugin.version == "0.1.0"
        assert plugin.description == ""
        plugin.on_init(config)
        plugin.on_state_change(PipelineState.RESOLVING, None)
        plugin.on_artifact_published(_artifact())
        plugin.on_error(RuntimeError("x"))
        plugin.cleanup()


# ---------------------------------------------------------------------------
# HookRunner
# ---------------------------------------------------------------------------


class TestHookRunner:
    def test_state_change_in_registration_order(self) -> None:
        log: list[str] = []

        class Second(StateLogPlugin):
            @property
            def name(self) -> str:
                return "second"

        runner = HookRunner([StateLogPlugin(log), Second(log)])
        runner.run_state_change(PipelineState.RESOLVING)

        assert log == ["state-log:resolving", "second:resolving"]

    def test_artifact_published(self) -> None:
        plugin = NotifyPlugin()
        HookRunner([plugin]).run_artifact_published(_artifact())
        assert plugin.uris == ["s3://b/orders-api-swagger.json"]

    def test_state_hook_failure_becomes_plugin_error(self) -> None:
        with pytest.raises(PluginError, match="exploding") as exc_info:
            HookRunner([ExplodingPlugin()]).run_state_change(PipelineState.DONE)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_artifact_hook_failure_becomes_plugin_error(self) -> None:
        with pytest.raises(PluginError, match="on_artifact_published"):
            HookRunner([ExplodingPlugin()]).run_artifact_published(_artifact())

    def test_domain_errors_pass_through(self) -> None:
        class Raising(MinimalPlugin):
            def on_artifact_published(self, artifact) -> None:
                raise PublishError("nope", bucket="b", key="k", step="write")

        with pytest.raises(PublishError):
            HookRunner([Raising()]).run_artifact_published(_artifact())

    def test_error_handler_does_not_cascade(self) -> None:
        collector = ErrorCollectorPlugin()
        runner = HookRunner([ExplodingPlugin(), collector])
        original = RuntimeError("original")

        runner.run_error(original)

        assert collector.errors == [original]

    def test_empty_plugin_list(self) -> None:
        runner = HookRunner([])
        runner.run_state_change(PipelineState.RESOLVING)
        runner.run_artifact_published(_artifact())
        runner.run_error(RuntimeError("x"))


# ---------------------------------------------------------------------------
# PluginManager
# ---------------------------------------------------------------------------


class TestPluginManager:
    def test_load_plugin(self, manager: PluginManager, config: ProjectConfig) -> None:
        manager.load_plugin("minimal", MinimalPlugin(), config)
        assert manager.get_plugin("minimal").name == "minimal"

    def test_load_plugin_calls_on_init(
        self, manager: PluginManager, config: ProjectConfig
    ) -> None:
        seen: list[ProjectConfig] = []

        class InitTracker(MinimalPlugin):
            def on_init(self, config: ProjectConfig) -> None:
                seen.append(config)

        manager.load_plugin("tracker", InitTracker(), config)
        assert seen == [config]

    def test_load_plugin_duplicate_raises(
        self, manager: PluginManager, config: ProjectConfig
    ) -> None:
        manager.load_plugin("minimal", MinimalPlugin(), config)
        with pytest.raises(PluginError, match="already loaded"):
            manager.load_plugin("minimal", MinimalPlugin(), config)

    def test_get_unknown_plugin(self, manager: PluginManager) -> None:
        with pytest.raises(PluginError, match="not loaded"):
            manager.get_plugin("ghost")

    def test_list_plugins(self, manager: PluginManager, config: ProjectConfig) -> None:
        manager.load_plugin("minimal", MinimalPlugin(), config)
        assert manager.list_plugins() == [
            {"name": "minimal", "version": "0.1.0", "description": ""}
        ]

    def test_hook_runner_cached_until_next_load(
        self, manager: PluginManager, config: ProjectConfig
    ) -> None:
        first = manager.get_hook_runner()
        assert manager.get_hook_runner() is first

        notify = NotifyPlugin()
        manager.load_plugin("notify", notify, config)
        runner = manager.get_hook_runner()
        assert runner is not first

        runner.run_artifact_published(_artifact())
        assert notify.uris == ["s3://b/orders-api-swagger.json"]

    def test_cleanup_continues_after_failure(
        self, manager: PluginManager, config: ProjectConfig
    ) -> None:
        tracker = CleanupTracker()
        manager.load_plugin("exploding", ExplodingPlugin(), config)
        manager.load_plugin("tracker", tracker, config)

        manager.cleanup()

        assert tracker.cleaned
        assert manager.list_plugins() == []


class TestPluginDiscovery:
    """Entry-point discovery with ``importlib.metadata`` patched out."""

    @staticmethod
    def _make_entry_point(name: str, plugin_cls: type) -> Any:
        class MockEP:
            def __init__(self, ep_name: str, cls: type) -> None:
                self.name = ep_name
                self._cls = cls

            def load(self) -> type:
                return self._cls

        return MockEP(name, plugin_cls)

    @staticmethod
    def _discover(manager: PluginManager, config: ProjectConfig, eps: list[Any]) -> list[str]:
        def fake_entry_points(group: str) -> list[Any]:
            return eps if group == ENTRY_POINT_GROUP else []

        with patch(
            "exportswagger.plugins.manager.importlib.metadata.entry_points",
            side_effect=fake_entry_points,
        ):
            return manager.discover(config)

    def test_discover_loads_plugins(self, manager: PluginManager, config: ProjectConfig) -> None:
        loaded = self._discover(
            manager, config, [self._make_entry_point("minimal", MinimalPlugin)]
        )
        assert loaded == ["minimal"]
        assert manager.get_plugin("minimal").name == "minimal"

    def test_discover_respects_disabled(self, manager: PluginManager) -> None:
        config = ProjectConfig(
            destinations=DestinationsConfig(plugins=PluginsConfig(disabled=["minimal"]))
        )
        loaded = self._discover(
            manager, config, [self._make_entry_point("minimal", MinimalPlugin)]
        )
        assert loaded == []

    def test_discover_respects_enabled_allowlist(self, manager: PluginManager) -> None:
        config = ProjectConfig(
            destinations=DestinationsConfig(plugins=PluginsConfig(enabled=["notify"]))
        )
        loaded = self._discover(
            manager,
            config,
            [
                self._make_entry_point("minimal", MinimalPlugin),
                self._make_entry_point("notify", NotifyPlugin),
            ],
        )
        assert loaded == ["notify"]

    def test_discover_handles_broken_plugin(
        self, manager: PluginManager, config: ProjectConfig
    ) -> None:
        class BrokenEP:
            name = "broken"

            def load(self) -> type:
                raise ImportError("missing dependency")

        loaded = self._discover(
            manager, config, [BrokenEP(), self._make_entry_point("minimal", MinimalPlugin)]
        )
        assert loaded == ["minimal"]

    def test_plugins_config_from_project_file_block(self) -> None:
        config = ProjectConfig.model_validate(
            {"destinations": {"plugins": {"disabled": ["notify"]}}}
        )
        assert config.destinations.plugins.disabled == ["notify"]
