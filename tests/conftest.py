"""Shared test fixtures for exportswagger.

Provides fake AWS clients, isolated configuration environments, output
state management and a CLI runner. These fixtures are discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

from exportswagger.models import DeploymentContext, PublishTarget
from exportswagger.output import OutputFormat, OutputManager, reset_output, set_output


ENDPOINT = "https://abc123.execute-api.us-east-1.amazonaws.com/prod"
SWAGGER_JSON = b'{"swagger": "2.0", "info": {"title": "orders"}}'


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def stack_response(
    outputs: Optional[list[dict[str, str]]] = None, name: str = "orders-prod"
) -> dict[str, Any]:
    """DescribeStacks response with the given outputs."""
    if outputs is None:
        outputs = [{"OutputKey": "ServiceEndpoint", "OutputValue": ENDPOINT}]
    return {"Stacks": [{"StackName": name, "Outputs": outputs}]}


class FakeAws:
    """Client factory handing out one MagicMock per AWS service.

    Every call to :meth:`factory` is recorded so tests can assert which
    services were touched (and that none were, for validation failures).
    """

    def __init__(self) -> None:
        self.cloudformation = MagicMock(name="cloudformation")
        self.apigateway = MagicMock(name="apigateway")
        self.s3 = MagicMock(name="s3")
        self.factory_calls: list[tuple[str, Any, Any]] = []

        self.cloudformation.describe_stacks.return_value = stack_response()
        self.apigateway.get_export.return_value = {
            "body": SWAGGER_JSON,
            "contentType": "application/json",
        }
        self.s3.put_object.return_value = {"ETag": '"etag"'}

    def factory(self, service_name: str, region: Any, credentials: Any) -> MagicMock:
        self.factory_calls.append((service_name, region, credentials))
        return getattr(self, service_name)

    @property
    def total_calls(self) -> int:
        return (
            len(self.cloudformation.method_calls)
            + len(self.apigateway.method_calls)
            + len(self.s3.method_calls)
        )


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches sys.stdout/sys.stderr at creation time; the
    CliRunner swaps those streams, so a stale manager would write to a
    closed file in the next test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# AWS fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_aws() -> FakeAws:
    return FakeAws()


@pytest.fixture
def credentials() -> object:
    """Opaque credentials handle; the pipeline must pass it through untouched."""
    return object()


@pytest.fixture
def context(credentials: object) -> DeploymentContext:
    return DeploymentContext(
        service_name="orders", stage="prod", region="us-east-1", credentials=credentials
    )


@pytest.fixture
def target() -> PublishTarget:
    return PublishTarget(bucket="b", key_prefix="orders-api")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME into tmp_path, clears every EXPORTSWAGGER_* and
    AWS_PROFILE variable, and changes the working directory to tmp_path
    so no real serverless.yml is picked up.

    Returns:
        The tmp_path root directory for writing project files.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "EXPORTSWAGGER_STAGE",
        "EXPORTSWAGGER_REGION",
        "EXPORTSWAGGER_BUCKET",
        "EXPORTSWAGGER_KEY",
        "EXPORTSWAGGER_ACL",
        "AWS_PROFILE",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
