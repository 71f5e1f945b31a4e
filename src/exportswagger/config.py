"""Configuration resolution from the project file, environment, and CLI flags.

This module handles everything the pipeline needs to know but never looks
up itself:

* **Project file** -- the ``serverless.yml`` (or ``.yaml`` / ``.json``)
  that deployed the stack. The service name, ``provider.stage``,
  ``provider.region``, ``provider.profile`` and the
  ``custom.swaggerDestinations`` block are read from it.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project file, and defaults into a
  :class:`~exportswagger.models.ProjectConfig`.
* **Directory layout** -- XDG-compliant data directory for crash logs
  (:func:`get_data_dir`).

Serverless variables (``${opt:stage}``, ``${env:BUCKET}``, ...) are not
interpolated; a value that still contains one is rejected so that a
literal ``${...}`` never ends up in a bucket name.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml
from pydantic import ValidationError

from exportswagger.exceptions import ConfigurationError
from exportswagger.models import ProjectConfig

_APP_NAME = "exportswagger"
PROJECT_FILENAMES = ("serverless.yml", "serverless.yaml", "serverless.json")

ENV_STAGE = "EXPORTSWAGGER_STAGE"
ENV_REGION = "EXPORTSWAGGER_REGION"
ENV_BUCKET = "EXPORTSWAGGER_BUCKET"
ENV_KEY = "EXPORTSWAGGER_KEY"
ENV_ACL = "EXPORTSWAGGER_ACL"
ENV_AWS_PROFILE = "AWS_PROFILE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/exportswagger/`` (default
    ``~/.local/share/exportswagger/``). Elsewhere: ``~/.exportswagger/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project file ---


def find_project_file(directory: Optional[Path] = None) -> Optional[Path]:
    """Return the first project file found in *directory* (default: cwd)."""
    directory = directory or Path.cwd()
    for filename in PROJECT_FILENAMES:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


def load_project_file(path: Path) -> dict[str, Any]:
    """Parse a project file as JSON or YAML, based on its extension.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or not a
            mapping at the top level.
    """
    if not path.is_file():
        raise ConfigurationError(f"Project file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid project file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid project file {path}: expected a mapping")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _reject_variables(value: Any, where: str) -> None:
    if isinstance(value, str) and "${" in value:
        raise ConfigurationError(
            f"Unresolved variable in {where}: {value!r}. "
            "Pass the value with a CLI flag or environment variable instead."
        )
    if isinstance(value, dict):
        for key, item in value.items():
            _reject_variables(item, f"{where}.{key}")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _reject_variables(item, f"{where}[{index}]")


def _project_values(data: dict[str, Any]) -> dict[str, Any]:
    """Map the project file layout onto :class:`ProjectConfig` fields."""
    service = data.get("service")
    if isinstance(service, dict):
        service = service.get("name")
    provider = _section(data, "provider")
    destinations = _section(_section(data, "custom"), "swaggerDestinations")

    values: dict[str, Any] = {
        "service": service,
        "stage": provider.get("stage"),
        "region": provider.get("region"),
        "aws_profile": provider.get("profile"),
    }
    values = {k: v for k, v in values.items() if v is not None}
    values["destinations"] = dict(destinations)
    return values


# --- Precedence resolution ---


def resolve_config(
    config_path: Optional[Path] = None,
    *,
    service: Optional[str] = None,
    stage: Optional[str] = None,
    region: Optional[str] = None,
    aws_profile: Optional[str] = None,
    bucket: Optional[str] = None,
    key: Optional[str] = None,
    acl: Optional[str] = None,
    exports: Optional[Sequence[str]] = None,
    strict_resolution: Optional[bool] = None,
) -> ProjectConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. Keyword arguments (CLI flags)
        2. Environment variables (``EXPORTSWAGGER_STAGE``,
           ``EXPORTSWAGGER_REGION``, ``EXPORTSWAGGER_BUCKET``,
           ``EXPORTSWAGGER_KEY``, ``EXPORTSWAGGER_ACL``, ``AWS_PROFILE``)
        3. Project file (*config_path*, or the first of
           :data:`PROJECT_FILENAMES` in the working directory)
        4. Defaults (stage ``dev``, region ``us-east-1``, all four exports)

    Bucket and key are not required here; the pipeline rejects a missing
    destination before it talks to AWS.

    Raises:
        ConfigurationError: If the project file cannot be read or the
            merged values fail validation.
    """
    # 4 + 3. Project file over defaults
    path = config_path or find_project_file()
    values: dict[str, Any] = {"destinations": {}}
    if path is not None:
        values = _project_values(load_project_file(path))
        values["source"] = str(path)
    destinations: dict[str, Any] = values["destinations"]

    # 2. Environment, then 1. CLI flags
    layers = (
        {
            "stage": os.environ.get(ENV_STAGE),
            "region": os.environ.get(ENV_REGION),
            "aws_profile": os.environ.get(ENV_AWS_PROFILE),
            "s3BucketName": os.environ.get(ENV_BUCKET),
            "s3KeyName": os.environ.get(ENV_KEY),
            "acl": os.environ.get(ENV_ACL),
        },
        {
            "service": service,
            "stage": stage,
            "region": region,
            "aws_profile": aws_profile,
            "s3BucketName": bucket,
            "s3KeyName": key,
            "acl": acl,
            "exports": list(exports) if exports else None,
            "strictResolution": strict_resolution,
        },
    )
    destination_keys = {"s3BucketName", "s3KeyName", "acl", "exports", "strictResolution"}
    for layer in layers:
        for name, value in layer.items():
            if value is None or value == "":
                continue
            if name in destination_keys:
                _drop_aliases(destinations, name)
                destinations[name] = value
            else:
                values[name] = value

    for name, value in values.items():
        if name != "source":
            _reject_variables(value, name)

    try:
        return ProjectConfig.model_validate(values)
    except ValidationError as exc:
        where = f" in {path}" if path else ""
        raise ConfigurationError(f"Invalid configuration{where}: {exc}") from exc


_ALIASES = {
    "s3BucketName": "s3_bucket_name",
    "s3KeyName": "s3_key_name",
    "strictResolution": "strict_resolution",
}


def _drop_aliases(destinations: dict[str, Any], name: str) -> None:
    # The project file may use the snake_case spelling; an override must win.
    snake = _ALIASES.get(name)
    if snake:
        destinations.pop(snake, None)

