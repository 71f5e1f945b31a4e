"""Canonical Pydantic models shared across all exportswagger modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- parsed from the project file
(``serverless.yml``) and the environment:
    :class:`PluginsConfig`, :class:`DestinationsConfig`, and
    :class:`ProjectConfig`.

**Pipeline models** -- created and consumed within one pipeline run:
    :class:`ExportFormat`, :class:`Encoding`, :class:`AccessPolicy`,
    :class:`ExportRequest`, :class:`DeploymentContext`,
    :class:`ResolutionStatus`, :class:`ApiResolution`, :class:`SpecDocument`,
    :class:`PublishTarget`, :class:`PublishedArtifact`,
    :class:`PipelineState`, and :class:`PipelineResult`.

Everything handed to the pipeline is frozen so that no step can mutate the
context or the destination mid-run.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Export vocabulary ---


class ExportFormat(str, enum.Enum):
    """Specification dialects API Gateway can export.

    The value is both the ``exportType`` sent to API Gateway and the
    format part of the published key suffix.
    """

    SWAGGER = "swagger"
    OAS30 = "oas30"


class Encoding(str, enum.Enum):
    """Text encodings for an exported document."""

    JSON = "json"
    YAML = "yaml"

    @property
    def media_type(self) -> str:
        """The ``Accept`` header value requested from API Gateway."""
        return f"application/{self.value}"


class AccessPolicy(str, enum.Enum):
    """S3 canned ACLs that may be applied to a published artifact."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    AWS_EXEC_READ = "aws-exec-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


class ExportRequest(BaseModel):
    """One ``(format, encoding)`` pair; each request produces one artifact.

    Example::

        ExportRequest.parse("oas30:yaml").key_suffix   # "-oas30.yaml"
    """

    model_config = ConfigDict(frozen=True)

    format: ExportFormat
    encoding: Encoding = Encoding.JSON

    @classmethod
    def parse(cls, value: str) -> ExportRequest:
        """Parse the compact ``FORMAT:ENCODING`` form used on the CLI.

        The encoding may be omitted (``"swagger"``), in which case JSON is
        used.

        Raises:
            ValueError: If either part is not a known value.
        """
        fmt, _, enc = value.strip().lower().partition(":")
        return cls(format=ExportFormat(fmt), encoding=Encoding(enc or "json"))

    @property
    def key_suffix(self) -> str:
        return f"-{self.format.value}.{self.encoding.value}"

    def __str__(self) -> str:
        return f"{self.format.value}:{self.encoding.value}"


DEFAULT_EXPORTS: tuple[ExportRequest, ...] = (
    ExportRequest(format=ExportFormat.SWAGGER, encoding=Encoding.JSON),
    ExportRequest(format=ExportFormat.OAS30, encoding=Encoding.JSON),
    ExportRequest(format=ExportFormat.SWAGGER, encoding=Encoding.YAML),
    ExportRequest(format=ExportFormat.OAS30, encoding=Encoding.YAML),
)
"""Artifacts produced when the configuration does not list any."""


# --- Configuration models ---


class PluginsConfig(BaseModel):
    """Explicit plugin allow/deny lists."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class DestinationsConfig(BaseModel):
    """The ``custom.swaggerDestinations`` block of the project file.

    Keys use the camelCase spelling of the project file; the snake_case
    field names are accepted too.

    Example::

        custom:
          swaggerDestinations:
            s3BucketName: my-api-docs
            s3KeyName: orders-api
            acl: public-read
            exports: [swagger:json, oas30:yaml]
    """

    model_config = ConfigDict(populate_by_name=True)

    s3_bucket_name: Optional[str] = Field(default=None, alias="s3BucketName")
    s3_key_name: Optional[str] = Field(default=None, alias="s3KeyName")
    acl: Optional[AccessPolicy] = Field(
        default=None, description="Canned ACL; omit to keep the bucket default"
    )
    exports: list[ExportRequest] = Field(default_factory=lambda: list(DEFAULT_EXPORTS))
    strict_resolution: bool = Field(
        default=True,
        alias="strictResolution",
        description="Fail before exporting when the API id cannot be resolved",
    )
    endpoint_output_key: str = Field(
        default="ServiceEndpoint", alias="endpointOutputKey"
    )
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @field_validator("exports", mode="before")
    @classmethod
    def _parse_compact_exports(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [ExportRequest.parse(v) if isinstance(v, str) else v for v in value]
        return value


class ProjectConfig(BaseModel):
    """Effective configuration after precedence resolution.

    Produced by :func:`~exportswagger.config.resolve_config` and converted
    into the frozen pipeline inputs with :meth:`deployment_context` and
    :meth:`publish_target`.
    """

    service: Optional[str] = None
    stage: str = "dev"
    region: str = "us-east-1"
    aws_profile: Optional[str] = None
    destinations: DestinationsConfig = Field(default_factory=DestinationsConfig)
    source: Optional[str] = Field(
        default=None, description="Path of the project file that was loaded"
    )

    def deployment_context(self, credentials: Any) -> DeploymentContext:
        return DeploymentContext(
            service_name=self.service or "",
            stage=self.stage,
            region=self.region,
            credentials=credentials,
        )

    def publish_target(self) -> PublishTarget:
        return PublishTarget(
            bucket=self.destinations.s3_bucket_name or "",
            key_prefix=self.destinations.s3_key_name or "",
            access_policy=self.destinations.acl,
        )


# --- Pipeline models ---


class DeploymentContext(BaseModel):
    """Where the API was deployed and how to reach AWS.

    ``credentials`` is opaque to the pipeline; in practice it is a
    :class:`boto3.session.Session` handed to
    :func:`~exportswagger.aws.client_for`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    service_name: str
    stage: str
    region: str
    credentials: Any = None

    @property
    def stack_name(self) -> str:
        return f"{self.service_name}-{self.stage}"


class ResolutionStatus(str, enum.Enum):
    """Outcome of a stack lookup."""

    FOUND = "found"
    STACK_NOT_FOUND = "stack_not_found"
    OUTPUT_NOT_FOUND = "output_not_found"


class ApiResolution(BaseModel):
    """Result of :meth:`~exportswagger.pipeline.resolver.StackResolver.resolve`.

    ``api_id`` is empty unless ``status`` is :attr:`ResolutionStatus.FOUND`.
    """

    model_config = ConfigDict(frozen=True)

    stack_name: str
    api_id: str = ""
    status: ResolutionStatus = ResolutionStatus.FOUND

    @property
    def found(self) -> bool:
        return self.status == ResolutionStatus.FOUND and bool(self.api_id)


class SpecDocument(BaseModel):
    """An exported specification, kept as the raw bytes API Gateway returned."""

    model_config = ConfigDict(frozen=True)

    body: bytes
    content_type: str
    request: ExportRequest


class PublishTarget(BaseModel):
    """S3 destination for a run. ``access_policy=None`` selects simple mode."""

    model_config = ConfigDict(frozen=True)

    bucket: str = ""
    key_prefix: str = ""
    access_policy: Optional[AccessPolicy] = None

    def key_for(self, request: ExportRequest) -> str:
        """Object key for *request*, e.g. ``orders-api-swagger.json``."""
        return self.key_prefix + request.key_suffix


class PublishedArtifact(BaseModel):
    """An object that was written (and, in policy mode, secured) in S3."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    request: ExportRequest
    access_policy: Optional[AccessPolicy] = None

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


class PipelineState(str, enum.Enum):
    """States of :class:`~exportswagger.pipeline.orchestrator.ExportPipeline`."""

    IDLE = "idle"
    RESOLVING = "resolving"
    EXPORTING = "exporting"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


class PipelineResult(BaseModel):
    """Summary of a completed run."""

    api_id: str
    artifacts: list[PublishedArtifact] = Field(default_factory=list)
    state: PipelineState = PipelineState.DONE
