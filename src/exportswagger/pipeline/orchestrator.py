"""The export-and-publish pipeline.

:class:`ExportPipeline` runs the three pipeline components in sequence:

1. validate the :class:`~exportswagger.models.PublishTarget` and requests
   (no AWS call is made when this fails),
2. resolve the API id once with
   :class:`~exportswagger.pipeline.resolver.StackResolver`,
3. for each :class:`~exportswagger.models.ExportRequest`, in order, export
   the document and publish it under ``<key_prefix>-<format>.<encoding>``.

The first failure moves the pipeline to ``failed`` and propagates;
artifacts published before it stay published. State transitions::

    idle -> resolving -> (exporting -> publishing)* -> done

Any state other than ``done`` may move to ``failed``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from exportswagger.exceptions import ConfigurationError, ResolutionError
from exportswagger.models import (
    ApiResolution,
    DeploymentContext,
    ExportRequest,
    PipelineResult,
    PipelineState,
    PublishedArtifact,
    PublishTarget,
    ResolutionStatus,
)
from exportswagger.pipeline.exporter import SpecExporter
from exportswagger.pipeline.publisher import ArtifactPublisher
from exportswagger.pipeline.resolver import StackResolver
from exportswagger.plugins.hooks import HookRunner

logger = logging.getLogger(__name__)


def validate_target(target: PublishTarget) -> None:
    """Raise :class:`ConfigurationError` unless bucket and key prefix are set."""
    if not target.bucket or not target.key_prefix:
        raise ConfigurationError(
            "ExportSwagger: Bucket name and key are required fields "
            "(custom.swaggerDestinations.s3BucketName / s3KeyName)"
        )


def validate_requests(requests: Sequence[ExportRequest]) -> None:
    """Raise :class:`ConfigurationError` for an empty or duplicated request list."""
    if not requests:
        raise ConfigurationError("At least one export (FORMAT:ENCODING) is required")
    seen: set[ExportRequest] = set()
    for request in requests:
        if request in seen:
            raise ConfigurationError(f"Export '{request}' is requested more than once")
        seen.add(request)


class ExportPipeline:
    """Sequential resolve -> export -> publish workflow.

    Args:
        resolver: Stack resolver; a default :class:`StackResolver` if omitted.
        exporter: Spec exporter; a default :class:`SpecExporter` if omitted.
        publisher: Artifact publisher; a default :class:`ArtifactPublisher`
            if omitted.
        hooks: Plugin hook runner notified of state changes, published
            artifacts, and failures.
        strict_resolution: When ``True`` (the default), a stack or endpoint
            output that cannot be found raises
            :class:`~exportswagger.exceptions.ResolutionError` before any
            export. When ``False``, the empty API id is passed on and the
            first export call fails instead.

    Example::

        pipeline = ExportPipeline()
        result = pipeline.run(context, target, [ExportRequest.parse("oas30:yaml")])
        for artifact in result.artifacts:
            print(artifact.uri)
    """

    def __init__(
        self,
        resolver: Optional[StackResolver] = None,
        exporter: Optional[SpecExporter] = None,
        publisher: Optional[ArtifactPublisher] = None,
        hooks: Optional[HookRunner] = None,
        strict_resolution: bool = True,
    ) -> None:
        self._resolver = resolver or StackResolver()
        self._exporter = exporter or SpecExporter()
        self._publisher = publisher or ArtifactPublisher()
        self._hooks = hooks or HookRunner([])
        self._strict_resolution = strict_resolution
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        """The state the most recent (or current) run is in."""
        return self._state

    def plan(
        self, target: PublishTarget, requests: Sequence[ExportRequest]
    ) -> list[str]:
        """Return the object keys :meth:`run` would write, without any AWS call.

        Raises:
            ConfigurationError: Same validation as :meth:`run`.
        """
        validate_target(target)
        validate_requests(requests)
        return [target.key_for(request) for request in requests]

    def run(
        self,
        context: DeploymentContext,
        target: PublishTarget,
        requests: Sequence[ExportRequest],
    ) -> PipelineResult:
        """Export and publish every request in *requests*, in order.

        Returns:
            A :class:`~exportswagger.models.PipelineResult` listing every
            published artifact.

        Raises:
            ConfigurationError: Missing bucket or key prefix, or a bad
                request list. Raised before any AWS call.
            ResolutionError: The API id could not be resolved (strict
                mode), or CloudFormation failed.
            ExportError: API Gateway rejected an export.
            PublishError: An upload or ACL update failed.
            CompensationError: An ACL update failed and the rollback
                delete failed too.
        """
        self._state = PipelineState.IDLE
        try:
            validate_target(target)
            validate_requests(requests)

            self._transition(PipelineState.RESOLVING)
            resolution = self._resolver.resolve(
                context.service_name, context.stage, context.region, context.credentials
            )
            self._check_resolution(resolution)

            artifacts: list[PublishedArtifact] = []
            for request in requests:
                self._transition(PipelineState.EXPORTING, request)
                document = self._exporter.export(
                    resolution.api_id,
                    context.stage,
                    context.region,
                    context.credentials,
                    request.format,
                    request.encoding,
                )

                self._transition(PipelineState.PUBLISHING, request)
                artifact = self._publisher.publish(
                    document,
                    target,
                    target.key_for(request),
                    context.credentials,
                    region=context.region,
                )
                logger.info("Published %s", artifact.uri)
                artifacts.append(artifact)
                self._hooks.run_artifact_published(artifact)

            self._transition(PipelineState.DONE)
        except Exception as exc:
            self._state = PipelineState.FAILED
            logger.debug("Pipeline failed: %s", exc)
            self._hooks.run_error(exc)
            raise

        return PipelineResult(api_id=resolution.api_id, artifacts=artifacts)

    def _check_resolution(self, resolution: ApiResolution) -> None:
        if resolution.found:
            return
        if resolution.status == ResolutionStatus.STACK_NOT_FOUND:
            reason = f"Stack '{resolution.stack_name}' was not found"
        else:
            reason = (
                f"Stack '{resolution.stack_name}' has no service endpoint output"
            )
        if self._strict_resolution:
            raise ResolutionError(f"{reason}; cannot determine the REST API id")
        logger.warning("%s; continuing with an empty REST API id", reason)

    def _transition(
        self, state: PipelineState, request: Optional[ExportRequest] = None
    ) -> None:
        self._state = state
        self._hooks.run_state_change(state, request)
