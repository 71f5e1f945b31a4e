"""Fetch generated specification documents from API Gateway.

Each call maps to exactly one ``GetExport`` request. The integration
extensions (``x-amazon-apigateway-integration``) are always requested so
that the published document can be re-imported as-is. The returned body is
treated as opaque bytes.
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from exportswagger.aws import ClientFactory, client_for
from exportswagger.exceptions import ExportError
from exportswagger.models import Encoding, ExportFormat, ExportRequest, SpecDocument

logger = logging.getLogger(__name__)

EXPORT_EXTENSIONS = "integrations"


def _read_body(body: Any) -> bytes:
    # get_export returns a StreamingBody; tests and older botocore may give bytes.
    if hasattr(body, "read"):
        body = body.read()
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body or b"")


class SpecExporter:
    """Exports a stage's specification in one format and encoding.

    Args:
        client_factory: Builds the API Gateway client. Defaults to
            :func:`~exportswagger.aws.client_for`.
    """

    def __init__(self, client_factory: ClientFactory = client_for) -> None:
        self._client_factory = client_factory

    def export(
        self,
        api_id: str,
        stage: str,
        region: str,
        credentials: Any,
        format: ExportFormat,
        encoding: Encoding,
    ) -> SpecDocument:
        """Export the *stage* of REST API *api_id*.

        Raises:
            ExportError: If API Gateway rejects the request (unknown API
                id or stage, access denied) or the call fails in transit.
                The original exception is chained as ``__cause__``.
        """
        request = ExportRequest(format=format, encoding=encoding)
        client = self._client_factory("apigateway", region, credentials)
        logger.debug("GetExport %s/%s as %s", api_id, stage, request)

        try:
            response = client.get_export(
                restApiId=api_id,
                stageName=stage,
                exportType=format.value,
                accepts=encoding.media_type,
                parameters={"extensions": EXPORT_EXTENSIONS},
            )
        except (ClientError, BotoCoreError) as exc:
            raise ExportError(
                f"Export of {request} for API '{api_id}' stage '{stage}' failed: {exc}"
            ) from exc

        return SpecDocument(
            body=_read_body(response.get("body")),
            content_type=response.get("contentType") or encoding.media_type,
            request=request,
        )
