"""Resolve the REST API id of a deployed stack from its CloudFormation outputs.

The framework that deployed the stack records the public endpoint in an
output named ``ServiceEndpoint``, e.g.
``https://abc123.execute-api.us-east-1.amazonaws.com/prod``. The API id is
the first label of that host (``abc123``).

A missing stack or output is not an error here: the lookup degrades to an
:class:`~exportswagger.models.ApiResolution` with an empty ``api_id`` and a
status saying what was missing, and the caller decides whether to stop.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from exportswagger.aws import ClientFactory, client_for
from exportswagger.exceptions import ResolutionError
from exportswagger.models import ApiResolution, ResolutionStatus

logger = logging.getLogger(__name__)

SERVICE_ENDPOINT_OUTPUT = "ServiceEndpoint"


def api_id_from_endpoint(endpoint: str) -> str:
    """Extract the API id from an endpoint URL.

    Takes everything before the first ``.`` and returns what follows the
    scheme's ``//``. Returns ``""`` when the value has no ``//``.

    Example::

        api_id_from_endpoint("https://abc123.execute-api.eu-west-1.amazonaws.com/dev")
        # "abc123"
    """
    host_label = endpoint.split(".")[0]
    parts = host_label.split("//")
    if len(parts) < 2:
        return ""
    return parts[1]


def find_output(outputs: Iterable[dict[str, Any]], output_key: str) -> Optional[str]:
    """Return the value of the first output named *output_key*, if any."""
    for output in outputs:
        if output.get("OutputKey") == output_key:
            return output.get("OutputValue", "")
    return None


def _is_missing_stack(exc: ClientError) -> bool:
    err = exc.response.get("Error", {})
    return err.get("Code") == "ValidationError" and "does not exist" in err.get(
        "Message", ""
    )


class StackResolver:
    """Looks up ``<service>-<stage>`` and extracts the API id.

    Args:
        client_factory: Builds the CloudFormation client. Defaults to
            :func:`~exportswagger.aws.client_for`.
        output_key: Name of the stack output holding the endpoint URL.
    """

    def __init__(
        self,
        client_factory: ClientFactory = client_for,
        output_key: str = SERVICE_ENDPOINT_OUTPUT,
    ) -> None:
        self._client_factory = client_factory
        self._output_key = output_key

    def resolve(
        self, service_name: str, stage: str, region: str, credentials: Any
    ) -> ApiResolution:
        """Resolve the API id behind the ``<service_name>-<stage>`` stack.

        Issues a single ``DescribeStacks`` call.

        Returns:
            An :class:`~exportswagger.models.ApiResolution`. ``status`` is
            ``stack_not_found`` when CloudFormation does not know the
            stack and ``output_not_found`` when the stack has no usable
            endpoint output; ``api_id`` is empty in both cases.

        Raises:
            ResolutionError: For any other CloudFormation failure
                (access denied, throttling, network errors).
        """
        stack_name = f"{service_name}-{stage}"
        cfn = self._client_factory("cloudformation", region, credentials)
        logger.debug("DescribeStacks %s in %s", stack_name, region)

        try:
            response = cfn.describe_stacks(StackName=stack_name)
        except ClientError as exc:
            if _is_missing_stack(exc):
                logger.debug("Stack %s does not exist", stack_name)
                return ApiResolution(
                    stack_name=stack_name, status=ResolutionStatus.STACK_NOT_FOUND
                )
            raise ResolutionError(f"Cannot describe stack {stack_name}: {exc}") from exc
        except BotoCoreError as exc:
            raise ResolutionError(f"Cannot describe stack {stack_name}: {exc}") from exc

        stacks = response.get("Stacks") or []
        if not stacks:
            return ApiResolution(
                stack_name=stack_name, status=ResolutionStatus.STACK_NOT_FOUND
            )

        endpoint = find_output(stacks[0].get("Outputs") or [], self._output_key)
        api_id = api_id_from_endpoint(endpoint) if endpoint else ""
        if not api_id:
            logger.debug("Stack %s has no usable %s output", stack_name, self._output_key)
            return ApiResolution(
                stack_name=stack_name, status=ResolutionStatus.OUTPUT_NOT_FOUND
            )

        logger.debug("Resolved %s -> %s", stack_name, api_id)
        return ApiResolution(stack_name=stack_name, api_id=api_id)
