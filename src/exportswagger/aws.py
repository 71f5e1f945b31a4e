"""boto3 session and client construction.

The pipeline treats credentials as an opaque handle. In practice that
handle is a :class:`boto3.session.Session` created here from an optional
named profile, and every pipeline component turns it into a service client
through :func:`client_for`. Tests replace :func:`client_for` with a factory
returning stubbed clients.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import boto3
from botocore.client import BaseClient
from botocore.exceptions import NoCredentialsError, ProfileNotFound

from exportswagger.exceptions import CredentialsError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str, Any], BaseClient]
"""Signature of :func:`client_for`: ``(service_name, region, credentials) -> client``."""


def create_session(
    profile_name: Optional[str] = None, region: Optional[str] = None
) -> boto3.session.Session:
    """Create a boto3 session for the deployment account.

    Args:
        profile_name: Named profile from the shared AWS config files.
            ``None`` uses the default credential chain.
        region: Default region for clients created from the session.

    Raises:
        CredentialsError: If *profile_name* does not exist.
    """
    try:
        session = boto3.session.Session(profile_name=profile_name, region_name=region)
    except ProfileNotFound as exc:
        raise CredentialsError(f"AWS profile '{profile_name}' not found") from exc
    logger.debug("Created AWS session (profile=%s, region=%s)", profile_name, region)
    return session


def client_for(service_name: str, region: str, credentials: Any) -> BaseClient:
    """Build a boto3 client for *service_name* in *region*.

    Args:
        service_name: boto3 service name (``"cloudformation"``,
            ``"apigateway"``, ``"s3"``).
        region: Region the stack was deployed to.
        credentials: A :class:`boto3.session.Session`, or ``None`` to use
            the default session.
    """
    session = credentials if credentials is not None else boto3.session.Session()
    return session.client(service_name, region_name=region)


def require_credentials(session: boto3.session.Session) -> None:
    """Fail fast with :class:`CredentialsError` when no credentials resolve.

    Raises:
        CredentialsError: If the credential chain yields nothing.
    """
    try:
        found = session.get_credentials()
    except NoCredentialsError as exc:
        raise CredentialsError(str(exc)) from exc
    if found is None:
        raise CredentialsError(
            "No AWS credentials found. Configure a profile or set AWS_ACCESS_KEY_ID."
        )
