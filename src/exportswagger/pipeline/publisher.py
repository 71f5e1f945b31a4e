"""Write exported documents to S3, optionally securing them with a canned ACL.

Two modes, chosen by :attr:`PublishTarget.access_policy
<exportswagger.models.PublishTarget.access_policy>`:

* **Simple** (no ACL): one ``PutObject``. Nothing else is ever called.
* **Policy**: ``PutObject`` then ``PutObjectAcl``. If the ACL update fails
  the object is deleted again so it is never left reachable under the
  bucket's default permissions, and the ACL error is re-raised as a
  :class:`~exportswagger.exceptions.PublishError`. If that delete fails
  too, a :class:`~exportswagger.exceptions.CompensationError` is raised
  instead.
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from exportswagger.aws import ClientFactory, client_for
from exportswagger.exceptions import CompensationError, PublishError
from exportswagger.models import PublishedArtifact, PublishTarget, SpecDocument

logger = logging.getLogger(__name__)

_AWS_ERRORS = (ClientError, BotoCoreError)


class ArtifactPublisher:
    """Uploads one document per :meth:`publish` call.

    Args:
        client_factory: Builds the S3 client. Defaults to
            :func:`~exportswagger.aws.client_for`.
        region: Region for the S3 client. ``None`` lets boto3 pick.
    """

    def __init__(
        self, client_factory: ClientFactory = client_for, region: str | None = None
    ) -> None:
        self._client_factory = client_factory
        self._region = region

    def publish(
        self,
        document: SpecDocument,
        target: PublishTarget,
        key: str,
        credentials: Any,
        region: str | None = None,
    ) -> PublishedArtifact:
        """Write *document* to ``target.bucket``/*key*.

        *region* overrides the region given to the constructor.

        Returns:
            The :class:`~exportswagger.models.PublishedArtifact` that is now
            visible in the bucket.

        Raises:
            PublishError: The write failed, or the ACL update failed and
                the object was removed again. ``step`` says which.
            CompensationError: The ACL update failed and removing the
                object failed as well.
        """
        s3 = self._client_factory("s3", region or self._region, credentials)
        bucket = target.bucket

        logger.debug("PutObject s3://%s/%s (%d bytes)", bucket, key, len(document.body))
        try:
            s3.put_object(
                Bucket=bucket,
                Key=key,
                Body=document.body,
                ContentType=document.content_type,
            )
        except _AWS_ERRORS as exc:
            raise PublishError(
                f"Upload to s3://{bucket}/{key} failed: {exc}",
                bucket=bucket,
                key=key,
                step="write",
            ) from exc

        policy = target.access_policy
        if policy is not None:
            try:
                s3.put_object_acl(Bucket=bucket, Key=key, ACL=policy.value)
            except _AWS_ERRORS as exc:
                primary = PublishError(
                    f"Applying ACL '{policy.value}' to s3://{bucket}/{key} failed: {exc}",
                    bucket=bucket,
                    key=key,
                    step="apply_policy",
                )
                primary.__cause__ = exc
                self._compensate(s3, primary)
                raise primary from exc

        return PublishedArtifact(
            bucket=bucket,
            key=key,
            request=document.request,
            access_policy=policy,
        )

    def _compensate(self, s3: Any, primary: PublishError) -> None:
        """Delete the object named by *primary*; escalate if that fails."""
        logger.warning(
            "Rolling back s3://%s/%s after ACL failure", primary.bucket, primary.key
        )
        try:
            s3.delete_object(Bucket=primary.bucket, Key=primary.key)
        except _AWS_ERRORS as exc:
            logger.error(
                "Rollback of s3://%s/%s failed; object may be orphaned: %s",
                primary.bucket,
                primary.key,
                exc,
            )
            error = CompensationError(
                f"{primary} Rollback delete of s3://{primary.bucket}/{primary.key} "
                f"also failed: {exc}. The object may remain with the wrong ACL.",
                primary=primary,
                deletion_error=exc,
            )
            raise error from primary
