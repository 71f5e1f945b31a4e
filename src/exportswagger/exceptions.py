"""Exception hierarchy for exportswagger.

All exceptions inherit from :class:`ExportSwaggerError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`exportswagger.exit_codes`. The top-level error handler in
:func:`exportswagger.app.main` catches ``ExportSwaggerError`` and exits with
the appropriate code, while unexpected exceptions produce a crash log and
exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ExportSwaggerError      (exit 1)
    +-- ConfigurationError  (exit 2)
    +-- CredentialsError    (exit 3)
    +-- ResolutionError     (exit 4)
    +-- ExportError         (exit 5)
    +-- PublishError        (exit 6)
    +-- CompensationError   (exit 7)
    +-- PluginError         (exit 10)
"""

from __future__ import annotations

from typing import Optional

from exportswagger.exit_codes import (
    EXIT_COMPENSATION_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_CREDENTIALS_ERROR,
    EXIT_EXPORT_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_PLUGIN_ERROR,
    EXIT_PUBLISH_FAILURE,
    EXIT_RESOLUTION_FAILURE,
)


class ExportSwaggerError(Exception):
    """Base exception for all exportswagger errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`exportswagger.exit_codes`. The entry point
    catches this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(ExportSwaggerError):
    """Raised for missing or invalid destination settings, before any AWS call."""

    exit_code = EXIT_CONFIG_ERROR


class CredentialsError(ExportSwaggerError):
    """Raised when no AWS credentials are available or the profile is unknown."""

    exit_code = EXIT_CREDENTIALS_ERROR


class ResolutionError(ExportSwaggerError):
    """Raised when the stack lookup fails or yields no API identifier."""

    exit_code = EXIT_RESOLUTION_FAILURE


class ExportError(ExportSwaggerError):
    """Raised when API Gateway rejects a ``GetExport`` request."""

    exit_code = EXIT_EXPORT_FAILURE


class PublishError(ExportSwaggerError):
    """Raised when writing an artifact or applying its ACL fails.

    When the ACL step fails after a successful write, the object has
    already been deleted by the time this error is raised, and
    ``__cause__`` is the original ACL error.

    Attributes:
        bucket: Destination bucket.
        key: Destination object key.
        step: ``"write"`` or ``"apply_policy"``.
    """

    exit_code = EXIT_PUBLISH_FAILURE

    def __init__(self, message: str, bucket: str, key: str, step: str):
        super().__init__(message)
        self.bucket = bucket
        self.key = key
        self.step = step


class CompensationError(ExportSwaggerError):
    """Raised when the rollback delete after a failed ACL update also fails.

    The object written under ``bucket``/``key`` may still exist with the
    bucket's default permissions. ``primary`` is the :class:`PublishError`
    that triggered the rollback (also chained as ``__cause__``), and
    ``deletion_error`` is the exception raised by the delete.
    """

    exit_code = EXIT_COMPENSATION_FAILURE

    def __init__(
        self,
        message: str,
        primary: PublishError,
        deletion_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.primary = primary
        self.deletion_error = deletion_error
        self.bucket = primary.bucket
        self.key = primary.key


class PluginError(ExportSwaggerError):
    """Raised when a plugin fails to load, initialise, or execute a hook."""

    exit_code = EXIT_PLUGIN_ERROR
