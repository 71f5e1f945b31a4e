"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to one stage of the export pipeline and is referenced by
the corresponding :class:`~exportswagger.exceptions.ExportSwaggerError`
subclass. Deploy scripts can branch on the exit code without parsing stderr.

Example::

    $ exportswagger export --stage prod
    $ echo $?
    7   # EXIT_COMPENSATION_FAILURE -- an object was left with the wrong ACL
"""

EXIT_SUCCESS = 0
"""All requested artifacts were exported and published."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_CONFIG_ERROR = 2
"""Required configuration is missing or invalid (nothing was sent to AWS)."""

EXIT_CREDENTIALS_ERROR = 3
"""AWS credentials could not be found or the named profile does not exist."""

EXIT_RESOLUTION_FAILURE = 4
"""The stack or its service endpoint output could not be found."""

EXIT_EXPORT_FAILURE = 5
"""API Gateway rejected the export request."""

EXIT_PUBLISH_FAILURE = 6
"""The S3 write or ACL update failed; no half-published object remains."""

EXIT_COMPENSATION_FAILURE = 7
"""The rollback delete failed; an object may be reachable under the wrong ACL."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to load, initialise, or execute."""
