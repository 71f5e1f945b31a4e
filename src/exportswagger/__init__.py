"""exportswagger -- Export API Gateway specs after a deploy and publish them to S3.

After a stack is deployed, this package looks up the REST API behind the
stack's ``ServiceEndpoint`` output, asks API Gateway for a generated
Swagger 2 / OpenAPI 3 document in JSON and/or YAML, and uploads each
document to S3, optionally applying a canned ACL.

Typical workflow::

    sls deploy --stage prod
    exportswagger export --stage prod

Modules:
    app: Typer application and CLI entry point.
    lifecycle: Deployment lifecycle hooks that invoke the pipeline.
    pipeline: Stack resolution, spec export, and artifact publishing.
    models: Pydantic models shared across the package.
    config: Project-file and environment configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
