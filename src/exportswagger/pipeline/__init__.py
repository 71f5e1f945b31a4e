"""Stack resolution, spec export, and artifact publishing.

* :class:`StackResolver` -- CloudFormation outputs -> REST API id.
* :class:`SpecExporter` -- API Gateway ``GetExport`` -> raw document.
* :class:`ArtifactPublisher` -- S3 upload with optional ACL and rollback.
* :class:`ExportPipeline` -- runs the three in sequence.
"""

from exportswagger.pipeline.exporter import SpecExporter
from exportswagger.pipeline.orchestrator import ExportPipeline
from exportswagger.pipeline.publisher import ArtifactPublisher
from exportswagger.pipeline.resolver import StackResolver

__all__ = ["ArtifactPublisher", "ExportPipeline", "SpecExporter", "StackResolver"]
