"""
Pure Enumeration Types.

No business logic - pure type definitions only.

Exports:
    ArtifactKind: Kind of publication record (doubles as the default key prefix)
    RunStatus: Outcome of a pipeline run that did not raise
"""

from enum import Enum


class ArtifactKind(str, Enum):
    """
    Kinds of publication records.

    Values are the default key prefixes; deployments may override the
    prefixes through StorageConfig without changing the kinds.
    """

    RAW_ARCHIVE = "prism.zip"
    TABULAR = "prism.csv"
    STRUCTURED = "prism.json"

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]


_CONTENT_TYPES = {
    ArtifactKind.RAW_ARCHIVE: "application/zip",
    ArtifactKind.TABULAR: "text/csv",
    ArtifactKind.STRUCTURED: "application/json",
}


class RunStatus(str, Enum):
    """
    Outcome of a pipeline run.

    Failed runs raise instead of returning a status.
    """

    PROCESSED = "processed"  # New version converted and published
    SKIPPED = "skipped"      # Version already published, nothing written
