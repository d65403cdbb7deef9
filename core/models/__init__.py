"""
Core Data Models Package.

Contains pure data structures without business logic.

Exports:
    ArtifactKind, RunStatus: Enums
    PublicationLayout, BlobAttributes, PublicationRecord: Publication models
    format_version_tag: RFC3339 rendering of a version timestamp
    ConversionResult, PipelineRunResult: Result types
"""

# Enums
from .enums import ArtifactKind, RunStatus

# Publication models
from .publication import (
    RFC3339_FORMAT,
    format_version_tag,
    PublicationLayout,
    BlobAttributes,
    PublicationRecord
)

# Result models
from .results import ConversionResult, PipelineRunResult

__all__ = [
    'ArtifactKind',
    'RunStatus',
    'RFC3339_FORMAT',
    'format_version_tag',
    'PublicationLayout',
    'BlobAttributes',
    'PublicationRecord',
    'ConversionResult',
    'PipelineRunResult',
]
