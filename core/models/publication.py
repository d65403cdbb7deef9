# ============================================================================
# CLAUDE CONTEXT - PUBLICATION MODELS
# ============================================================================
# STATUS: Core - pure data models
# PURPOSE: Publication key layout, version tags and committed blob attributes
# EXPORTS: format_version_tag, PublicationLayout, BlobAttributes, PublicationRecord
# INTERFACES: None - pure data models
# PYDANTIC_MODELS: PublicationLayout, BlobAttributes, PublicationRecord
# DEPENDENCIES: pydantic, datetime, typing
# SCOPE: Key naming shared by the pipeline and the blob repository
# VALIDATION: Pydantic v2
# PATTERNS: Value objects
# ENTRY_POINTS: from core.models import PublicationLayout, PublicationRecord
# ============================================================================

"""
Publication Models.

Every artifact of a processed version is published under

    <kind prefix>/<RFC3339 version tag>     e.g. prism.json/2030-01-01T00:00:00Z

and the structured output additionally under <structured prefix>/latest.
The timestamped structured record is the durability marker: its existence
means the version was fully processed.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from .enums import ArtifactKind


RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_version_tag(version: datetime) -> str:
    """
    Render a version timestamp as RFC3339 in UTC with second precision.

    Naive datetimes are taken to be UTC.

    >>> format_version_tag(datetime(2030, 1, 1, tzinfo=timezone.utc))
    '2030-01-01T00:00:00Z'
    """
    if version.tzinfo is None:
        version = version.replace(tzinfo=timezone.utc)
    return version.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


class PublicationLayout(BaseModel):
    """Maps artifact kinds and versions to blob keys."""

    model_config = ConfigDict(frozen=True)

    raw_prefix: str = Field(default=ArtifactKind.RAW_ARCHIVE.value)
    tabular_prefix: str = Field(default=ArtifactKind.TABULAR.value)
    structured_prefix: str = Field(default=ArtifactKind.STRUCTURED.value)
    latest_alias: str = Field(default="latest")

    @classmethod
    def from_storage_config(cls, storage) -> 'PublicationLayout':
        return cls(
            raw_prefix=storage.raw_prefix,
            tabular_prefix=storage.tabular_prefix,
            structured_prefix=storage.structured_prefix,
            latest_alias=storage.latest_alias,
        )

    def prefix(self, kind: ArtifactKind) -> str:
        if kind is ArtifactKind.RAW_ARCHIVE:
            return self.raw_prefix
        if kind is ArtifactKind.TABULAR:
            return self.tabular_prefix
        return self.structured_prefix

    def versioned_key(self, kind: ArtifactKind, version: datetime) -> str:
        return f"{self.prefix(kind)}/{format_version_tag(version)}"

    def latest_key(self) -> str:
        return f"{self.structured_prefix}/{self.latest_alias}"

    def marker_key(self, version: datetime) -> str:
        """Key whose existence proves the version was fully processed."""
        return self.versioned_key(ArtifactKind.STRUCTURED, version)


class BlobAttributes(BaseModel):
    """Attributes of a committed blob as reported by the store."""

    name: str = Field(..., description="Blob key")
    container: str = Field(..., description="Container name")
    size: int = Field(..., ge=0, description="Committed size in bytes")
    etag: Optional[str] = Field(default=None)
    last_modified: Optional[datetime] = Field(default=None)
    content_type: Optional[str] = Field(default=None)


class PublicationRecord(BaseModel):
    """One publication record written by a pipeline run."""

    key: str = Field(..., description="Blob key")
    kind: ArtifactKind
    size: int = Field(..., ge=0, description="Committed size in bytes")
    etag: Optional[str] = Field(default=None)
    is_alias: bool = Field(default=False, description="True for the latest alias")

    @classmethod
    def from_attributes(cls, kind: ArtifactKind, attributes: BlobAttributes, is_alias: bool = False) -> 'PublicationRecord':
        return cls(
            key=attributes.name,
            kind=kind,
            size=attributes.size,
            etag=attributes.etag,
            is_alias=is_alias,
        )
