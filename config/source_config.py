# ============================================================================
# CLAUDE CONTEXT - SOURCE ARCHIVE CONFIGURATION
# ============================================================================
# STATUS: Configuration - fetch settings for the published archive
# PURPOSE: Archive URL, database entry name and HTTP client settings
# EXPORTS: SourceConfig
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: SourceConfig
# DEPENDENCIES: pydantic, os
# SOURCE: Environment variables (PRISM_ZIP_URL, PRISM_DATABASE_ENTRY, FETCH_TIMEOUT_SECONDS)
# SCOPE: Archive source
# VALIDATION: Pydantic v2 validation
# PATTERNS: Value object
# ENTRY_POINTS: from config import SourceConfig
# ============================================================================

"""
Source Archive Configuration.

Where the archive lives and how long the fetch may take. Read once at
process start; the archive source receives the resulting value.
"""

import os

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .defaults import SourceDefaults


class SourceConfig(BaseModel):
    """Settings for fetching the published archive."""

    # Environment values arrive as defaults through default_factory
    model_config = ConfigDict(frozen=True, validate_default=True)

    archive_url: str = Field(
        default_factory=lambda: os.getenv("PRISM_ZIP_URL", SourceDefaults.ARCHIVE_URL),
        description="URL of the published zip archive",
        examples=[SourceDefaults.ARCHIVE_URL]
    )

    database_entry: str = Field(
        default_factory=lambda: os.getenv("PRISM_DATABASE_ENTRY", SourceDefaults.DATABASE_ENTRY),
        description="Exact name of the database entry inside the archive"
    )

    fetch_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("FETCH_TIMEOUT_SECONDS", str(SourceDefaults.FETCH_TIMEOUT_SECONDS))),
        gt=0,
        description="HTTP client timeout for the archive download"
    )

    user_agent: str = Field(
        default=SourceDefaults.USER_AGENT,
        description="User-Agent header sent to the origin"
    )

    chunk_size: int = Field(
        default=SourceDefaults.CHUNK_SIZE,
        gt=0,
        description="Bytes per chunk when streaming the body to staging"
    )

    @field_validator('archive_url')
    @classmethod
    def validate_archive_url(cls, v: str) -> str:
        """Only http(s) origins can be fetched."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"archive_url must be an http(s) URL, got {v!r}")
        return v

    @classmethod
    def from_environment(cls) -> 'SourceConfig':
        """Load source configuration from environment variables."""
        return cls()  # Uses default_factory for each field

    def debug_dict(self) -> dict:
        """Return debug-friendly configuration."""
        return {
            "archive_url": self.archive_url,
            "database_entry": self.database_entry,
            "fetch_timeout_seconds": self.fetch_timeout_seconds,
        }
