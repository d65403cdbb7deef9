# ============================================================================
# CLAUDE CONTEXT - STORAGE CONFIGURATION
# ============================================================================
# STATUS: Configuration - publication target in Azure Blob Storage
# PURPOSE: Storage account, credentials, container and publication key prefixes
# EXPORTS: StorageConfig
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: StorageConfig
# DEPENDENCIES: pydantic, os, typing
# SOURCE: Environment variables (STORAGE_ACCOUNT_NAME, STORAGE_CONNECTION_STRING, PRISM_CONTAINER, PRISM_*_PREFIX)
# SCOPE: Storage-specific configuration
# VALIDATION: Pydantic v2 validation
# PATTERNS: Value object
# ENTRY_POINTS: from config import StorageConfig
# ============================================================================

"""
Azure Storage Configuration.

Provides configuration for:
- Authentication (connection string, or account name + DefaultAzureCredential)
- The publication container
- The key prefix of each artifact kind and the name of the latest alias
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .defaults import StorageDefaults


class StorageConfig(BaseModel):
    """
    Publication target settings.

    A connection string wins over the account name when both are set.
    """

    # Environment values arrive as defaults through default_factory
    model_config = ConfigDict(frozen=True, validate_default=True)

    account_name: str = Field(
        default_factory=lambda: os.getenv("STORAGE_ACCOUNT_NAME", StorageDefaults.DEFAULT_ACCOUNT_NAME),
        description="Storage account name, used with DefaultAzureCredential"
    )

    connection_string: Optional[str] = Field(
        default_factory=lambda: os.getenv("STORAGE_CONNECTION_STRING") or None,
        repr=False,
        description="Full connection string (local dev, Azurite)"
    )

    container: str = Field(
        default_factory=lambda: os.getenv("PRISM_CONTAINER", StorageDefaults.CONTAINER),
        description="Container receiving every publication record"
    )

    raw_prefix: str = Field(
        default_factory=lambda: os.getenv("PRISM_RAW_PREFIX", StorageDefaults.RAW_PREFIX),
        description="Key prefix of the raw archive records"
    )

    tabular_prefix: str = Field(
        default_factory=lambda: os.getenv("PRISM_TABULAR_PREFIX", StorageDefaults.TABULAR_PREFIX),
        description="Key prefix of the CSV extract records"
    )

    structured_prefix: str = Field(
        default_factory=lambda: os.getenv("PRISM_STRUCTURED_PREFIX", StorageDefaults.STRUCTURED_PREFIX),
        description="Key prefix of the JSON output records and the latest alias"
    )

    latest_alias: str = Field(
        default=StorageDefaults.LATEST_ALIAS,
        description="Name of the always-overwritten alias under the structured prefix"
    )

    @field_validator('raw_prefix', 'tabular_prefix', 'structured_prefix')
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefixes are a single path segment."""
        if not v or "/" in v:
            raise ValueError(f"key prefix must be a non-empty name without '/', got {v!r}")
        return v

    @property
    def account_url(self) -> str:
        """Blob endpoint used with token credentials."""
        return f"https://{self.account_name}.blob.core.windows.net"

    @property
    def uses_connection_string(self) -> bool:
        return bool(self.connection_string)

    @classmethod
    def from_environment(cls) -> 'StorageConfig':
        """Load storage configuration from environment variables."""
        return cls()  # Uses default_factory for each field

    def debug_dict(self) -> dict:
        """Return debug-friendly configuration with secrets masked."""
        return {
            "account": self.account_name,
            "connection_string": "***MASKED***" if self.connection_string else None,
            "container": self.container,
            "prefixes": {
                "raw": self.raw_prefix,
                "tabular": self.tabular_prefix,
                "structured": self.structured_prefix,
            },
            "latest_alias": self.latest_alias,
        }
