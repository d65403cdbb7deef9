# ============================================================================
# CLAUDE CONTEXT - CONVERTER CONFIGURATION
# ============================================================================
# STATUS: Configuration - external converter processes
# PURPOSE: Command lines, extraction query, timeout and staging root
# EXPORTS: ConverterConfig
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: ConverterConfig
# DEPENDENCIES: pydantic, os, shlex, typing
# SOURCE: Environment variables (MDB_SQLITE_COMMAND, SQLITE3_COMMAND, CSV2JSON_COMMAND, PRISM_QUERY_PATH, CONVERTER_TIMEOUT_SECONDS, STAGING_DIR)
# SCOPE: Converter adapters and staging
# VALIDATION: Pydantic v2 validation
# PATTERNS: Value object
# ENTRY_POINTS: from config import ConverterConfig
# ============================================================================

"""
Converter Configuration.

Command lines are plain shell-style strings in the environment and are split
with shlex, never run through a shell.

    MDB_SQLITE_COMMAND="java -jar /opt/mdb-sqlite.jar"
    -> ["java", "-jar", "/opt/mdb-sqlite.jar"]
"""

import os
import shlex
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .defaults import ConverterDefaults


def _command_from_env(name: str, default: str) -> List[str]:
    return shlex.split(os.getenv(name, default))


class ConverterConfig(BaseModel):
    """Settings for the three external converters."""

    # Environment values arrive as defaults through default_factory
    model_config = ConfigDict(frozen=True, validate_default=True)

    mdb_sqlite_command: List[str] = Field(
        default_factory=lambda: _command_from_env("MDB_SQLITE_COMMAND", ConverterDefaults.MDB_SQLITE_COMMAND),
        description="Relational converter; invoked as <command> <mdb> <sqlite>"
    )

    sqlite3_command: List[str] = Field(
        default_factory=lambda: _command_from_env("SQLITE3_COMMAND", ConverterDefaults.SQLITE3_COMMAND),
        description="SQLite shell; used for the analyze pass and the extraction query"
    )

    csv2json_command: List[str] = Field(
        default_factory=lambda: _command_from_env("CSV2JSON_COMMAND", ConverterDefaults.CSV2JSON_COMMAND),
        description="Structuring converter; CSV on stdin, JSON on stdout"
    )

    query_path: str = Field(
        default_factory=lambda: os.getenv("PRISM_QUERY_PATH", ConverterDefaults.QUERY_PATH),
        description="SQL file fed to the SQLite shell to extract the CSV"
    )

    analyze_statement: str = Field(
        default=ConverterDefaults.ANALYZE_STATEMENT,
        description="Statement run on the converted database in place"
    )

    timeout_seconds: Optional[float] = Field(
        default_factory=lambda: float(os.getenv("CONVERTER_TIMEOUT_SECONDS", str(ConverterDefaults.TIMEOUT_SECONDS))) or None,
        ge=0,
        description="Per-process timeout; 0 disables it"
    )

    staging_dir: Optional[str] = Field(
        default_factory=lambda: os.getenv("STAGING_DIR") or None,
        description="Root for per-run staging directories (system temp dir when unset)"
    )

    @field_validator('mdb_sqlite_command', 'sqlite3_command', 'csv2json_command')
    @classmethod
    def validate_command(cls, v: List[str]) -> List[str]:
        """A command line needs at least the executable."""
        if not v:
            raise ValueError("converter command must not be empty")
        return v

    @classmethod
    def from_environment(cls) -> 'ConverterConfig':
        """Load converter configuration from environment variables."""
        return cls()  # Uses default_factory for each field

    def debug_dict(self) -> dict:
        """Return debug-friendly configuration."""
        return {
            "mdb_sqlite_command": " ".join(self.mdb_sqlite_command),
            "sqlite3_command": " ".join(self.sqlite3_command),
            "csv2json_command": " ".join(self.csv2json_command),
            "query_path": self.query_path,
            "timeout_seconds": self.timeout_seconds,
            "staging_dir": self.staging_dir,
        }
