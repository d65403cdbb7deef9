"""
Execution Result Data Models.

Represents the result of one pipeline run.
No business logic - pure data structures.

Exports:
    ConversionResult: Result of one external converter invocation
    PipelineRunResult: Result of a pipeline run that did not raise
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .enums import RunStatus
from .publication import PublicationRecord


class ConversionResult(BaseModel):
    """
    Successful converter invocation.

    Only built when every process of the stage exited 0; failures raise
    ConversionError instead.
    """

    stage: str = Field(..., description="Converter stage name")
    command: List[str] = Field(..., description="argv of the main process")
    output_path: str = Field(..., description="Where the converter output was written")
    output_size: int = Field(..., ge=0, description="Bytes of output")
    duration_ms: float = Field(..., ge=0)
    diagnostics: str = Field(default="", description="Captured stderr, usually empty")


class PipelineRunResult(BaseModel):
    """
    Result of a pipeline run.

    records lists every publication record in write order; it is empty for
    SKIPPED runs.
    """

    run_id: str = Field(..., description="Short identifier used in log lines")
    status: RunStatus
    source_url: str
    version: datetime = Field(..., description="Last-Modified of the fetched archive (UTC)")
    version_tag: str = Field(..., description="RFC3339 rendering used in the keys")
    records: List[PublicationRecord] = Field(default_factory=list)
    duration_ms: float = Field(..., ge=0)
    conversions: List[ConversionResult] = Field(default_factory=list)
    archive_size: Optional[int] = Field(default=None, description="Bytes of the fetched archive")

    @property
    def skipped(self) -> bool:
        return self.status == RunStatus.SKIPPED

    def summary(self) -> Dict[str, Any]:
        """Compact form for log custom dimensions."""
        return {
            'run_id': self.run_id,
            'status': self.status.value,
            'version': self.version_tag,
            'records': [r.key for r in self.records],
            'duration_ms': self.duration_ms,
        }
