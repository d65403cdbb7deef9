"""
Services Package.

Business logic of the fetch pipeline. Everything is wired explicitly
through constructors; nothing registers itself on import.

Modules:
    archive_source: HTTP fetch of the archive and its Last-Modified version
    converters: External converter processes (mdb -> sqlite -> csv -> json)
    pipeline: PrismPipeline, the orchestrator tying the steps together
"""

from .archive_source import ArchiveSource, FetchedArchive, parse_last_modified
from .converters import (
    StageConverter,
    MdbToSqliteConverter,
    SqliteQueryConverter,
    CsvToJsonConverter,
    ConverterSet,
)
from .pipeline import PrismPipeline

__all__ = [
    'ArchiveSource',
    'FetchedArchive',
    'parse_last_modified',
    'StageConverter',
    'MdbToSqliteConverter',
    'SqliteQueryConverter',
    'CsvToJsonConverter',
    'ConverterSet',
    'PrismPipeline',
]
