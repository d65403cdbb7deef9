# ============================================================================
# CLAUDE CONTEXT - STAGED CONVERTERS
# ============================================================================
# STATUS: Service - external converter processes
# PURPOSE: Run each format converter as a subprocess and translate its exit status
# EXPORTS: StageConverter, MdbToSqliteConverter, SqliteQueryConverter,
#          CsvToJsonConverter, ConverterSet
# INTERFACES: StageConverter.run(source, destination) -> ConversionResult
# PYDANTIC_MODELS: ConversionResult (core.models)
# DEPENDENCIES: subprocess, config
# SOURCE: MDB_SQLITE_COMMAND, SQLITE3_COMMAND, CSV2JSON_COMMAND, PRISM_QUERY_PATH
# SCOPE: Steps 6, 7 and 9 of a pipeline run
# VALIDATION: Only exit status 0 counts as success
# PATTERNS: Adapter, Template method
# ENTRY_POINTS: ConverterSet.from_config(config.converters)
# ============================================================================

"""
Staged Converters.

The format conversions are done by external programs, never in-process:

    mdb_to_sqlite   java -jar mdb-sqlite.jar <mdb> <sqlite>
                    sqlite3 <sqlite> "analyze main;"
    sqlite_to_csv   sqlite3 <sqlite>  < select_point_to_point_links.sql  > <csv>
    csv_to_json     python3 csv2json2.py  < <csv>  > <json>

Each converter reads from a source path and leaves its output at a
destination path. A process that cannot be started, times out, or exits
non-zero raises ConversionError carrying the captured diagnostic output;
whatever it left at the destination is then untrusted.
"""

import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional

from config import ConverterConfig
from core.models import ConversionResult
from exceptions import ConversionError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "StageConverter")


def _decode(output: Optional[bytes]) -> str:
    if not output:
        return ""
    if isinstance(output, str):
        return output
    return output.decode("utf-8", errors="replace")


class StageConverter(ABC):
    """
    One external conversion stage.

    Subclasses build the command lines and wire the channels; _execute
    runs a process and owns the error translation.
    """

    stage: str = "converter"

    def __init__(self, config: ConverterConfig):
        self.config = config

    @abstractmethod
    def run(self, source: Path, destination: Path) -> ConversionResult:
        """Convert source into destination. Raises ConversionError on failure."""
        pass

    def _execute(
        self,
        argv: List[str],
        failure_message: str,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
    ) -> str:
        """
        Run one process to completion.

        When stdout is given the process writes into it and only stderr is
        captured; otherwise stdout and stderr are captured combined.

        Returns:
            Captured diagnostic output

        Raises:
            ConversionError: Process not started, timed out, or exit status != 0
        """
        logger.info(f"{self.stage}: running {' '.join(argv)}")
        try:
            completed = subprocess.run(
                argv,
                stdin=stdin if stdin is not None else subprocess.DEVNULL,
                stdout=stdout if stdout is not None else subprocess.PIPE,
                stderr=subprocess.PIPE if stdout is not None else subprocess.STDOUT,
                timeout=self.config.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise ConversionError(
                self.stage,
                f"{failure_message}: timed out after {self.config.timeout_seconds}s",
                output=_decode(e.stderr if stdout is not None else e.output),
            ) from e
        except OSError as e:
            raise ConversionError(self.stage, f"{failure_message}: couldn't start {argv[0]}: {e}") from e

        diagnostics = _decode(completed.stderr if stdout is not None else completed.stdout)
        if completed.returncode != 0:
            logger.error(f"{self.stage}: {argv[0]} exited with status {completed.returncode}")
            raise ConversionError(self.stage, failure_message, returncode=completed.returncode, output=diagnostics)
        if diagnostics.strip():
            logger.debug(f"{self.stage}: {argv[0]} output: {diagnostics.strip()[:2000]}")
        return diagnostics

    def _result(self, argv: List[str], destination: Path, started: float, diagnostics: str) -> ConversionResult:
        return ConversionResult(
            stage=self.stage,
            command=argv,
            output_path=str(destination),
            output_size=destination.stat().st_size,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
            diagnostics=diagnostics,
        )


class MdbToSqliteConverter(StageConverter):
    """Relational converter plus the in-place analyze pass."""

    stage = "mdb_to_sqlite"

    def run(self, source: Path, destination: Path) -> ConversionResult:
        started = time.monotonic()
        argv = [*self.config.mdb_sqlite_command, str(source), str(destination)]
        diagnostics = self._execute(argv, "couldn't convert to sqlite3")

        analyze_argv = [*self.config.sqlite3_command, str(destination), self.config.analyze_statement]
        diagnostics += self._execute(analyze_argv, "couldn't analyze db")

        return self._result(argv, destination, started, diagnostics)


class SqliteQueryConverter(StageConverter):
    """Feeds the extraction query to the SQLite shell, CSV comes out on stdout."""

    stage = "sqlite_to_csv"

    def run(self, source: Path, destination: Path) -> ConversionResult:
        started = time.monotonic()
        argv = [*self.config.sqlite3_command, str(source)]
        try:
            query = open(self.config.query_path, "rb")
        except OSError as e:
            raise ConversionError(self.stage, f"couldn't open query file {self.config.query_path}: {e}") from e

        with query, open(destination, "wb") as out:
            diagnostics = self._execute(argv, "couldn't select", stdin=query, stdout=out)

        return self._result(argv, destination, started, diagnostics)


class CsvToJsonConverter(StageConverter):
    """Structuring converter: CSV on stdin, JSON on stdout."""

    stage = "csv_to_json"

    def run(self, source: Path, destination: Path) -> ConversionResult:
        started = time.monotonic()
        argv = list(self.config.csv2json_command)
        with open(source, "rb") as csv_in, open(destination, "wb") as out:
            diagnostics = self._execute(argv, "couldn't convert to json", stdin=csv_in, stdout=out)

        return self._result(argv, destination, started, diagnostics)


@dataclass(frozen=True)
class ConverterSet:
    """The three converters a pipeline run uses, in run order."""

    relational: StageConverter
    tabular: StageConverter
    structured: StageConverter

    @classmethod
    def from_config(cls, config: ConverterConfig) -> 'ConverterSet':
        return cls(
            relational=MdbToSqliteConverter(config),
            tabular=SqliteQueryConverter(config),
            structured=CsvToJsonConverter(config),
        )
