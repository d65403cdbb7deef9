# ============================================================================
# CLAUDE CONTEXT - STAGING AREA
# ============================================================================
# STATUS: Infrastructure - ephemeral on-disk staging for one pipeline run
# PURPOSE: Allocate uniquely-named staging files and guarantee their removal
# EXPORTS: StagingArea, StagedFile
# INTERFACES: Context manager
# PYDANTIC_MODELS: None
# DEPENDENCIES: tempfile, shutil, pathlib
# SCOPE: One StagingArea per run, never shared between runs
# VALIDATION: OSError translated to ResourceError
# PATTERNS: Scoped acquisition (with-statement)
# ENTRY_POINTS: with StagingArea(root) as staging: staging.acquire("prism.mdb")
# ============================================================================

"""
Staging Area for converter intermediates.

The external converters need real file paths, so every intermediate of a
run (archive, database, sqlite file, CSV, JSON) lives in a staging file.
Each run gets its own private directory; handles are deleted and the
directory removed when the with-block exits, whichever way it exits.

Usage:
    with StagingArea(root=config.converters.staging_dir) as staging:
        mdb = staging.acquire("prism.mdb")
        with mdb.open("wb") as f:
            f.write(data)
        converter.run(mdb.path, staging.acquire("prism.sqlite3").path)
    # everything under the run directory is gone here
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import IO, List, Optional

from exceptions import ResourceError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, __name__)


class StagedFile:
    """Handle of one staging file. Owned by the StagingArea that created it."""

    def __init__(self, path: Path, label: str):
        self._path = path
        self.label = label
        self.released = False

    @property
    def path(self) -> Path:
        return self._path

    def open(self, mode: str = "rb") -> IO:
        if self.released:
            raise ResourceError(f"staging file {self.label} already released")
        try:
            return open(self._path, mode)
        except OSError as e:
            raise ResourceError(f"couldn't open staging file {self._path}: {e}") from e

    def size(self) -> int:
        try:
            return self._path.stat().st_size
        except OSError as e:
            raise ResourceError(f"couldn't stat staging file {self._path}: {e}") from e

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"⚠️ couldn't delete staging file {self._path}: {e}")

    def __repr__(self) -> str:
        return f"StagedFile({self.label!r}, {str(self._path)!r})"


class StagingArea:
    """
    Private staging directory for one pipeline run.

    Not reusable: once released, acquire() raises ResourceError.
    """

    def __init__(self, root: Optional[str] = None, prefix: str = "prism_"):
        self.root = root
        self.prefix = prefix
        self.directory: Optional[Path] = None
        self._handles: List[StagedFile] = []
        self._released = False

    def __enter__(self) -> 'StagingArea':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.release()
        return False

    def open(self) -> None:
        if self._released:
            raise ResourceError("staging area already released")
        if self.directory is not None:
            return
        try:
            self.directory = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.root))
        except OSError as e:
            raise ResourceError(f"couldn't create staging directory under {self.root or tempfile.gettempdir()}: {e}") from e
        logger.debug(f"Created staging directory {self.directory}")

    @property
    def handles(self) -> List[StagedFile]:
        return list(self._handles)

    def acquire(self, label: str) -> StagedFile:
        """
        Create a new, empty, uniquely-named staging file.

        Args:
            label: Human-readable name used as the file name prefix

        Returns:
            StagedFile handle

        Raises:
            ResourceError: Disk full, permissions, or area not open / released
        """
        if self._released:
            raise ResourceError(f"couldn't create temp file {label}: staging area already released")
        if self.directory is None:
            raise ResourceError(f"couldn't create temp file {label}: staging area is not open")
        try:
            fd, name = tempfile.mkstemp(prefix=f"{label}.", dir=self.directory)
            os.close(fd)
        except OSError as e:
            raise ResourceError(f"couldn't create temp file {label}: {e}") from e

        handle = StagedFile(Path(name), label)
        self._handles.append(handle)
        logger.debug(f"Acquired staging file {handle.path}")
        return handle

    def release(self) -> None:
        """Delete every handle and the run directory. Safe to call repeatedly."""
        if self._released:
            return
        self._released = True
        for handle in self._handles:
            handle.release()
        if self.directory is not None:
            shutil.rmtree(self.directory, ignore_errors=True)
            if self.directory.exists():
                logger.warning(f"⚠️ couldn't remove staging directory {self.directory}")
            logger.debug(f"Released staging directory {self.directory} ({len(self._handles)} files)")

    @property
    def released(self) -> bool:
        return self._released

