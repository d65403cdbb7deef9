# ============================================================================
# CLAUDE CONTEXT - PRISM PIPELINE
# ============================================================================
# STATUS: Service - pipeline orchestrator
# PURPOSE: One end-to-end run: fetch, dedup check, extract, convert, publish
# EXPORTS: PrismPipeline
# INTERFACES: PrismPipeline.run() -> PipelineRunResult
# PYDANTIC_MODELS: PipelineRunResult, PublicationRecord, ConversionResult
# DEPENDENCIES: zipfile, config, infrastructure, services
# SOURCE: AppConfig passed to the constructor
# SCOPE: Everything between the HTTP trigger and the blob store
# VALIDATION: Collaborator types checked at construction
# PATTERNS: Orchestrator, dependency injection, scoped acquisition
# ENTRY_POINTS: PrismPipeline(config, blob_repository, archive_source, converters).run()
# INDEX: PrismPipeline:72, run:125, _extract_database:203, _publish:240
# ============================================================================

"""
PRISM Pipeline Orchestrator.

One run, strictly sequential:

     1. fetch the archive, read Last-Modified       FetchError / TimestampError
     2. dedup check on prism.json/<version>         return SKIPPED if present
     3. stage the body, publish prism.zip/<version>
     4. locate prism.mdb in the zip                  NotFoundError / FetchError
     5. stage prism.mdb
     6. mdb -> sqlite, analyze                       ConversionError
     7. sqlite -> csv (extraction query)             ConversionError
     8. publish prism.csv/<version>
     9. csv -> json                                  ConversionError
    10. publish prism.json/<version>, then prism.json/latest

prism.json/<version> is the durability marker checked in step 2. It is
written before the latest alias, so a crash between the two writes leaves
latest lagging but never lets a half-processed version be skipped.

Every failure is fatal and propagates to the caller after the staging
area has been released. There is no retry: the scheduler calls again and
completed versions short-circuit at step 2.
"""

import shutil
import time
import uuid
import zipfile
import zlib
from datetime import datetime
from typing import Callable, List, Optional

from config import AppConfig
from core.models import (
    ArtifactKind,
    ConversionResult,
    PipelineRunResult,
    PublicationLayout,
    PublicationRecord,
    RunStatus,
    format_version_tag,
)
from exceptions import ContractViolationError, FetchError, NotFoundError, ResourceError
from infrastructure.blob import IBlobRepository
from infrastructure.staging import StagedFile, StagingArea
from services.archive_source import ArchiveSource
from services.converters import ConverterSet, StageConverter
from util_logger import LoggerFactory, ComponentType, log_stage

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "PrismPipeline")

COPY_BUFFER_SIZE = 1024 * 1024


class PrismPipeline:
    """
    Orchestrates one ingestion run per call to run().

    Holds no per-run state: concurrent runs on one instance each get their
    own staging area and run id.
    """

    def __init__(
        self,
        config: AppConfig,
        blob_repository: IBlobRepository,
        archive_source: ArchiveSource,
        converters: ConverterSet,
        staging_factory: Callable[[Optional[str]], StagingArea] = StagingArea,
    ):
        if not isinstance(config, AppConfig):
            raise ContractViolationError(f"config must be AppConfig, got {type(config).__name__}")
        if not isinstance(blob_repository, IBlobRepository):
            raise ContractViolationError(
                f"blob_repository must implement IBlobRepository, got {type(blob_repository).__name__}"
            )
        for name in ("relational", "tabular", "structured"):
            converter = getattr(converters, name, None)
            if not isinstance(converter, StageConverter):
                raise ContractViolationError(
                    f"converters.{name} must be a StageConverter, got {type(converter).__name__}"
                )

        self.config = config
        self.blob_repository = blob_repository
        self.archive_source = archive_source
        self.converters = converters
        self.staging_factory = staging_factory
        self.layout = PublicationLayout.from_storage_config(config.storage)

    @classmethod
    def from_config(cls, config: AppConfig) -> 'PrismPipeline':
        """Wire the production collaborators for a deployment shell."""
        from infrastructure.factory import RepositoryFactory

        return cls(
            config=config,
            blob_repository=RepositoryFactory.create_blob_repository(config),
            archive_source=ArchiveSource(config.source),
            converters=ConverterSet.from_config(config.converters),
            staging_factory=lambda root: RepositoryFactory.create_staging_area(config, root),
        )

    # ========================================================================
    # RUN
    # ========================================================================

    def run(self) -> PipelineRunResult:
        """
        Execute one run.

        Returns:
            PipelineRunResult with status PROCESSED (four records written) or
            SKIPPED (version already published, nothing written)

        Raises:
            FetchError, TimestampError, StoreError, NotFoundError,
            ConversionError, ResourceError: first fatal failure of the run
        """
        run_id = str(uuid.uuid4())[:8]
        started = time.monotonic()
        records: List[PublicationRecord] = []
        conversions: List[ConversionResult] = []

        logger.info(f"[{run_id}] 🚀 Pipeline run started for {self.archive_source.url}")

        with self.staging_factory(self.config.converters.staging_dir) as staging:
            # Steps 1-3: headers first, body only for unpublished versions
            with self.archive_source.open() as archive:
                version = archive.version
                version_tag = format_version_tag(version)

                if self._already_published(run_id, version):
                    logger.info(f"[{run_id}] ⏭️ {version_tag} already processed, skipping")
                    return self._build_result(
                        run_id, RunStatus.SKIPPED, version, started, records, conversions
                    )

                archive_file = staging.acquire(self.layout.raw_prefix)
                with log_stage(logger, "stage_archive", run_id=run_id):
                    try:
                        with archive_file.open("wb") as out:
                            archive_size = archive.write_to(out)
                    except OSError as e:
                        raise ResourceError(f"couldn't write {self.layout.raw_prefix} to staging: {e}") from e

            records.append(self._publish(run_id, ArtifactKind.RAW_ARCHIVE, version, archive_file))

            # Steps 4-5
            with log_stage(logger, "extract_database", run_id=run_id):
                database_file = self._extract_database(run_id, archive_file, staging)

            # Step 6
            sqlite_file = staging.acquire("prism.sqlite3")
            with log_stage(logger, "mdb_to_sqlite", run_id=run_id):
                conversions.append(self.converters.relational.run(database_file.path, sqlite_file.path))

            # Steps 7-8
            csv_file = staging.acquire(self.layout.tabular_prefix)
            with log_stage(logger, "sqlite_to_csv", run_id=run_id):
                conversions.append(self.converters.tabular.run(sqlite_file.path, csv_file.path))
            records.append(self._publish(run_id, ArtifactKind.TABULAR, version, csv_file))

            # Steps 9-10
            json_file = staging.acquire(self.layout.structured_prefix)
            with log_stage(logger, "csv_to_json", run_id=run_id):
                conversions.append(self.converters.structured.run(csv_file.path, json_file.path))
            records.append(self._publish(run_id, ArtifactKind.STRUCTURED, version, json_file))
            records.append(self._publish_latest(run_id, json_file))

        result = self._build_result(
            run_id, RunStatus.PROCESSED, version, started, records, conversions, archive_size
        )
        logger.info(
            f"[{run_id}] ✅ Pipeline run processed {version_tag} ({len(records)} records)",
            extra={'custom_dimensions': result.summary()}
        )
        return result

    # ========================================================================
    # STEPS
    # ========================================================================

    def _already_published(self, run_id: str, version: datetime) -> bool:
        marker = self.layout.marker_key(version)
        with log_stage(logger, "dedup_check", run_id=run_id, marker=marker):
            return self.blob_repository.blob_exists(marker)

    def _extract_database(self, run_id: str, archive_file: StagedFile, staging: StagingArea) -> StagedFile:
        """
        Copy the database entry out of the staged archive.

        Raises:
            FetchError: The staged payload is not a readable zip
            NotFoundError: No entry with exactly the configured name
            ResourceError: Staging disk full or unreadable
        """
        entry_name = self.config.source.database_entry

        logger.info(f"[{run_id}] opening zip")
        try:
            archive_zip = zipfile.ZipFile(archive_file.path)
        except zipfile.BadZipFile as e:
            raise FetchError(f"error opening zip: {e}") from e
        except OSError as e:
            raise ResourceError(f"couldn't open staged archive {archive_file.path}: {e}") from e

        with archive_zip:
            logger.info(f"[{run_id}] finding {entry_name}")
            entry = next((info for info in archive_zip.infolist() if info.filename == entry_name), None)
            if entry is None:
                raise NotFoundError(
                    f"couldn't find {entry_name}: no {entry_name} found in {self.layout.raw_prefix}"
                )

            database_file = staging.acquire(entry_name)
            logger.info(f"[{run_id}] saving {entry_name} to disk")
            try:
                with archive_zip.open(entry) as source, database_file.open("wb") as destination:
                    shutil.copyfileobj(source, destination, COPY_BUFFER_SIZE)
            except (zipfile.BadZipFile, NotImplementedError, EOFError, zlib.error) as e:
                raise FetchError(f"couldn't read {entry_name} from zip: {e}") from e
            except OSError as e:
                raise ResourceError(f"couldn't write {entry_name} to staging: {e}") from e

        logger.info(f"[{run_id}] read {database_file.size()} bytes from {entry_name}")
        return database_file

    def _publish(self, run_id: str, kind: ArtifactKind, version: datetime, staged: StagedFile) -> PublicationRecord:
        key = self.layout.versioned_key(kind, version)
        with log_stage(logger, f"publish {key}", run_id=run_id):
            with staged.open("rb") as stream:
                attributes = self.blob_repository.write_blob(key, stream, kind.content_type)
        return PublicationRecord.from_attributes(kind, attributes)

    def _publish_latest(self, run_id: str, staged: StagedFile) -> PublicationRecord:
        key = self.layout.latest_key()
        with log_stage(logger, f"publish {key}", run_id=run_id):
            with staged.open("rb") as stream:
                attributes = self.blob_repository.write_blob(key, stream, ArtifactKind.STRUCTURED.content_type)
        return PublicationRecord.from_attributes(ArtifactKind.STRUCTURED, attributes, is_alias=True)

    def _build_result(
        self,
        run_id: str,
        status: RunStatus,
        version: datetime,
        started: float,
        records: List[PublicationRecord],
        conversions: List[ConversionResult],
        archive_size: Optional[int] = None,
    ) -> PipelineRunResult:
        return PipelineRunResult(
            run_id=run_id,
            status=status,
            source_url=self.archive_source.url,
            version=version,
            version_tag=format_version_tag(version),
            records=records,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
            conversions=conversions,
            archive_size=archive_size,
        )
