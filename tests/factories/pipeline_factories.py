"""
Test doubles and builders for pipeline tests.

No Azure, no origin server, no converter toolchain: the blob store lives in
memory, the origin is an httpx.MockTransport and converters write canned
bytes.
"""

import io
import zipfile
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple

import httpx

from config import AppConfig, ConverterConfig, SourceConfig, StorageConfig
from core.models import BlobAttributes
from exceptions import ConversionError, StoreError
from infrastructure.blob import IBlobRepository
from services.archive_source import ArchiveSource
from services.converters import ConverterSet, StageConverter
from services.pipeline import PrismPipeline


ORIGIN_URL = "https://origin.test/assets/prism.zip"
DEFAULT_LAST_MODIFIED = "Tue, 01 Jan 2030 00:00:00 GMT"
DEFAULT_VERSION_TAG = "2030-01-01T00:00:00Z"


# ============================================================================
# CONFIG
# ============================================================================

def make_app_config(staging_dir: Optional[str] = None, **storage_overrides) -> AppConfig:
    """AppConfig pointing at the fake origin and an in-memory container."""
    storage = {
        "account_name": "teststorage",
        "connection_string": None,
        "container": "nz-wireless-map",
    }
    storage.update(storage_overrides)
    return AppConfig(
        environment="test",
        source=SourceConfig(archive_url=ORIGIN_URL, database_entry="prism.mdb"),
        storage=StorageConfig(**storage),
        converters=ConverterConfig(staging_dir=staging_dir, timeout_seconds=30),
    )


# ============================================================================
# ARCHIVES
# ============================================================================

def make_zip_bytes(entries: Optional[Dict[str, bytes]] = None) -> bytes:
    """Build a zip archive in memory; defaults to one prism.mdb entry."""
    if entries is None:
        entries = {"prism.mdb": b"Standard Jet DB\x00" + b"\x01" * 64}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


# ============================================================================
# ORIGIN
# ============================================================================

class FakeOrigin:
    """
    httpx handler serving one archive.

    Records every request, and whether the body of a response was read.
    """

    def __init__(self, body: bytes = b"", last_modified: Optional[str] = DEFAULT_LAST_MODIFIED,
                 status_code: int = 200, error: Optional[Exception] = None):
        self.body = body
        self.last_modified = last_modified
        self.status_code = status_code
        self.error = error
        self.requests: List[httpx.Request] = []
        self.body_reads = 0

    def _stream(self):
        self.body_reads += 1
        yield self.body

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        headers = {"Content-Type": "application/zip"}
        if self.last_modified is not None:
            headers["Last-Modified"] = self.last_modified
        return httpx.Response(self.status_code, headers=headers, content=self._stream())

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def archive_source(self, config: Optional[AppConfig] = None) -> ArchiveSource:
        source = config.source if config is not None else SourceConfig(archive_url=ORIGIN_URL)
        return ArchiveSource(source, client=self.client())


# ============================================================================
# BLOB STORE
# ============================================================================

class InMemoryBlobRepository(IBlobRepository):
    """
    Dict-backed IBlobRepository.

    writes keeps every write_blob key in call order; fail_on lists keys
    whose write raises StoreError.
    """

    def __init__(self, container: str = "nz-wireless-map", existing: Optional[Dict[str, bytes]] = None,
                 fail_on: Tuple[str, ...] = (), fail_exists: bool = False):
        self._container = container
        self.blobs: Dict[str, Tuple[bytes, str]] = {
            key: (data, "application/octet-stream") for key, data in (existing or {}).items()
        }
        self.writes: List[str] = []
        self.exists_checks: List[str] = []
        self.fail_on = set(fail_on)
        self.fail_exists = fail_exists

    @property
    def container(self) -> str:
        return self._container

    def blob_exists(self, key: str) -> bool:
        self.exists_checks.append(key)
        if self.fail_exists:
            raise StoreError(f"error checking {self._container}/{key}: AuthenticationFailed")
        return key in self.blobs

    def write_blob(self, key: str, stream: BinaryIO,
                   content_type: str = "application/octet-stream") -> BlobAttributes:
        if key in self.fail_on:
            raise StoreError(f"error writing to blob storage {self._container}/{key}: connection reset")
        data = stream.read()
        self.blobs[key] = (data, content_type)
        self.writes.append(key)
        return self.get_blob_attributes(key)

    def get_blob_attributes(self, key: str) -> BlobAttributes:
        if key not in self.blobs:
            raise StoreError(f"blob not found: {self._container}/{key}")
        data, content_type = self.blobs[key]
        return BlobAttributes(
            name=key,
            container=self._container,
            size=len(data),
            etag=f'"0x{len(self.writes):04X}"',
            content_type=content_type,
        )

    def data(self, key: str) -> bytes:
        return self.blobs[key][0]


# ============================================================================
# CONVERTERS
# ============================================================================

class FakeConverter(StageConverter):
    """
    Converter that writes fixed output, or fails like a crashed process.

    inputs records the bytes found at each source path.
    """

    def __init__(self, stage: str, output: bytes = b"", error: Optional[str] = None,
                 config: Optional[ConverterConfig] = None):
        super().__init__(config or ConverterConfig(timeout_seconds=30))
        self.stage = stage
        self.output = output
        self.error = error
        self.inputs: List[bytes] = []

    def run(self, source: Path, destination: Path):
        self.inputs.append(Path(source).read_bytes())
        if self.error is not None:
            Path(destination).write_bytes(b"partial")
            raise ConversionError(self.stage, self.error, returncode=1, output="corrupt header")
        Path(destination).write_bytes(self.output)
        return self._result([self.stage], Path(destination), 0.0, "")


def make_converters(fail_stage: Optional[str] = None,
                    csv_output: bytes = b"licence,frequency\n1,2.4\n",
                    json_output: bytes = b'[{"licence": "1", "frequency": "2.4"}]') -> ConverterSet:
    """Three fake converters; fail_stage names the one that exits non-zero."""
    def error_for(stage: str) -> Optional[str]:
        return "couldn't convert" if stage == fail_stage else None

    return ConverterSet(
        relational=FakeConverter("mdb_to_sqlite", b"SQLite format 3\x00", error_for("mdb_to_sqlite")),
        tabular=FakeConverter("sqlite_to_csv", csv_output, error_for("sqlite_to_csv")),
        structured=FakeConverter("csv_to_json", json_output, error_for("csv_to_json")),
    )


def make_pipeline(tmp_path: Path, origin: Optional[FakeOrigin] = None,
                  repository: Optional[InMemoryBlobRepository] = None,
                  converters: Optional[ConverterSet] = None,
                  staging_factory: Optional[Callable] = None) -> PrismPipeline:
    """Pipeline wired to fakes, staging under tmp_path."""
    config = make_app_config(staging_dir=str(tmp_path))
    origin = origin or FakeOrigin(make_zip_bytes())
    kwargs = {}
    if staging_factory is not None:
        kwargs["staging_factory"] = staging_factory
    return PrismPipeline(
        config=config,
        blob_repository=repository if repository is not None else InMemoryBlobRepository(),
        archive_source=origin.archive_source(config),
        converters=converters or make_converters(),
        **kwargs,
    )
