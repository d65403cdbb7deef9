# ============================================================================
# CLAUDE CONTEXT - ARCHIVE SOURCE
# ============================================================================
# STATUS: Service - HTTP fetch of the published archive
# PURPOSE: Open the archive response, read its version marker, stream the body
# EXPORTS: ArchiveSource, FetchedArchive, parse_last_modified
# INTERFACES: Context manager (ArchiveSource.open)
# PYDANTIC_MODELS: None
# DEPENDENCIES: httpx, email.utils, config
# SOURCE: PRISM_ZIP_URL
# SCOPE: Step 1 of a pipeline run
# VALIDATION: Status code and Last-Modified checked before the body is read
# PATTERNS: Scoped acquisition, injectable HTTP client
# ENTRY_POINTS: with ArchiveSource(config.source).open() as archive: ...
# ============================================================================

"""
Archive Source.

Fetches the published archive with a streamed GET. The response headers
are checked as soon as they arrive:

    - transport failure or non-2xx status  -> FetchError
    - Last-Modified missing, empty, bad     -> TimestampError

Only then is a FetchedArchive handed to the caller, who decides (dedup
check) whether the body is worth reading at all. Unread bodies are never
downloaded; the response is closed when the with-block exits.

The version marker is the Last-Modified header, an HTTP date such as
"Tue, 01 Jan 2030 00:00:00 GMT", taken as UTC.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import BinaryIO, Iterator, Optional

import httpx

from config import SourceConfig
from exceptions import FetchError, TimestampError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ArchiveSource")


def parse_last_modified(value: Optional[str]) -> datetime:
    """
    Parse a Last-Modified header into an aware UTC datetime.

    Raises:
        TimestampError: Header missing, empty or not an HTTP date
    """
    if value is None or not value.strip():
        raise TimestampError(f"Couldn't parse Last-Modified header {value or ''!r}: header is missing or empty")
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError) as e:
        raise TimestampError(f"Couldn't parse Last-Modified header {value!r}: {e}") from e
    if parsed is None:
        raise TimestampError(f"Couldn't parse Last-Modified header {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class FetchedArchive:
    """
    An open archive response whose headers have been validated.

    The body has not been read yet; write_to() streams it.
    """

    def __init__(self, url: str, response: httpx.Response, version: datetime, chunk_size: int):
        self.url = url
        self.version = version
        self._response = response
        self._chunk_size = chunk_size
        self.bytes_read = 0

    def write_to(self, stream: BinaryIO) -> int:
        """
        Copy the response body into a writable binary stream.

        Returns:
            Number of bytes written

        Raises:
            FetchError: Connection dropped or timed out while reading the body
        """
        try:
            for chunk in self._response.iter_bytes(chunk_size=self._chunk_size):
                stream.write(chunk)
                self.bytes_read += len(chunk)
        except httpx.HTTPError as e:
            raise FetchError(f"error reading {self.url} after {self.bytes_read} bytes: {e}") from e
        logger.info(f"fetched {self.bytes_read} bytes")
        return self.bytes_read


class ArchiveSource:
    """
    Fetches the archive from the configured URL.

    A shared httpx.Client may be injected (tests use httpx.MockTransport);
    otherwise one client is created per open() call and closed with it.
    """

    def __init__(self, source: SourceConfig, client: Optional[httpx.Client] = None):
        self.source = source
        self._client = client

    @property
    def url(self) -> str:
        return self.source.archive_url

    def _new_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.source.fetch_timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": self.source.user_agent},
        )

    @contextmanager
    def open(self) -> Iterator[FetchedArchive]:
        """
        Send the GET and validate status and version marker.

        Yields:
            FetchedArchive with the parsed version, body unread

        Raises:
            FetchError: Transport failure or non-2xx status
            TimestampError: Last-Modified missing or unparseable
        """
        owns_client = self._client is None
        client = self._new_client() if owns_client else self._client
        try:
            logger.info(f"fetching {self.url}")
            try:
                response = client.send(client.build_request("GET", self.url), stream=True)
            except httpx.HTTPError as e:
                raise FetchError(f"error fetching {self.url}: {e}") from e

            try:
                logger.info(
                    f"Headers: {dict(response.headers)}",
                    extra={'custom_dimensions': {'status_code': response.status_code}}
                )
                if not response.is_success:
                    raise FetchError(f"error fetching {self.url}: unexpected HTTP status {response.status_code}")

                last_modified = response.headers.get("Last-Modified")
                logger.info(f"Last Modified: {last_modified}")
                version = parse_last_modified(last_modified)
                logger.info(f"Last Modified time: {version.isoformat()}")

                yield FetchedArchive(self.url, response, version, self.source.chunk_size)
            finally:
                response.close()
        finally:
            if owns_client:
                client.close()
