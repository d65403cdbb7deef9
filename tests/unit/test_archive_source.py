"""
ArchiveSource tests against an httpx.MockTransport origin.
"""

import io
from datetime import datetime, timezone

import httpx
import pytest

from exceptions import FetchError, TimestampError
from services.archive_source import parse_last_modified
from tests.factories.pipeline_factories import FakeOrigin, ORIGIN_URL


class TestParseLastModified:

    def test_http_date(self):
        assert parse_last_modified("Tue, 01 Jan 2030 00:00:00 GMT") == datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_result_is_utc(self):
        parsed = parse_last_modified("Wed, 21 Oct 2015 07:28:00 +1300")
        assert parsed.utcoffset().total_seconds() == 0
        assert parsed == datetime(2015, 10, 20, 18, 28, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_or_empty(self, value):
        with pytest.raises(TimestampError, match="Couldn't parse Last-Modified header"):
            parse_last_modified(value)

    def test_garbage(self):
        with pytest.raises(TimestampError, match="yesterday"):
            parse_last_modified("yesterday")


class TestArchiveSourceOpen:

    def test_version_and_body(self, last_modified):
        origin = FakeOrigin(b"PK\x03\x04payload", last_modified=last_modified)
        source = origin.archive_source()

        with source.open() as archive:
            assert archive.version == datetime(2030, 1, 1, tzinfo=timezone.utc)
            buffer = io.BytesIO()
            assert archive.write_to(buffer) == len(b"PK\x03\x04payload")

        assert buffer.getvalue() == b"PK\x03\x04payload"
        assert str(origin.requests[0].url) == ORIGIN_URL
        assert origin.requests[0].method == "GET"

    def test_body_not_read_unless_requested(self, last_modified):
        origin = FakeOrigin(b"body", last_modified=last_modified)
        with origin.archive_source().open() as archive:
            assert archive.version.year == 2030
        assert origin.body_reads == 0

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header_fails_before_body(self, header):
        origin = FakeOrigin(b"body", last_modified=header)
        with pytest.raises(TimestampError):
            with origin.archive_source().open():
                pass
        assert origin.body_reads == 0

    @pytest.mark.parametrize("status", [403, 404, 500, 503])
    def test_error_status(self, status):
        origin = FakeOrigin(b"nope", status_code=status)
        with pytest.raises(FetchError, match=f"unexpected HTTP status {status}"):
            with origin.archive_source().open():
                pass
        assert origin.body_reads == 0

    def test_transport_error(self):
        origin = FakeOrigin(error=httpx.ConnectError("Name or service not known"))
        with pytest.raises(FetchError, match="error fetching") as exc_info:
            with origin.archive_source().open():
                pass
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_url_property(self):
        assert FakeOrigin().archive_source().url == ORIGIN_URL
