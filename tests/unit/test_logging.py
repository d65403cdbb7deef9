"""
Component loggers, JSON output and stage timing.
"""

import json
import logging
import sys

import pytest

from util_logger import (
    ComponentType,
    JSONFormatter,
    LoggerFactory,
    LogLevel,
    NOISY_LIBRARY_LOGGERS,
    log_stage,
    quiet_library_loggers,
)


def dimensions(caplog):
    return [getattr(r, "custom_dimensions", {}) for r in caplog.records]


class TestLoggerFactory:

    def test_name_and_component_dimensions(self, caplog):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "LoggingTest")
        with caplog.at_level(logging.INFO):
            logger.info("hello", extra={'custom_dimensions': {'run_id': 'abc123'}})

        assert logger.name == "service.LoggingTest"
        assert dimensions(caplog)[-1] == {
            'component_type': 'service',
            'component_name': 'LoggingTest',
            'run_id': 'abc123',
        }

    def test_repeated_creation_keeps_one_handler(self):
        first = LoggerFactory.create_logger(ComponentType.ADAPTER, "Repeated")
        second = LoggerFactory.create_logger(ComponentType.ADAPTER, "Repeated")
        assert first is second
        assert sum(isinstance(h.formatter, JSONFormatter) for h in second.handlers) == 1

    @pytest.mark.parametrize("name, expected", [
        ("debug", LogLevel.DEBUG),
        ("WARNING", LogLevel.WARNING),
        ("chatty", LogLevel.INFO),
        ("", LogLevel.INFO),
    ])
    def test_level_lookup(self, name, expected):
        assert LogLevel.from_string(name) is expected


class TestJSONFormatter:

    def test_one_line_with_dimensions(self):
        record = logging.LogRecord("service.X", logging.WARNING, __file__, 10, "bytes %d", (42,), None)
        record.custom_dimensions = {'stage': 'fetch'}

        line = JSONFormatter().format(record)

        assert "\n" not in line
        payload = json.loads(line)
        assert payload['level'] == "WARNING"
        assert payload['message'] == "bytes 42"
        assert payload['customDimensions'] == {'stage': 'fetch'}

    def test_exception_details(self):
        try:
            raise ValueError("bad header")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        payload = json.loads(JSONFormatter().format(record))
        assert payload['exception']['type'] == "ValueError"
        assert payload['exception']['message'] == "bad header"
        assert "Traceback" in payload['exception']['traceback']


class TestLogStage:

    def test_start_and_end(self, caplog):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "StageTest")
        with caplog.at_level(logging.INFO):
            with log_stage(logger, "csv_to_json", run_id="r1"):
                pass

        messages = [r.getMessage() for r in caplog.records]
        assert messages[-2:] == ["▶️ START csv_to_json", "✅ END csv_to_json"]
        end = dimensions(caplog)[-1]
        assert end['stage'] == "csv_to_json"
        assert end['run_id'] == "r1"
        assert end['duration_ms'] >= 0

    def test_failure_logged_and_raised(self, caplog):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "StageFailTest")
        with caplog.at_level(logging.INFO):
            with pytest.raises(RuntimeError):
                with log_stage(logger, "mdb_to_sqlite"):
                    raise RuntimeError("converter crashed")

        last = caplog.records[-1]
        assert last.levelno == logging.ERROR
        assert last.getMessage() == "❌ END mdb_to_sqlite (ERROR): converter crashed"
        assert last.custom_dimensions['error_type'] == "RuntimeError"


def test_quiet_library_loggers():
    quiet_library_loggers()
    assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LIBRARY_LOGGERS)
