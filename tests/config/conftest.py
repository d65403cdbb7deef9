"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "STORAGE_ACCOUNT_NAME", "STORAGE_CONNECTION_STRING", "PRISM_CONTAINER",
        "PRISM_RAW_PREFIX", "PRISM_TABULAR_PREFIX", "PRISM_STRUCTURED_PREFIX",
        "PRISM_ZIP_URL", "PRISM_DATABASE_ENTRY", "FETCH_TIMEOUT_SECONDS",
        "MDB_SQLITE_COMMAND", "SQLITE3_COMMAND", "CSV2JSON_COMMAND",
        "PRISM_QUERY_PATH", "CONVERTER_TIMEOUT_SECONDS", "STAGING_DIR",
        "PORT", "LOG_LEVEL", "DEBUG_LOGGING", "ENVIRONMENT",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
