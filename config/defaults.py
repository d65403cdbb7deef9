"""
Configuration Defaults - Single source of truth for all default values.

Every default here works for the public PRISM publication without any
environment override. Storage credentials are the exception: either
STORAGE_CONNECTION_STRING or STORAGE_ACCOUNT_NAME must be set, otherwise
the blob repository cannot be created.

Organization:
    - SourceDefaults: Where and how the archive is fetched
    - StorageDefaults: Target container and publication key prefixes
    - ConverterDefaults: External converter command lines
    - AppDefaults: Process-level settings (port, logging, environment)

Usage:
    from config.defaults import SourceDefaults

    # In Pydantic Field definitions:
    url: str = Field(default=SourceDefaults.ARCHIVE_URL, ...)
"""


# =============================================================================
# SOURCE ARCHIVE DEFAULTS
# =============================================================================

class SourceDefaults:
    """Defaults for fetching the published archive."""

    ARCHIVE_URL = "https://www.rsm.govt.nz/assets/Uploads/documents/prism/prism.zip"

    # Name of the database entry inside the zip (exact match)
    DATABASE_ENTRY = "prism.mdb"

    # Applies to connect/read/write/pool; the archive is tens of MB
    FETCH_TIMEOUT_SECONDS = 300.0

    USER_AGENT = "prism-fetch/1.0"

    # Streaming chunk size when copying the body into staging
    CHUNK_SIZE = 1024 * 1024


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """Defaults for the publication container and key layout."""

    # Placeholder, must be overridden unless a connection string is set
    DEFAULT_ACCOUNT_NAME = "your-storage-account"

    CONTAINER = "nz-wireless-map"

    RAW_PREFIX = "prism.zip"
    TABULAR_PREFIX = "prism.csv"
    STRUCTURED_PREFIX = "prism.json"

    LATEST_ALIAS = "latest"


# =============================================================================
# CONVERTER DEFAULTS
# =============================================================================

class ConverterDefaults:
    """
    Command lines of the external converters.

    Relative paths resolve against the process working directory, which is
    where the Docker image copies the jar, the script and the query file.
    """

    MDB_SQLITE_COMMAND = "java -jar mdb-sqlite.jar"
    SQLITE3_COMMAND = "sqlite3"
    CSV2JSON_COMMAND = "python3 csv2json2.py"

    QUERY_PATH = "select_point_to_point_links.sql"
    ANALYZE_STATEMENT = "analyze main;"

    TIMEOUT_SECONDS = 600


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Process-level defaults."""

    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"
    DEBUG_LOGGING = False
    PORT = 8080
