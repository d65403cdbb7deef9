# ============================================================================
# ENVIRONMENT CHECKS
# ============================================================================
# STATUS: Configuration - format rules for every environment variable
# PURPOSE: Report misconfiguration at startup instead of at the first /fetch
# ============================================================================
"""
Startup checks for the service's environment variables.

Each variable the service reads has an EnvVarRule: a regex for its format,
whether it is required, and a hint shown to the operator when it is wrong.
The Docker shell logs the results at startup and serves them on /readyz; the
fetch trigger refuses to build the pipeline while any error remains.

Usage:
    from config.env_validation import validate_environment

    for problem in validate_environment(include_warnings=False):
        print(problem.var_name, problem.message, problem.fix_suggestion)

STORAGE_ACCOUNT_NAME is the only required variable, and only while
STORAGE_CONNECTION_STRING is unset.

Exports:
    ENV_VAR_RULES: Rule per variable name
    EnvVarRule: One rule
    ValidationError: One failed check (error or warning)
    validate_single_var: Check one variable
    validate_environment: Check all variables
    log_validation_results: Log a full check, True when no errors
"""

import os
import re
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Pattern, Any


_SENSITIVE_MARKERS = ("password", "secret", "key", "token", "connection")
_MAX_SHOWN_CHARS = 30


@dataclass
class ValidationError:
    """
    A variable that failed its rule.

    severity is "error" for a bad or missing value and "warning" for an
    unset optional variable that falls back to its default.
    """
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["current_value"] = self._displayed_value()
        return data

    def _displayed_value(self) -> Optional[str]:
        # Secrets never leave the process; long values are cut for readability
        value = self.current_value
        if value is None:
            return None
        if any(marker in self.var_name.lower() for marker in _SENSITIVE_MARKERS):
            return "***MASKED***"
        if len(value) > _MAX_SHOWN_CHARS:
            return f"{value[:20]}...({len(value)} chars)"
        return value


@dataclass
class EnvVarRule:
    """
    Format and presence rule for one variable.

    required_unless names a second variable whose presence makes this one
    optional. A default_value with warn_on_default produces a warning when
    the variable is unset.
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    allow_empty: bool = False
    default_value: Optional[str] = None
    warn_on_default: bool = True
    required_unless: Optional[str] = None

    def is_required(self) -> bool:
        if self.required_unless and os.environ.get(self.required_unless):
            return False
        return self.required

    def hint(self) -> str:
        return f"{self.fix_suggestion}. Example: {self.example}"


# ============================================================================
# RULES
# ============================================================================

# Reusable formats
_AZURE_STORAGE_ACCOUNT = re.compile(r"^[a-z0-9]{3,24}$")
_AZURE_CONTAINER = re.compile(r"^[a-z0-9](?!.*--)[a-z0-9-]{1,61}[a-z0-9]$")
_CONNECTION_STRING = re.compile(r"^(UseDevelopmentStorage=true|.*AccountName=[^;]+.*|.*BlobEndpoint=[^;]+.*)$")
_HTTP_URL = re.compile(r"^https?://[^\s/]+(/\S*)?$")
_KEY_SEGMENT = re.compile(r"^[^/\s]+$")
_NON_EMPTY = re.compile(r"^\S.*$")
_POSITIVE_INT = re.compile(r"^[1-9]\d*$")
_NON_NEGATIVE_NUMBER = re.compile(r"^\d+(\.\d+)?$")
_POSITIVE_NUMBER = re.compile(r"^(?!0+(\.0+)?$)\d+(\.\d+)?$")
_LOG_LEVEL = re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE)
_BOOLEAN = re.compile(r"^(true|false)$", re.IGNORECASE)
_ENVIRONMENT = re.compile(r"^(dev|qa|uat|test|staging|prod|production)$", re.IGNORECASE)


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # =========================================================================
    # STORAGE (Critical - publication target)
    # =========================================================================
    "STORAGE_ACCOUNT_NAME": EnvVarRule(
        pattern=_AZURE_STORAGE_ACCOUNT,
        pattern_description="Lowercase alphanumeric, 3-24 characters",
        required=True,
        required_unless="STORAGE_CONNECTION_STRING",
        fix_suggestion="Use the storage account name only, not the full URL",
        example="prismstorage",
    ),

    "STORAGE_CONNECTION_STRING": EnvVarRule(
        pattern=_CONNECTION_STRING,
        pattern_description="Azure Storage connection string (AccountName=... or BlobEndpoint=...)",
        required=False,
        warn_on_default=False,
        fix_suggestion="Copy the connection string from the storage account access keys, "
                       "or unset it to use DefaultAzureCredential",
        example="DefaultEndpointsProtocol=https;AccountName=prismstorage;AccountKey=...",
    ),

    "PRISM_CONTAINER": EnvVarRule(
        pattern=_AZURE_CONTAINER,
        pattern_description="Lowercase letters, numbers and single hyphens, 3-63 characters",
        required=False,
        default_value="nz-wireless-map",
        fix_suggestion="Use a valid blob container name",
        example="nz-wireless-map",
    ),

    "PRISM_RAW_PREFIX": EnvVarRule(
        pattern=_KEY_SEGMENT,
        pattern_description="Single key segment without '/' or whitespace",
        required=False,
        default_value="prism.zip",
        warn_on_default=False,
        fix_suggestion="Use a plain name like 'prism.zip'",
        example="prism.zip",
    ),

    "PRISM_TABULAR_PREFIX": EnvVarRule(
        pattern=_KEY_SEGMENT,
        pattern_description="Single key segment without '/' or whitespace",
        required=False,
        default_value="prism.csv",
        warn_on_default=False,
        fix_suggestion="Use a plain name like 'prism.csv'",
        example="prism.csv",
    ),

    "PRISM_STRUCTURED_PREFIX": EnvVarRule(
        pattern=_KEY_SEGMENT,
        pattern_description="Single key segment without '/' or whitespace",
        required=False,
        default_value="prism.json",
        warn_on_default=False,
        fix_suggestion="Use a plain name like 'prism.json'",
        example="prism.json",
    ),

    # =========================================================================
    # SOURCE ARCHIVE
    # =========================================================================
    "PRISM_ZIP_URL": EnvVarRule(
        pattern=_HTTP_URL,
        pattern_description="http:// or https:// URL of the zip archive",
        required=False,
        default_value="https://www.rsm.govt.nz/assets/Uploads/documents/prism/prism.zip",
        fix_suggestion="Use the full URL including the scheme",
        example="https://www.rsm.govt.nz/assets/Uploads/documents/prism/prism.zip",
    ),

    "PRISM_DATABASE_ENTRY": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Exact entry name inside the archive",
        required=False,
        default_value="prism.mdb",
        warn_on_default=False,
        fix_suggestion="Use the entry name as listed by 'unzip -l prism.zip'",
        example="prism.mdb",
    ),

    "FETCH_TIMEOUT_SECONDS": EnvVarRule(
        pattern=_POSITIVE_NUMBER,
        pattern_description="Positive number of seconds",
        required=False,
        default_value="300",
        warn_on_default=False,
        fix_suggestion="Use a number like 300",
        example="300",
    ),

    # =========================================================================
    # CONVERTERS
    # =========================================================================
    "MDB_SQLITE_COMMAND": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Command line of the MDB to SQLite converter",
        required=False,
        default_value="java -jar mdb-sqlite.jar",
        fix_suggestion="Point at the converter jar, e.g. 'java -jar /opt/mdb-sqlite.jar'",
        example="java -jar mdb-sqlite.jar",
    ),

    "SQLITE3_COMMAND": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Command line of the sqlite3 shell",
        required=False,
        default_value="sqlite3",
        warn_on_default=False,
        fix_suggestion="Install sqlite3 or give its full path",
        example="/usr/bin/sqlite3",
    ),

    "CSV2JSON_COMMAND": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Command line of the CSV to JSON converter",
        required=False,
        default_value="python3 csv2json2.py",
        fix_suggestion="Point at the converter script, e.g. 'python3 /opt/csv2json2.py'",
        example="python3 csv2json2.py",
    ),

    "PRISM_QUERY_PATH": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Path of the SQL extraction query",
        required=False,
        default_value="select_point_to_point_links.sql",
        fix_suggestion="Point at the .sql file shipped with the image",
        example="select_point_to_point_links.sql",
    ),

    "CONVERTER_TIMEOUT_SECONDS": EnvVarRule(
        pattern=_NON_NEGATIVE_NUMBER,
        pattern_description="Non-negative number of seconds (0 disables the timeout)",
        required=False,
        default_value="600",
        warn_on_default=False,
        fix_suggestion="Use a number like 600",
        example="600",
    ),

    "STAGING_DIR": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Existing writable directory for per-run staging files",
        required=False,
        warn_on_default=False,
        fix_suggestion="Point at a local disk with room for the archive and its extracts, "
                       "or unset it to use the system temp directory",
        example="/tmp/prism",
    ),

    # =========================================================================
    # PROCESS
    # =========================================================================
    "PORT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer (default 8080)",
        required=False,
        default_value="8080",
        warn_on_default=False,
        fix_suggestion="Use a valid port number like 8080",
        example="8080",
    ),

    "LOG_LEVEL": EnvVarRule(
        pattern=_LOG_LEVEL,
        pattern_description="DEBUG, INFO, WARNING, ERROR or CRITICAL",
        required=False,
        default_value="INFO",
        warn_on_default=False,
        fix_suggestion="Use a standard logging level name",
        example="INFO",
    ),

    "DEBUG_LOGGING": EnvVarRule(
        pattern=_BOOLEAN,
        pattern_description="true or false",
        required=False,
        default_value="false",
        warn_on_default=False,
        fix_suggestion="Use 'true' or 'false'",
        example="false",
    ),

    "ENVIRONMENT": EnvVarRule(
        pattern=_ENVIRONMENT,
        pattern_description="dev, qa, uat, test, staging, prod or production",
        required=False,
        default_value="dev",
        fix_suggestion="Use one of the known environment names",
        example="prod",
    ),
}



# ============================================================================
# CHECKS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[ValidationError]:
    """
    Check one variable against its rule.

    Returns:
        None when the value is fine (or unset and optional without a warning),
        otherwise the error or warning
    """
    value = os.environ.get(var_name)
    missing = value is None or (value == "" and not rule.allow_empty)

    if missing and rule.is_required():
        message = "Required environment variable not set"
        if rule.required_unless:
            message = f"{message} (and {rule.required_unless} is not set either)"
        return ValidationError(var_name, message, value, rule.pattern_description, rule.hint())

    if not value:
        if include_warnings and rule.warn_on_default and rule.default_value is not None:
            return ValidationError(
                var_name,
                "Not set, using default value",
                None,
                f"Default: {rule.default_value}",
                f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if rule.pattern.match(value) is None:
        return ValidationError(var_name, "Invalid format", value, rule.pattern_description, rule.hint())

    return None


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[ValidationError]:
    """Check every variable in rules (ENV_VAR_RULES by default), in rule order."""
    checked = (
        validate_single_var(name, rule, include_warnings=include_warnings)
        for name, rule in (ENV_VAR_RULES if rules is None else rules).items()
    )
    return [problem for problem in checked if problem is not None]


def log_validation_results(logger=None) -> bool:
    """
    Run all checks and log them.

    Errors go to ERROR with their fix hint, defaults in use to WARNING.
    Without a logger the lines are printed, for use before logging is set up.

    Returns:
        False if any variable has an error
    """
    problems = validate_environment(include_warnings=True)
    errors = [p for p in problems if p.is_error]
    defaults = [p for p in problems if not p.is_error]

    def emit(level: str, msg: str):
        if logger is None:
            print(f"[{level.upper()}] {msg}")
        else:
            getattr(logger, level)(msg)

    for error in errors:
        emit("error", f"ENV VAR ERROR: {error.var_name} - {error.message} "
                      f"(expected {error.expected_pattern}; fix: {error.fix_suggestion})")

    if defaults:
        emit("warning", f"ENV VARS: {len(defaults)} optional variables using defaults: " + ", ".join(
            f"{d.var_name}={d.expected_pattern.replace('Default: ', '')}" for d in defaults
        ))

    if errors:
        emit("error", f"❌ STARTUP_FAILED: {len(errors)} environment variable errors")
        return False

    emit("info", f"✅ Environment validation passed ({len(defaults)} vars using defaults)")
    return True


__all__ = [
    "ENV_VAR_RULES",
    "EnvVarRule",
    "ValidationError",
    "validate_environment",
    "validate_single_var",
    "log_validation_results",
]
