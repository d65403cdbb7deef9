"""
Structured JSON Logging.

Every component logs through a named logger from LoggerFactory. Each record
is written to stdout as one JSON object, which is what Application Insights
(Functions host) and container log collectors (Docker shell) ingest.

Loggers are process-wide and shared by concurrent pipeline runs. Per-run
identifiers therefore go into the message ("[run_id] ...") or into
extra={'custom_dimensions': {...}}, never onto the logger object.

Exports:
    ComponentType: Layer a logger belongs to
    LogLevel: Level names with conversion to logging constants
    ComponentConfig: Level settings for one layer
    JSONFormatter: One-line JSON formatter
    LoggerFactory: Creates component loggers
    log_stage: START/END/duration logging around one pipeline stage
    quiet_library_loggers: Silence chatty SDK loggers

Dependencies:
    Standard library only
"""

from enum import Enum
from typing import Dict, Optional
from datetime import datetime, timezone
from dataclasses import dataclass
import logging
import sys
import os
import json
import time
from contextlib import contextmanager


class ComponentType(Enum):
    """Layer of the service a logger belongs to; becomes the logger name prefix."""
    SERVICE = "service"        # Pipeline orchestration and archive source
    REPOSITORY = "repository"  # Blob storage and staging files
    FACTORY = "factory"        # Object creation layer
    TRIGGER = "trigger"        # HTTP entry points
    ADAPTER = "adapter"        # External converter processes
    VALIDATOR = "validator"    # Startup environment validation


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Case-insensitive lookup; unknown names fall back to INFO."""
        return cls.__members__.get((level or "").upper(), cls.INFO)


def _level_from_environment() -> LogLevel:
    # DEBUG_LOGGING=true wins over LOG_LEVEL
    if os.getenv("DEBUG_LOGGING", "").lower() == "true":
        return LogLevel.DEBUG
    return LogLevel.from_string(os.getenv("LOG_LEVEL", "INFO"))


@dataclass
class ComponentConfig:
    """Logging settings for one component layer."""
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


class JSONFormatter(logging.Formatter):
    """
    Render a record as a single JSON line.

    custom_dimensions (set by LoggerFactory loggers) are emitted under
    'customDimensions', the key Application Insights maps to its
    customDimensions column.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        dimensions = getattr(record, 'custom_dimensions', None)
        if dimensions:
            payload['customDimensions'] = dimensions

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            payload['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value) if exc_value else None,
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(payload, default=str)


class LoggerFactory:
    """
    Creates loggers named "<component_type>.<name>".

    Example:
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "PrismPipeline")
        logger.info("fetching archive")
    """

    DEFAULT_CONFIGS: Dict[ComponentType, ComponentConfig] = {
        component_type: ComponentConfig(component_type=component_type, log_level=_level_from_environment())
        for component_type in ComponentType
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Get the logger for a component, configuring it on first use.

        Args:
            component_type: Layer of the component
            name: Component name (e.g. "PrismPipeline")
            config: Overrides the layer's default level

        Returns:
            Logger with a JSON stdout handler; records carry component_type
            and component_name in their custom dimensions
        """
        config = config or cls.DEFAULT_CONFIGS[component_type]
        level = config.log_level.to_python_level()

        logger = logging.getLogger(f"{component_type.value}.{name}")
        logger.setLevel(level)

        # Repeated calls for the same name must not stack handlers
        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(level)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        # Azure's root logger forwards to Application Insights
        logger.propagate = True

        if not getattr(logger, '_component_wrapped', False):
            cls._inject_component(logger, component_type, name)

        return logger

    @staticmethod
    def _inject_component(logger: logging.Logger, component_type: ComponentType, name: str) -> None:
        """Wrap Logger._log so every record names its component."""
        original_log = logger._log
        identity = {'component_type': component_type.value, 'component_name': name}

        def _log(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
            extra = dict(extra or {})
            extra['custom_dimensions'] = {**identity, **extra.get('custom_dimensions', {})}
            original_log(level, msg, args, exc_info=exc_info, extra=extra,
                         stack_info=stack_info, stacklevel=stacklevel + 1)

        logger._log = _log
        logger._component_wrapped = True


@contextmanager
def log_stage(logger: logging.Logger, stage_name: str, **extra_fields):
    """
    Log START/END of a pipeline stage with its duration.

    Usage:
        with log_stage(logger, "mdb_to_sqlite", run_id=run_id):
            converter.run(mdb_path, sqlite_path)

    A failing block logs "END <stage> (ERROR)" and the exception propagates.
    """
    started = time.monotonic()
    logger.info(f"▶️ START {stage_name}", extra={'custom_dimensions': {'stage': stage_name, **extra_fields}})

    def dimensions(**more):
        elapsed = round((time.monotonic() - started) * 1000, 1)
        return {'custom_dimensions': {'stage': stage_name, 'duration_ms': elapsed, **more, **extra_fields}}

    try:
        yield
    except Exception as e:
        logger.error(f"❌ END {stage_name} (ERROR): {e}", extra=dimensions(error_type=type(e).__name__))
        raise
    logger.info(f"✅ END {stage_name}", extra=dimensions())


# SDK loggers that log every HTTP round trip at INFO
NOISY_LIBRARY_LOGGERS = (
    "azure.core",
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "azure.identity._internal",
    "azure.storage",
    "httpx",
    "msal",
)


def quiet_library_loggers(level: int = logging.WARNING) -> None:
    """Raise the threshold of NOISY_LIBRARY_LOGGERS so pipeline logs stay readable."""
    for name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(level)
