"""
Top-level configuration model.

AppConfig carries the process settings (environment name, logging, port)
and one nested model per concern: SourceConfig, StorageConfig and
ConverterConfig. It is frozen; the deployment shell builds it once and the
pipeline keeps a reference.
"""

import os

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .source_config import SourceConfig
from .storage_config import StorageConfig
from .converter_config import ConverterConfig
from .defaults import AppDefaults


def _env_flag(name: str, default: bool) -> bool:
    return os.environ.get(name, str(default)).strip().lower() == "true"


class AppConfig(BaseModel):

    model_config = ConfigDict(frozen=True)

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Deployment name, used in log context only",
        examples=["dev", "qa", "prod"]
    )

    debug_logging: bool = Field(
        default=AppDefaults.DEBUG_LOGGING,
        description="Verbose DEBUG logging for every component"
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Level applied when debug_logging is off"
    )

    port: int = Field(
        default=AppDefaults.PORT,
        ge=1,
        le=65535,
        description="Listening port of the Docker service"
    )

    source: SourceConfig = Field(default_factory=SourceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    converters: ConverterConfig = Field(default_factory=ConverterConfig)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @classmethod
    def from_environment(cls) -> 'AppConfig':
        return cls(
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            debug_logging=_env_flag("DEBUG_LOGGING", AppDefaults.DEBUG_LOGGING),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            port=int(os.environ.get("PORT", str(AppDefaults.PORT))),
            source=SourceConfig.from_environment(),
            storage=StorageConfig.from_environment(),
            converters=ConverterConfig.from_environment(),
        )
