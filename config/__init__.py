# ============================================================================
# CLAUDE CONTEXT - CONFIG PACKAGE
# ============================================================================
# STATUS: Configuration package
# PURPOSE: One frozen AppConfig per process, built from the environment
# EXPORTS: AppConfig, SourceConfig, StorageConfig, ConverterConfig,
#          get_config, reset_config, debug_config
# PYDANTIC_MODELS: AppConfig, SourceConfig, StorageConfig, ConverterConfig
# ENTRY_POINTS: from config import get_config
# ============================================================================

"""
PRISM fetch configuration.

AppConfig holds one sub-model per concern: where the archive comes from
(source_config), where results are published (storage_config) and how the
external converters are invoked (converter_config). Defaults live in
defaults.py; env_validation.py checks the raw variables at startup.

Only the deployment shells call get_config(). The pipeline and its
collaborators receive the value through their constructors, so tests build
AppConfig directly and never touch the environment.
"""

from typing import Optional

from .source_config import SourceConfig
from .storage_config import StorageConfig
from .converter_config import ConverterConfig
from .app_config import AppConfig


_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the process configuration, loading it on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Forget the loaded configuration so the next get_config() rereads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Configuration as a plain dict with secrets masked.

    Never raises: a configuration that fails to load is reported under 'error'.
    """
    try:
        config = get_config()
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}

    sections = {
        'source': config.source.debug_dict(),
        'storage': config.storage.debug_dict(),
        'converters': config.converters.debug_dict(),
    }
    sections.update(config.model_dump(include={'environment', 'debug_logging', 'log_level', 'port'}))
    return sections


__all__ = [
    'AppConfig',
    'SourceConfig',
    'StorageConfig',
    'ConverterConfig',
    'get_config',
    'reset_config',
    'debug_config',
]
