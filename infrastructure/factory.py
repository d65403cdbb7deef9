# ============================================================================
# CLAUDE CONTEXT - REPOSITORY FACTORY
# ============================================================================
# STATUS: Infrastructure - Central factory for repository instances
# PURPOSE: Single creation point for the blob repository and staging areas
# EXPORTS: RepositoryFactory (static class with factory methods)
# INTERFACES: Creates instances implementing IBlobRepository
# PYDANTIC_MODELS: None - returns repository instances
# DEPENDENCIES: infrastructure.blob, infrastructure.staging, config
# SOURCE: AppConfig for credentials, container and staging root
# SCOPE: Repository creation for the deployment shells
# VALIDATION: Connection validation handled by individual repositories
# PATTERNS: Factory pattern, Dependency Injection
# ENTRY_POINTS: RepositoryFactory.create_blob_repository(config)
# ============================================================================

"""
Repository Factory - Central Creation Point

The deployment shells create every storage-facing object through this
factory so authentication choices live in one place.
"""

from typing import Optional

from config import AppConfig
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "RepositoryFactory")


# ============================================================================
# REPOSITORY FACTORY - Central creation point
# ============================================================================

class RepositoryFactory:
    """
    Factory for creating repository instances.
    """

    @staticmethod
    def create_blob_repository(config: AppConfig) -> 'BlobRepository':
        """
        Create blob storage repository with authentication.

        Connection string when configured, DefaultAzureCredential otherwise.

        Args:
            config: Application configuration

        Returns:
            BlobRepository instance cached per account and container
        """
        from .blob import BlobRepository

        storage = config.storage
        logger.info("🏭 Creating Blob Storage repository")
        logger.debug(f"  Storage account: {storage.account_name}")
        logger.debug(f"  Container: {storage.container}")
        logger.debug(f"  Use connection string: {storage.uses_connection_string}")

        blob_repo = BlobRepository.instance(storage)

        logger.info("✅ Blob repository created successfully")
        return blob_repo

    @staticmethod
    def create_staging_area(config: AppConfig, root: Optional[str] = None) -> 'StagingArea':
        """
        Create an (unopened) staging area for one run.

        Args:
            config: Application configuration
            root: Override for the staging root directory

        Returns:
            StagingArea to be used as a context manager
        """
        from .staging import StagingArea

        return StagingArea(root=root or config.converters.staging_dir)


__all__ = ['RepositoryFactory']
