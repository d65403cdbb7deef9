# ============================================================================
# CLAUDE CONTEXT - BLOB REPOSITORY
# ============================================================================
# STATUS: Infrastructure - Azure Blob Storage repository
# PURPOSE: Publication record storage with managed authentication
# EXPORTS: IBlobRepository, BlobRepository
# INTERFACES: IBlobRepository for dependency injection
# PYDANTIC_MODELS: BlobAttributes (core.models)
# DEPENDENCIES: azure-storage-blob, azure-identity, azure-core, config
# SOURCE: Azure Blob Storage container holding the publication records
# SCOPE: All blob operations of the fetch pipeline
# VALIDATION: Azure errors translated to StoreError
# PATTERNS: Singleton per container, Repository, DefaultAzureCredential
# ENTRY_POINTS: RepositoryFactory.create_blob_repository(config)
# INDEX: IBlobRepository:72, BlobRepository:107, blob_exists:189, write_blob:213, get_blob_attributes:252
# ============================================================================

"""
Blob Storage Repository - Central Authentication Point

This module provides the blob storage repository the pipeline publishes
through. One repository is bound to one container; keys are the
publication keys (e.g. "prism.json/2030-01-01T00:00:00Z").

Key Features:
- Connection string (local dev, Azurite) or DefaultAzureCredential
- Existence checks answer False for missing blobs, never raise for them
- Uploads are block blobs: Azure commits the block list only after every
  block is staged, so a failed upload leaves no readable object at the key
- Every other Azure failure surfaces as StoreError with the cause chained

Authentication Hierarchy (DefaultAzureCredential):
1. Environment variables (AZURE_CLIENT_ID, etc.)
2. Managed Identity (in Azure)
3. Azure CLI (local development)

Usage:
    from infrastructure import RepositoryFactory

    blob_repo = RepositoryFactory.create_blob_repository(config)
    if not blob_repo.blob_exists("prism.json/2030-01-01T00:00:00Z"):
        with open(path, "rb") as stream:
            attrs = blob_repo.write_blob("prism.csv/2030-01-01T00:00:00Z", stream, "text/csv")
"""

# ============================================================================
# IMPORTS - Top of file for fail-fast behavior
# ============================================================================

# Standard library imports
from abc import ABC, abstractmethod
from typing import BinaryIO, Dict, Optional, Tuple

# Azure SDK imports - These will fail fast if not installed
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings
from azure.identity import DefaultAzureCredential
from azure.core.exceptions import AzureError, ResourceNotFoundError

# Application imports
from config import StorageConfig
from core.models import BlobAttributes
from exceptions import StoreError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, __name__)


# ============================================================================
# BLOB REPOSITORY INTERFACE
# ============================================================================

class IBlobRepository(ABC):
    """
    Interface for blob storage operations.

    Enables dependency injection and testing/mocking of blob operations.
    All blob repositories must implement this interface.
    """

    @property
    @abstractmethod
    def container(self) -> str:
        """Container every key lives in"""
        pass

    @abstractmethod
    def blob_exists(self, key: str) -> bool:
        """Check if blob exists; StoreError only on backend failure"""
        pass

    @abstractmethod
    def write_blob(self, key: str, stream: BinaryIO,
                   content_type: str = "application/octet-stream") -> BlobAttributes:
        """Write blob from a readable binary stream, return committed attributes"""
        pass

    @abstractmethod
    def get_blob_attributes(self, key: str) -> BlobAttributes:
        """Read attributes of an existing blob"""
        pass


# ============================================================================
# BLOB REPOSITORY IMPLEMENTATION
# ============================================================================

class BlobRepository(IBlobRepository):
    """
    Azure Blob Storage repository bound to one container.

    Instances are cached per (account, container) through instance() so
    that every run of a process shares one BlobServiceClient.

    Usage:
        # Through factory (recommended)
        blob_repo = RepositoryFactory.create_blob_repository(config)

        # Explicit client (tests)
        blob_repo = BlobRepository(config.storage, blob_service=mock_service)
    """

    _instances: Dict[Tuple[str, str], 'BlobRepository'] = {}

    def __init__(self, storage: StorageConfig, blob_service: Optional[BlobServiceClient] = None):
        """
        Initialize the service client.

        Args:
            storage: Storage configuration (credentials and container)
            blob_service: Pre-built client, skips credential resolution
        """
        self._container = storage.container

        try:
            if blob_service is not None:
                self.blob_service = blob_service
                self.storage_account = getattr(blob_service, "account_name", storage.account_name)
            elif storage.uses_connection_string:
                logger.info("Initializing BlobRepository with connection string")
                self.blob_service = BlobServiceClient.from_connection_string(storage.connection_string)
                self.storage_account = self.blob_service.account_name
            else:
                self.storage_account = storage.account_name
                logger.info(f"Initializing BlobRepository with DefaultAzureCredential for account: {storage.account_name}")
                self.credential = DefaultAzureCredential()
                self.blob_service = BlobServiceClient(
                    account_url=storage.account_url,
                    credential=self.credential
                )
            self._container_client: ContainerClient = self.blob_service.get_container_client(self._container)
        except (AzureError, ValueError) as e:
            logger.error(f"Failed to initialize BlobRepository: {e}")
            raise StoreError(f"couldn't create storage client: {e}") from e

        logger.info(f"✅ BlobRepository initialized for {self.storage_account}/{self._container}")

    @classmethod
    def instance(cls, storage: StorageConfig) -> 'BlobRepository':
        """
        Get the cached repository for this account and container.

        Args:
            storage: Storage configuration

        Returns:
            BlobRepository instance shared by every run in the process
        """
        cache_key = (storage.connection_string or storage.account_name, storage.container)
        if cache_key not in cls._instances:
            cls._instances[cache_key] = cls(storage)
        return cls._instances[cache_key]

    @classmethod
    def reset_instances(cls) -> None:
        """Drop cached repositories (tests)."""
        cls._instances.clear()

    @property
    def container(self) -> str:
        return self._container

    def _describe(self, key: str) -> str:
        return f"{self._container}/{key}"

    # ========================================================================
    # CORE BLOB OPERATIONS
    # ========================================================================

    def blob_exists(self, key: str) -> bool:
        """
        Check if blob exists.

        Args:
            key: Blob key

        Returns:
            True if blob exists, False otherwise

        Raises:
            StoreError: Authentication, network or other backend failure
        """
        try:
            self._container_client.get_blob_client(key).get_blob_properties()
            logger.debug(f"Blob exists: {self._describe(key)}")
            return True
        except ResourceNotFoundError:
            logger.debug(f"Blob not found: {self._describe(key)}")
            return False
        except AzureError as e:
            logger.error(f"Error checking blob existence {self._describe(key)}: {e}")
            raise StoreError(f"error checking {self._describe(key)}: {e}") from e

    def write_blob(self, key: str, stream: BinaryIO,
                   content_type: str = "application/octet-stream") -> BlobAttributes:
        """
        Write a block blob from a readable binary stream.

        Always overwrites; the caller decides whether a key may be written.

        Args:
            key: Blob key
            stream: Readable binary stream positioned at the start of the data
            content_type: MIME type for blob

        Returns:
            BlobAttributes of the committed blob

        Raises:
            StoreError: Transport or backend failure (nothing committed)
        """
        logger.info(f"writing to blob storage: {self._describe(key)}")
        try:
            blob_client = self._container_client.get_blob_client(key)
            blob_client.upload_blob(
                stream,
                blob_type="BlockBlob",
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
            properties = blob_client.get_blob_properties()
        except AzureError as e:
            logger.error(f"Failed to write blob {self._describe(key)}: {e}")
            raise StoreError(f"error writing to blob storage {self._describe(key)}: {e}") from e

        attributes = self._to_attributes(key, properties)
        logger.info(
            f"✅ finished writing {attributes.size} bytes to container: {self._container}, name: {key}",
            extra={'custom_dimensions': {'blob_key': key, 'size': attributes.size, 'etag': attributes.etag}}
        )
        return attributes

    def get_blob_attributes(self, key: str) -> BlobAttributes:
        """
        Read attributes of an existing blob.

        Args:
            key: Blob key

        Returns:
            BlobAttributes

        Raises:
            StoreError: Blob missing or backend failure
        """
        try:
            properties = self._container_client.get_blob_client(key).get_blob_properties()
        except ResourceNotFoundError as e:
            raise StoreError(f"blob not found: {self._describe(key)}") from e
        except AzureError as e:
            logger.error(f"Failed to read attributes of {self._describe(key)}: {e}")
            raise StoreError(f"error reading attributes of {self._describe(key)}: {e}") from e
        return self._to_attributes(key, properties)

    def _to_attributes(self, key: str, properties) -> BlobAttributes:
        content_settings = getattr(properties, "content_settings", None)
        return BlobAttributes(
            name=key,
            container=self._container,
            size=properties.size or 0,
            etag=properties.etag,
            last_modified=properties.last_modified,
            content_type=getattr(content_settings, "content_type", None),
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'IBlobRepository',
    'BlobRepository',
]
