"""
Infrastructure Package - Lazy Loading Implementation.

Provides the storage-facing implementations with lazy loading to prevent
premature initialization of clients and environment variable reads.

Why Lazy Loading Matters in Azure Functions:

    Cold Start -> Import Modules -> Runtime Init -> Ready for Triggers
         |              |                |               |
      ~500ms      NO ENV VARS!     ENV VARS SET    NOW SAFE TO USE

    - function_app.py is imported on every cold start
    - Top-level imports run before app settings and managed identity
      tokens are guaranteed to be available
    - DefaultAzureCredential created at import time fails intermittently

So nothing here is imported until first attribute access, which happens
when the shell builds the pipeline inside a trigger.
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .factory import RepositoryFactory as _RepositoryFactory
    from .blob import IBlobRepository as _IBlobRepository
    from .blob import BlobRepository as _BlobRepository
    from .staging import StagingArea as _StagingArea
    from .staging import StagedFile as _StagedFile


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    This prevents module-level code execution until needed.
    """
    # Factory - most common import
    if name == "RepositoryFactory":
        from .factory import RepositoryFactory
        return RepositoryFactory

    # Blob storage
    elif name == "IBlobRepository":
        from .blob import IBlobRepository
        return IBlobRepository
    elif name == "BlobRepository":
        from .blob import BlobRepository
        return BlobRepository

    # Staging
    elif name == "StagingArea":
        from .staging import StagingArea
        return StagingArea
    elif name == "StagedFile":
        from .staging import StagedFile
        return StagedFile

    raise AttributeError(f"module 'infrastructure' has no attribute '{name}'")


__all__ = [
    "RepositoryFactory",
    "IBlobRepository",
    "BlobRepository",
    "StagingArea",
    "StagedFile",
]
