# ============================================================================
# CLAUDE CONTEXT - EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by every layer of the fetch pipeline
# PURPOSE: Exception hierarchy separating contract violations from run failures
# EXPORTS: ContractViolationError, BusinessLogicError, FetchError, TimestampError,
#          StoreError, NotFoundError, ConversionError, ResourceError, ConfigurationError
# INTERFACES: Standard Python exception hierarchy
# PYDANTIC_MODELS: None
# DEPENDENCIES: None (standard library only)
# SCOPE: Application-wide exception handling
# PATTERNS: Exception hierarchy for error categorization
# ENTRY_POINTS: Raised at component boundaries, rendered by triggers/fetch.py
# INDEX: ContractViolationError:35, BusinessLogicError:52, Run failures:64
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues that end a pipeline run)
3. Configuration Errors (deployment problems, fatal at startup)

Every BusinessLogicError subclass is fatal to the current pipeline run.
There is no in-process retry: the external scheduler re-triggers the
endpoint and the dedup check makes completed versions cheap no-ops.
"""

from typing import Optional


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong collaborator types handed to the pipeline
    - Missing required fields
    - Interface contract violations

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures of a pipeline run.

    The HTTP shell renders any of these as a server error carrying
    the full cause chain.
    """
    pass


class FetchError(BusinessLogicError):
    """
    The source archive could not be fetched or opened.

    Examples:
        - Origin unreachable / DNS failure / timeout
        - Non-2xx HTTP status
        - Downloaded payload is not a readable zip archive
    """
    pass


class TimestampError(BusinessLogicError):
    """
    The origin's version marker (Last-Modified header) is missing or unparseable.

    Raised before any part of the response body is staged.
    """
    pass


class StoreError(BusinessLogicError):
    """
    Blob storage backend failure.

    Examples:
        - Authentication failure
        - Container does not exist
        - Network failure during upload
        - Attributes requested for a blob that does not exist

    A "not found" answer to an existence check is NOT a StoreError.
    """
    pass


class NotFoundError(BusinessLogicError):
    """
    The expected database entry is absent from the archive.

    Usually means the upstream publication format changed.
    """
    pass


class ConversionError(BusinessLogicError):
    """
    An external converter process failed.

    Carries the converter stage name, the exit status (None when the process
    could not be started or timed out) and the captured diagnostic output.
    """

    def __init__(self, stage: str, message: str, returncode: Optional[int] = None, output: str = ""):
        self.stage = stage
        self.returncode = returncode
        self.output = output
        detail = f"{stage}: {message}"
        if returncode is not None:
            detail += f" (exit status {returncode})"
        if output:
            detail += f", output: {output.strip()}"
        super().__init__(detail)


class ResourceError(BusinessLogicError):
    """
    Ephemeral staging storage could not be allocated.

    Examples:
        - Disk full
        - Staging directory not writable
        - Acquire attempted on an already released staging area
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    Fatal at startup - the service cannot build a pipeline.

    Examples:
        - Missing required environment variables
        - Invalid storage account name
        - Malformed converter command lines
    """
    pass


def describe_error_chain(error: BaseException) -> str:
    """
    Render an exception and its causes as one human-readable line.

    Follows __cause__ (explicit ``raise ... from``) first, then __context__.

    Example:
        "couldn't find prism.mdb: no prism.mdb found in prism.zip"
    """
    parts = []
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current) or type(current).__name__
        if not parts or text not in parts[-1]:
            parts.append(text)
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__
    return ": ".join(parts)
