"""
Custom exceptions for the blog document store.

All application-specific exceptions inherit from BlogStoreError.
"""

from __future__ import annotations

from typing import Optional, Any


class BlogStoreError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (for debugging)
        recoverable: Whether the error can potentially be recovered from
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(BlogStoreError):
    """
    Invalid or missing configuration.

    Examples:
        - Unknown STORAGE_BACKEND value
        - Non-positive page size default
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details=details, recoverable=False)


class StorageUnavailable(BlogStoreError):
    """
    The remote document database is required but not connected.

    Raised for writes (reads degrade instead). Not retried automatically.
    """

    def __init__(
        self,
        message: str = "Remote document store is not connected",
        collection: Optional[str] = None,
        reason: Optional[str] = None
    ):
        details = {}
        if collection:
            details["collection"] = collection
        if reason:
            details["reason"] = reason
        super().__init__(message, details=details, recoverable=True)


class RecordNotFound(BlogStoreError):
    """An update addressed an id that does not exist in the collection."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(
            f"No record '{record_id}' in collection '{collection}'",
            details={"collection": collection, "record_id": record_id},
            recoverable=False,
        )
        self.collection = collection
        self.record_id = record_id


class InvalidArgument(BlogStoreError):
    """
    Malformed input to an accessor operation.

    Examples:
        - page_size <= 0
        - write to an unknown collection
        - unsupported filter operator
    """

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        value: Optional[Any] = None
    ):
        details = {}
        if argument:
            details["argument"] = argument
        if value is not None:
            details["value"] = str(value)[:100]
        super().__init__(message, details=details, recoverable=False)


class PersistenceFailure(BlogStoreError):
    """
    Failed to save or load data.

    Examples:
        - File write permission denied
        - Invalid JSON in a collection file
        - Remote write rejected mid-statement
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        file_path: Optional[str] = None,
        operation: Optional[str] = None  # "read" or "write"
    ):
        details = {}
        if collection:
            details["collection"] = collection
        if file_path:
            details["file_path"] = file_path
        if operation:
            details["operation"] = operation
        super().__init__(message, details=details, recoverable=False)
