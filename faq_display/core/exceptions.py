"""
Custom exception hierarchy for the FAQ display API.

This module defines a standardized exception hierarchy for consistent
error handling across the application.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BaseAppException(HTTPException):
    """Base exception for all application errors."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or self.__class__.__name__


# Resource Exceptions


class ResourceNotFoundError(BaseAppException):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: str):
        detail = f"{resource_type} with ID '{resource_id}' not found"
        super().__init__(
            detail, status.HTTP_404_NOT_FOUND, error_code="RESOURCE_NOT_FOUND"
        )


class ContentElementNotFoundError(ResourceNotFoundError):
    """Raised when a content element is missing or not visible."""

    def __init__(self, content_uid: int):
        super().__init__("Content element", str(content_uid))


# Storage Exceptions


class StorageError(BaseAppException):
    """Raised when storage operations fail."""

    def __init__(self, detail: str, operation: str):
        # Map to controlled vocabulary to prevent high cardinality
        operation_map = {
            "read": "READ",
            "write": "WRITE",
            "create": "CREATE",
            "connect": "CONNECT",
        }
        normalized_op = operation_map.get(operation.lower(), "UNKNOWN")
        super().__init__(
            f"Storage {operation} failed: {detail}",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=f"STORAGE_{normalized_op}_ERROR",
        )


# Record Resolution


class RecordResolutionError(Exception):
    """Raised by a record resolver that cannot build a record from a row.

    Not an HTTP error: callers treat it as "no record available".
    """

    def __init__(self, table: str, reason: str):
        super().__init__(f"Cannot resolve record from '{table}': {reason}")
        self.table = table
        self.reason = reason
