"""
Custom exception hierarchy for the Event Reactions API.

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


# Data Validation Exceptions


class ValidationError(BaseAppException):
    """Raised when caller-supplied input is missing or empty."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = (
            f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        )
        super().__init__(detail, status.HTTP_400_BAD_REQUEST, error_code=error_code)
        self.field = field


class InvalidRequestError(BaseAppException):
    """Raised when a request body or query cannot be parsed at all."""

    def __init__(self, detail: str):
        super().__init__(
            detail, status.HTTP_400_BAD_REQUEST, error_code="INVALID_REQUEST"
        )


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
        self.operation = operation
