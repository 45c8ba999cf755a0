"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry the user-facing messaging used by the API layer.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_REQUEST = "invalid_request"
    EMPTY_FILE = "empty_file"
    FILE_TOO_LARGE = "file_too_large"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    SHORT_LINK_NOT_FOUND = "short_link_not_found"
    STORE_UNAVAILABLE = "store_unavailable"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.EMPTY_FILE: {
        "title": "Empty File",
        "message": "Empty files cannot be uploaded.",
        "action": "Choose a file that contains data and try again.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "The uploaded file exceeds the maximum allowed size.",
        "action": "Compress the file or split it into smaller parts.",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file could not be found or has already been downloaded.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "Link Expired",
        "message": "This link has expired and the file is no longer available.",
        "action": "Ask the sender for a new link.",
    },
    ErrorCategory.SHORT_LINK_NOT_FOUND: {
        "title": "Short Link Not Found",
        "message": "The short link is invalid or no longer exists.",
        "action": "Check the link for typos or ask the sender for a new one.",
    },
    ErrorCategory.STORE_UNAVAILABLE: {
        "title": "Storage Unavailable",
        "message": "File storage is not available right now.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ValidationError(DomainError):
    """
    Raised when client input is rejected (empty, oversized or missing file).

    Never retried internally.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INVALID_REQUEST,
        original_error: Exception = None,
    ):
        super().__init__(message, original_error)
        self.category = category


class NotFoundError(DomainError):
    """
    Raised when a key or short alias does not resolve to a live object.

    "Never existed" and "already consumed" are indistinguishable.
    """
    pass


class FileExpiredError(DomainError):
    """Raised when a file resolves but its expiration time has passed."""
    pass


class StoreUnavailableError(DomainError):
    """Raised when a required store was not configured for this process."""
    pass


class BlobStoreError(DomainError):
    """Raised when the blob store fails to complete an operation."""
    pass


class MetadataStoreError(DomainError):
    """Raised when the metadata store fails to complete an operation."""
    pass


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        return {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
