"""Base exceptions for energyos-rbac.

All library exceptions inherit from AccessControlError and carry an error
code and a details mapping for structured logging and API responses.
"""

from typing import Any, Dict, Optional


class AccessControlError(Exception):
    """Base exception for all energyos-rbac errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
            "type": self.__class__.__name__,
        }


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code
    """
    from .http_mapping import get_http_status_code as get_mapped_status_code
    return get_mapped_status_code(exception)


def create_error_response(exception: AccessControlError) -> Dict[str, Any]:
    """Create standardized error response from exception."""
    return {"error": exception.to_dict()}
