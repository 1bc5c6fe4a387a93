"""Exceptions module for energyos-rbac."""

from .base import (
    AccessControlError,
    get_http_status_code,
    create_error_response,
)

from .domain import (
    ConfigurationError,
    ValidationError,
    InvalidOperationError,
    ConflictError,
    OverrideStoreUnavailableError,
)

from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    "AccessControlError",
    "get_http_status_code",
    "create_error_response",
    "ConfigurationError",
    "ValidationError",
    "InvalidOperationError",
    "ConflictError",
    "OverrideStoreUnavailableError",
    "HTTP_STATUS_MAP",
]
