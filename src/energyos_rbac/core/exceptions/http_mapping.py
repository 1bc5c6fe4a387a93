"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .base import AccessControlError
from .domain import (
    ConfigurationError,
    ValidationError,
    InvalidOperationError,
    ConflictError,
    OverrideStoreUnavailableError,
)


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,

    # 409 Conflict
    ConflictError: 409,

    # 422 Unprocessable Entity
    InvalidOperationError: 422,

    # 500 Internal Server Error
    ConfigurationError: 500,

    # 503 Service Unavailable
    OverrideStoreUnavailableError: 503,
}


def get_http_status_code(exception: Exception) -> int:
    """Resolve the status code for an exception, walking its MRO.

    Args:
        exception: The exception instance

    Returns:
        Mapped HTTP status code, 500 when nothing matches
    """
    for exc_type in type(exception).__mro__:
        if exc_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exc_type]
        if exc_type is AccessControlError:
            break
    return 500
