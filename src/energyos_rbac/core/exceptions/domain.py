"""Domain-specific exceptions for energyos-rbac.

Authorization outcomes (Allow/Deny) are never raised; these exceptions cover
misconfiguration, malformed input, invalid administrative writes, optimistic
concurrency conflicts and an unreachable override store.
"""

from typing import Any, Dict, Optional

from .base import AccessControlError


class ConfigurationError(AccessControlError):
    """Raised when the static catalog, role table or settings are invalid."""
    pass


class ValidationError(AccessControlError):
    """Raised when an access request or mutation input is malformed."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details: Dict[str, Any] = {}
        if field is not None:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field
        self.value = value


class InvalidOperationError(AccessControlError):
    """Raised when an override mutation would break an override invariant."""

    def __init__(self, message: str, user_id: str, permission: Optional[str] = None):
        details: Dict[str, Any] = {"user_id": user_id}
        if permission is not None:
            details["permission"] = permission
        super().__init__(message, "INVALID_OPERATION", details)
        self.user_id = user_id
        self.permission = permission


class ConflictError(AccessControlError):
    """Raised when an override write carries a stale version.

    The caller must re-read the override and retry with its current version.
    """

    def __init__(self, user_id: str, expected_version: int, actual_version: Optional[int] = None):
        message = (
            f"Override for user '{user_id}' was modified concurrently "
            f"(expected version {expected_version}"
        )
        message += f", found {actual_version})" if actual_version is not None else ")"
        super().__init__(
            message,
            "VERSION_CONFLICT",
            {
                "user_id": user_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
        self.user_id = user_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class OverrideStoreUnavailableError(AccessControlError):
    """Raised when the override store cannot be reached or times out."""

    def __init__(self, message: str = "Override store unavailable", backend: Optional[str] = None):
        super().__init__(message, "STORE_UNAVAILABLE", {"backend": backend} if backend else {})
        self.backend = backend
