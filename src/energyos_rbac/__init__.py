"""EnergyOS RBAC - role-based access control core for the EnergyOS platform.

This library decides whether an authenticated user may perform an action:
a fixed permission catalog and role table, per-user overrides (extra grants
and revocations) held in a pluggable store, tenant scoping, and a guarded
administrative write path. Logging is left to the hosting service; call
``setup_logging()`` once at startup.
"""

from .__version__ import __version__

from .config import (
    StoreBackend,
    MatchMode,
    AccessControlSettings,
    get_settings,
    setup_logging,
    get_logger,
)

from .core.exceptions import (
    # Base Exception
    AccessControlError,

    # Domain Exceptions
    ConfigurationError,
    ValidationError,
    InvalidOperationError,
    ConflictError,
    OverrideStoreUnavailableError,

    # Utility Functions
    get_http_status_code,
    create_error_response,
)

from .features.permissions import (
    # Entities
    Permission,
    Role,
    UserOverride,
    AccessRequest,
    AuthenticatedIdentity,
    Decision,
    DenyReason,
    OverrideStore,

    # Catalog
    ROLE_BASE_PERMISSIONS,
    is_known_permission,
    parse_permission,
    base_permissions,
    permissions_for_resource,

    # Services
    effective_permissions,
    AccessDecisionService,
    OverrideMutationService,

    # Stores
    InMemoryOverrideStore,
    RedisOverrideStore,
    AsyncPGOverrideStore,

    # Wiring
    AccessControl,
    create_override_store,
    create_access_control,
)

__all__ = [
    "__version__",
    "StoreBackend",
    "MatchMode",
    "AccessControlSettings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "AccessControlError",
    "ConfigurationError",
    "ValidationError",
    "InvalidOperationError",
    "ConflictError",
    "OverrideStoreUnavailableError",
    "get_http_status_code",
    "create_error_response",
    "Permission",
    "Role",
    "UserOverride",
    "AccessRequest",
    "AuthenticatedIdentity",
    "Decision",
    "DenyReason",
    "OverrideStore",
    "ROLE_BASE_PERMISSIONS",
    "is_known_permission",
    "parse_permission",
    "base_permissions",
    "permissions_for_resource",
    "effective_permissions",
    "AccessDecisionService",
    "OverrideMutationService",
    "InMemoryOverrideStore",
    "RedisOverrideStore",
    "AsyncPGOverrideStore",
    "AccessControl",
    "create_override_store",
    "create_access_control",
]
