"""Permissions feature: catalog, role table, overrides and access decisions."""

from .entities import (
    Permission,
    Role,
    UserOverride,
    AccessRequest,
    AuthenticatedIdentity,
    Decision,
    DenyReason,
    OverrideStore,
)
from .registry import (
    ROLE_BASE_PERMISSIONS,
    validate_role_table,
    is_known_permission,
    parse_permission,
    base_permissions,
    permissions_for_resource,
)
from .services import (
    effective_permissions,
    AccessDecisionService,
    OverrideMutationService,
)
from .repositories import (
    InMemoryOverrideStore,
    RedisOverrideStore,
    AsyncPGOverrideStore,
)
from .factory import AccessControl, create_override_store, create_access_control

__all__ = [
    "Permission",
    "Role",
    "UserOverride",
    "AccessRequest",
    "AuthenticatedIdentity",
    "Decision",
    "DenyReason",
    "OverrideStore",
    "ROLE_BASE_PERMISSIONS",
    "validate_role_table",
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
