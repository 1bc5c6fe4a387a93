"""
Permission catalog and role table with the platform's default grants.

The raw table below is validated once at import; any unknown role or
permission token aborts startup with a ConfigurationError. At request time
only the validated, read-only ``ROLE_BASE_PERMISSIONS`` mapping is used.
"""
import logging
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, List, Mapping

from ...core.exceptions import ConfigurationError, ValidationError
from .entities.permission import Permission
from .entities.role import Role

logger = logging.getLogger(__name__)


ROLE_PERMISSIONS = {
    "ADMIN": [
        # Full system access
        "users:create", "users:read", "users:update", "users:delete", "users:manage_roles",
        "companies:create", "companies:read", "companies:update", "companies:delete",
        "companies:verify", "companies:suspend",
        "projects:create", "projects:read", "projects:update", "projects:delete",
        "projects:approve", "projects:assign",
        "quotes:create", "quotes:read", "quotes:update", "quotes:delete", "quotes:approve", "quotes:send",
        "customers:create", "customers:read", "customers:update", "customers:delete",
        "customers:import", "customers:export",
        "products:create", "products:read", "products:update", "products:delete", "products:manage_pricing",
        "finance:read", "finance:update", "finance:reports", "finance:invoicing", "finance:payments",
        "analytics:read", "analytics:advanced", "reports:create", "reports:read", "reports:export",
        "system:settings", "system:monitoring", "system:integrations", "system:backups", "system:logs",
        "designer:use", "designer:advanced", "calculator:use", "calculator:advanced",
        "content:create", "content:read", "content:update", "content:delete", "content:publish",
    ],
    "COMPANY": [
        "projects:create", "projects:read", "projects:update", "projects:delete", "projects:assign",
        "quotes:create", "quotes:read", "quotes:update", "quotes:delete", "quotes:send",
        "customers:create", "customers:read", "customers:update", "customers:delete",
        "customers:import", "customers:export",
        "products:read", "products:update",
        "finance:read", "finance:reports", "finance:invoicing", "finance:payments",
        "analytics:read", "reports:create", "reports:read", "reports:export",
        "designer:use", "designer:advanced", "calculator:use", "calculator:advanced",
        "content:read",
    ],
    "CUSTOMER": [
        "projects:read",
        "quotes:read",
        "customers:read", "customers:update",
        "products:read",
        "finance:read",
        "designer:use", "calculator:use",
        "content:read",
    ],
    "FARMER": [
        # Agri-solar projects on top of the customer set
        "projects:read", "projects:create",
        "quotes:read",
        "customers:read", "customers:update",
        "products:read",
        "finance:read",
        "designer:use", "calculator:use", "calculator:advanced",
        "content:read",
    ],
    "BANK": [
        # Loan and credit assessment
        "projects:read",
        "quotes:read",
        "customers:read",
        "finance:read", "finance:reports",
        "analytics:read", "reports:read",
        "content:read",
    ],
    "SUPPORT": [
        "users:read", "users:update",
        "companies:read", "companies:update",
        "projects:read", "projects:update",
        "quotes:read", "quotes:update",
        "customers:read", "customers:update", "customers:import", "customers:export",
        "products:read",
        "analytics:read", "reports:read",
        "content:read", "content:create", "content:update",
    ],
}


def validate_role_table(table: Mapping[str, Iterable[str]]) -> Mapping[Role, FrozenSet[Permission]]:
    """Validate a raw role table and freeze it.

    Args:
        table: Mapping of role name to permission tokens

    Returns:
        Read-only mapping of Role to its base permission set

    Raises:
        ConfigurationError: If a role or token is unknown, or a role is missing
    """
    validated = {}
    for role_name, tokens in table.items():
        role = Role.lookup(role_name)
        if role is None:
            raise ConfigurationError(
                f"Unknown role in role table: {role_name!r}",
                details={"role": str(role_name)},
            )

        permissions = set()
        for token in tokens:
            permission = Permission.lookup(token)
            if permission is None:
                raise ConfigurationError(
                    f"Unknown permission {token!r} granted to role {role.value}",
                    details={"role": role.value, "permission": str(token)},
                )
            permissions.add(permission)
        validated[role] = frozenset(permissions)

    missing = [role.value for role in Role if role not in validated]
    if missing:
        raise ConfigurationError(
            f"Role table has no entry for roles: {', '.join(missing)}",
            details={"roles": missing},
        )

    return MappingProxyType(validated)


ROLE_BASE_PERMISSIONS: Mapping[Role, FrozenSet[Permission]] = validate_role_table(ROLE_PERMISSIONS)


def is_known_permission(token: Any) -> bool:
    """Check whether a token belongs to the permission catalog."""
    return Permission.lookup(token) is not None


def parse_permission(token: Any) -> Permission:
    """Convert a token to its catalog member.

    Raises:
        ValidationError: If the token is not in the catalog
    """
    permission = Permission.lookup(token)
    if permission is None:
        raise ValidationError(f"Unknown permission: {token!r}", "permission", token)
    return permission


def base_permissions(role: Role) -> FrozenSet[Permission]:
    """Get the base permission set of a role.

    Raises:
        ConfigurationError: If ``role`` is not a known role
    """
    member = Role.lookup(role)
    if member is None or member not in ROLE_BASE_PERMISSIONS:
        raise ConfigurationError(f"Unknown role: {role!r}", details={"role": str(role)})
    return ROLE_BASE_PERMISSIONS[member]


def permissions_for_resource(resource: str) -> List[Permission]:
    """List catalog permissions of one resource, in catalog order."""
    return [permission for permission in Permission if permission.resource == resource]


logger.debug(
    f"Role table loaded: {len(Permission)} permissions across {len(ROLE_BASE_PERMISSIONS)} roles"
)
