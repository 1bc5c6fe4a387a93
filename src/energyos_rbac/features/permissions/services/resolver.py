"""Effective permission resolution.

The single authoritative place where a role's base set and a user's override
are combined. Pure and synchronous; performs no I/O.
"""

from typing import FrozenSet, Optional

from ..entities.override import UserOverride
from ..entities.permission import Permission
from ..entities.role import Role
from ..registry import base_permissions


def effective_permissions(role: Role, override: Optional[UserOverride] = None) -> FrozenSet[Permission]:
    """Resolve the permissions a user actually holds.

    Computes ``(base(role) | custom) - revoked``. Revocation wins over both
    base and custom grants, including when a permission sits in both the
    custom and revoked sets of the same override.

    Args:
        role: Role the user is acting under
        override: Stored override for the user, if any

    Returns:
        Effective permission set
    """
    base = base_permissions(role)
    if override is None:
        return base
    return (base | override.custom_permissions) - override.revoked_permissions
