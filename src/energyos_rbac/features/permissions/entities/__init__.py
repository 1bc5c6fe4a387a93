"""Permission feature entities."""

from .permission import Permission
from .role import Role
from .override import UserOverride
from .access import AccessRequest, AuthenticatedIdentity, Decision, DenyReason
from .protocols import OverrideStore

__all__ = [
    "Permission",
    "Role",
    "UserOverride",
    "AccessRequest",
    "AuthenticatedIdentity",
    "Decision",
    "DenyReason",
    "OverrideStore",
]
