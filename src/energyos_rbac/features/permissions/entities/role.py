"""Role enumeration for the energyos-rbac permissions feature."""

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Account roles assigned by the authentication collaborator.

    ADMIN is the platform super-role: it holds the full catalog and is never
    restricted by tenant scoping.
    """

    ADMIN = "ADMIN"
    COMPANY = "COMPANY"
    CUSTOMER = "CUSTOMER"
    FARMER = "FARMER"
    BANK = "BANK"
    SUPPORT = "SUPPORT"

    @property
    def bypasses_tenant_scope(self) -> bool:
        return self is Role.ADMIN

    @classmethod
    def lookup(cls, value: object) -> Optional["Role"]:
        """Return the member for a role name, or None if it is not one."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        return cls._value2member_map_.get(value)

    def __str__(self) -> str:
        return self.value
