"""Per-user permission override entity.

A UserOverride is the delta layered on top of a role's base permissions:
extra grants (``custom_permissions``) and selective revocations
(``revoked_permissions``). It is versioned for optimistic concurrency; an
absent override behaves as version 0 with empty deltas.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional

from ....config.constants import INITIAL_OVERRIDE_VERSION
from ....core.exceptions import ValidationError
from .permission import Permission
from .role import Role

logger = logging.getLogger(__name__)


def _coerce_permissions(values: Iterable[Any], user_id: str, field_name: str) -> FrozenSet[Permission]:
    permissions = set()
    for value in values:
        permission = Permission.lookup(value)
        if permission is None:
            # Unknown tokens can only narrow access once dropped
            logger.warning(
                f"Dropping unknown permission {value!r} from {field_name} of override for user {user_id}"
            )
            continue
        permissions.add(permission)
    return frozenset(permissions)


@dataclass(frozen=True)
class UserOverride:
    """Immutable snapshot of a user's permission override."""

    user_id: str
    role: Role
    company_id: Optional[str] = None
    custom_permissions: FrozenSet[Permission] = field(default_factory=frozenset)
    revoked_permissions: FrozenSet[Permission] = field(default_factory=frozenset)
    updated_at: Optional[datetime] = None
    version: int = INITIAL_OVERRIDE_VERSION

    def __post_init__(self):
        if not isinstance(self.user_id, str) or not self.user_id.strip():
            raise ValidationError("Override user_id must be a non-empty string", "user_id", self.user_id)
        if not isinstance(self.role, Role):
            raise ValidationError("Override role must be a Role", "role", self.role)
        if self.version < INITIAL_OVERRIDE_VERSION:
            raise ValidationError("Override version cannot be negative", "version", self.version)
        object.__setattr__(self, "custom_permissions", frozenset(self.custom_permissions))
        object.__setattr__(self, "revoked_permissions", frozenset(self.revoked_permissions))

    @classmethod
    def empty(cls, user_id: str, role: Role, company_id: Optional[str] = None) -> "UserOverride":
        """Build the implicit override of a user that has none stored."""
        return cls(user_id=user_id, role=role, company_id=company_id)

    @property
    def is_persisted(self) -> bool:
        return self.version > INITIAL_OVERRIDE_VERSION

    def with_changes(self, **changes: Any) -> "UserOverride":
        """Return a copy with the given fields replaced (version untouched)."""
        return replace(self, **changes)

    def stamped(self, version: int, updated_at: Optional[datetime] = None) -> "UserOverride":
        """Return a copy carrying a new stored version and timestamp."""
        return replace(
            self,
            version=version,
            updated_at=updated_at or datetime.now(timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible mapping."""
        return {
            "user_id": self.user_id,
            "role": self.role.value,
            "company_id": self.company_id,
            "custom_permissions": sorted(p.value for p in self.custom_permissions),
            "revoked_permissions": sorted(p.value for p in self.revoked_permissions),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserOverride":
        """Rebuild an override from its stored mapping.

        Raises:
            ValidationError: If the user id or role is missing or invalid
        """
        user_id = data.get("user_id")
        role = Role.lookup(data.get("role"))
        if role is None:
            raise ValidationError("Stored override has an unknown role", "role", data.get("role"))

        updated_at = data.get("updated_at")
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)

        return cls(
            user_id=user_id,
            role=role,
            company_id=data.get("company_id"),
            custom_permissions=_coerce_permissions(
                data.get("custom_permissions") or (), str(user_id), "custom_permissions"
            ),
            revoked_permissions=_coerce_permissions(
                data.get("revoked_permissions") or (), str(user_id), "revoked_permissions"
            ),
            updated_at=updated_at,
            version=int(data.get("version", INITIAL_OVERRIDE_VERSION)),
        )
