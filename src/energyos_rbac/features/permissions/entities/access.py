"""Access request, identity and decision values.

These are ephemeral values: one AccessRequest per check, one Decision per
request. Deny reasons are returned as values and never raised.
"""

from collections import abc
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ....config.constants import MatchMode
from ....core.exceptions import ValidationError
from .role import Role


class DenyReason(str, Enum):
    """Reasons an access check can be denied."""

    INVALID_PERMISSION = "InvalidPermission"
    MISSING_PERMISSION = "MissingPermission"
    CROSS_TENANT_ACCESS = "CrossTenantAccess"
    UNAVAILABLE = "Unavailable"


@dataclass(frozen=True)
class Decision:
    """Outcome of an access check."""

    allowed: bool
    reason: Optional[DenyReason] = None
    detail: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason, detail: Optional[str] = None) -> "Decision":
        return cls(allowed=False, reason=reason, detail=detail)

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> Dict[str, Any]:
        """Render the external decision shape, omitting empty fields."""
        data: Dict[str, Any] = {"allowed": self.allowed}
        if self.reason is not None:
            data["reason"] = self.reason.value
        if self.detail is not None:
            data["detail"] = self.detail
        return data


def _require_non_empty_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string", field_name, value)
    return value


@dataclass(frozen=True)
class AccessRequest:
    """A single authorization question: may this identity do these things?

    ``required_permissions`` is kept as raw strings; catalog membership is
    checked by the decision service so unknown tokens become a Deny instead
    of an exception.
    """

    role: Role
    user_id: str
    required_permissions: Tuple[str, ...] = field(default_factory=tuple)
    resource_owner_company_id: Optional[str] = None
    match: MatchMode = MatchMode.ALL

    def __post_init__(self):
        role = Role.lookup(self.role)
        if role is None:
            raise ValidationError(f"Unknown role: {self.role!r}", "role", self.role)
        object.__setattr__(self, "role", role)

        _require_non_empty_str(self.user_id, "user_id")

        permissions = self.required_permissions
        if isinstance(permissions, (str, abc.Mapping)) or not isinstance(permissions, abc.Iterable):
            raise ValidationError(
                "required_permissions must be a list of strings", "required_permissions", permissions
            )
        permissions = tuple(permissions)
        for token in permissions:
            if not isinstance(token, str):
                raise ValidationError(
                    "required_permissions must contain only strings", "required_permissions", token
                )
        object.__setattr__(self, "required_permissions", permissions)

        if self.resource_owner_company_id is not None:
            _require_non_empty_str(self.resource_owner_company_id, "resource_owner_company_id")

        try:
            object.__setattr__(self, "match", MatchMode(self.match))
        except ValueError:
            raise ValidationError(f"Unknown match mode: {self.match!r}", "match", self.match)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AccessRequest":
        """Build a request from a wire payload (camelCase or snake_case keys).

        Raises:
            ValidationError: If required fields are missing or have wrong types
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Access request payload must be an object", value=payload)

        def pick(*names: str, default: Any = None) -> Any:
            for name in names:
                if name in payload:
                    return payload[name]
            return default

        missing = object()
        role = pick("role", default=missing)
        user_id = pick("userId", "user_id", default=missing)
        permissions = pick("requiredPermissions", "required_permissions", default=missing)
        for name, value in (("role", role), ("userId", user_id), ("requiredPermissions", permissions)):
            if value is missing:
                raise ValidationError(f"Missing required field: {name}", name)

        return cls(
            role=role,
            user_id=user_id,
            required_permissions=permissions,
            resource_owner_company_id=pick("resourceOwnerCompanyId", "resource_owner_company_id"),
            match=pick("match", default=MatchMode.ALL),
        )


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Already-verified identity supplied by the authentication collaborator."""

    user_id: str
    role: Role
    company_id: Optional[str] = None

    def __post_init__(self):
        role = Role.lookup(self.role)
        if role is None:
            raise ValidationError(f"Unknown role: {self.role!r}", "role", self.role)
        object.__setattr__(self, "role", role)
        _require_non_empty_str(self.user_id, "user_id")

    def access_request(
        self,
        permissions: Iterable[str],
        resource_owner_company_id: Optional[str] = None,
        match: MatchMode = MatchMode.ALL,
    ) -> AccessRequest:
        """Build an access request acting as this identity."""
        return AccessRequest(
            role=self.role,
            user_id=self.user_id,
            required_permissions=tuple(permissions),
            resource_owner_company_id=resource_owner_company_id,
            match=match,
        )
