"""
Request and response models for the access-control API.

Field names are snake_case internally; camelCase aliases accept the payloads
the dashboard sends.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config.constants import MatchMode
from ..features.permissions.entities import AccessRequest, Decision, Role, UserOverride


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class AccessCheckRequest(BaseSchema):
    """Request model for an access check."""

    role: str = Field(..., description="Role the user acts under")
    user_id: str = Field(..., alias="userId", description="User identifier")
    required_permissions: List[str] = Field(
        ..., alias="requiredPermissions", description="Permission tokens to check"
    )
    resource_owner_company_id: Optional[str] = Field(
        None, alias="resourceOwnerCompanyId", description="Company owning the resource"
    )
    match: MatchMode = Field(MatchMode.ALL, description="'all' or 'any' of the tokens")

    def to_access_request(self) -> AccessRequest:
        return AccessRequest(
            role=self.role,
            user_id=self.user_id,
            required_permissions=tuple(self.required_permissions),
            resource_owner_company_id=self.resource_owner_company_id,
            match=self.match,
        )


class DecisionResponse(BaseSchema):
    """Outcome of an access check."""

    allowed: bool = Field(..., description="Whether access is allowed")
    reason: Optional[str] = Field(None, description="Deny reason")
    detail: Optional[str] = Field(None, description="Offending token or tenant")

    @classmethod
    def from_decision(cls, decision: Decision) -> "DecisionResponse":
        return cls(**decision.to_dict())


class PermissionChangeRequest(BaseSchema):
    """Request model for grant, revoke and restore."""

    permission: str = Field(..., description="Permission token")
    expected_version: int = Field(..., alias="expectedVersion", ge=0, description="Last read version")
    role: Optional[Role] = Field(None, description="User's role; required for a first write")
    company_id: Optional[str] = Field(
        None, alias="companyId", description="Tenant recorded when the override is created"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "permission": "finance:reports",
                "expectedVersion": 0,
                "role": "COMPANY",
                "companyId": "c1",
            }
        },
    )


class CompanyAssignmentRequest(BaseSchema):
    """Request model for scoping an override to a company."""

    company_id: Optional[str] = Field(..., alias="companyId", description="Company, or null to clear")
    expected_version: int = Field(..., alias="expectedVersion", ge=0, description="Last read version")
    role: Optional[Role] = Field(None, description="User's role; required for a first write")


class RoleChangeRequest(BaseSchema):
    """Request model for re-basing an override on another role."""

    role: Role = Field(..., description="New role")
    expected_version: int = Field(..., alias="expectedVersion", ge=0, description="Last read version")


class OverrideResponse(BaseSchema):
    """Stored per-user override."""

    user_id: str = Field(..., description="User identifier")
    role: str = Field(..., description="Role the deltas apply to")
    company_id: Optional[str] = Field(None, description="Tenant scope")
    custom_permissions: List[str] = Field(default_factory=list, description="Extra grants")
    revoked_permissions: List[str] = Field(default_factory=list, description="Revoked base permissions")
    updated_at: Optional[datetime] = Field(None, description="Last write timestamp")
    version: int = Field(..., description="Version to pass as expected_version")

    @classmethod
    def from_override(cls, override: UserOverride) -> "OverrideResponse":
        data: Dict[str, Any] = override.to_dict()
        data["updated_at"] = override.updated_at
        return cls(**data)


class EffectivePermissionsResponse(BaseSchema):
    """Resolved permission set of a user."""

    user_id: str
    role: str
    permissions: List[str]
