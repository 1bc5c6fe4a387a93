"""Access-control admin router.

Provides a ready-to-use FastAPI router for running access checks and for
reading and mutating per-user permission overrides. Library exceptions
raised by the services are rendered by the handlers installed with
``register_exception_handlers``.
"""

from typing import Any, Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..config.constants import MANAGE_OVERRIDES_PERMISSION
from ..features.permissions.entities import AuthenticatedIdentity, Permission, Role
from ..features.permissions.registry import permissions_for_resource
from ..features.permissions.services import AccessDecisionService, OverrideMutationService
from .dependencies import AccessControlDependencies
from .models import (
    AccessCheckRequest,
    CompanyAssignmentRequest,
    DecisionResponse,
    EffectivePermissionsResponse,
    OverrideResponse,
    PermissionChangeRequest,
    RoleChangeRequest,
)


def create_access_control_router(
    access_service: AccessDecisionService,
    mutation_service: OverrideMutationService,
    identity_dependency: Callable[..., Any],
    prefix: str = "",
    tags: Optional[List[str]] = None,
) -> APIRouter:
    """
    Create the access-control router.

    Read routes require ``users:read``; mutation routes require
    ``users:manage_roles``.

    Args:
        access_service: Decision service answering checks
        mutation_service: Override write path
        identity_dependency: Dependency resolving the caller's AuthenticatedIdentity
        prefix: Router prefix
        tags: OpenAPI tags

    Returns:
        Configured APIRouter
    """
    router = APIRouter(
        prefix=prefix,
        tags=tags or ["Access Control"],
        responses={
            403: {"description": "Insufficient permissions"},
            503: {"description": "Override store unavailable"},
        },
    )
    guards = AccessControlDependencies(access_service, identity_dependency)
    can_read = guards.require_permission(Permission.USERS_READ)
    can_manage = guards.require_permission(MANAGE_OVERRIDES_PERMISSION)

    @router.get(
        "/permissions",
        response_model=List[str],
        summary="List catalog permissions",
    )
    async def list_permissions(
        resource: Optional[str] = Query(None, description="Only permissions of this resource"),
        _: AuthenticatedIdentity = Depends(can_read),
    ) -> List[str]:
        permissions = permissions_for_resource(resource) if resource else list(Permission)
        return [p.value for p in permissions]

    @router.post(
        "/access/check",
        response_model=DecisionResponse,
        response_model_exclude_none=True,
        summary="Run an access check",
    )
    async def check_access(
        body: AccessCheckRequest,
        _: AuthenticatedIdentity = Depends(can_read),
    ) -> DecisionResponse:
        """Decisions are returned as values, including denials."""
        decision = await access_service.check_access(body.to_access_request())
        return DecisionResponse.from_decision(decision)

    @router.get(
        "/overrides/{user_id}",
        response_model=OverrideResponse,
        summary="Get a user's permission override",
    )
    async def get_override(
        user_id: str,
        _: AuthenticatedIdentity = Depends(can_read),
    ) -> OverrideResponse:
        override = await mutation_service.get_override(user_id)
        if override is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No permission override for user {user_id}",
            )
        return OverrideResponse.from_override(override)

    @router.get(
        "/overrides/{user_id}/effective",
        response_model=EffectivePermissionsResponse,
        summary="Get a user's effective permissions",
    )
    async def get_effective_permissions(
        user_id: str,
        role: Role = Query(..., description="Role the user acts under"),
        _: AuthenticatedIdentity = Depends(can_read),
    ) -> EffectivePermissionsResponse:
        permissions = await access_service.get_effective_permissions(role, user_id)
        return EffectivePermissionsResponse(
            user_id=user_id,
            role=role.value,
            permissions=sorted(p.value for p in permissions),
        )

    @router.post(
        "/overrides/{user_id}/grant",
        response_model=OverrideResponse,
        summary="Grant a permission",
    )
    async def grant_permission(
        user_id: str,
        body: PermissionChangeRequest,
        _: AuthenticatedIdentity = Depends(can_manage),
    ) -> OverrideResponse:
        override = await mutation_service.grant_permission(
            user_id,
            body.permission,
            role=body.role,
            expected_version=body.expected_version,
            company_id=body.company_id,
        )
        return OverrideResponse.from_override(override)

    @router.post(
        "/overrides/{user_id}/revoke",
        response_model=OverrideResponse,
        summary="Revoke a permission",
    )
    async def revoke_permission(
        user_id: str,
        body: PermissionChangeRequest,
        _: AuthenticatedIdentity = Depends(can_manage),
    ) -> OverrideResponse:
        override = await mutation_service.revoke_permission(
            user_id, body.permission, role=body.role, expected_version=body.expected_version
        )
        return OverrideResponse.from_override(override)

    @router.post(
        "/overrides/{user_id}/restore",
        response_model=OverrideResponse,
        summary="Restore a revoked permission",
    )
    async def restore_permission(
        user_id: str,
        body: PermissionChangeRequest,
        _: AuthenticatedIdentity = Depends(can_manage),
    ) -> OverrideResponse:
        override = await mutation_service.restore_permission(
            user_id, body.permission, role=body.role, expected_version=body.expected_version
        )
        return OverrideResponse.from_override(override)

    @router.post(
        "/overrides/{user_id}/company",
        response_model=OverrideResponse,
        summary="Scope an override to a company",
    )
    async def assign_company(
        user_id: str,
        body: CompanyAssignmentRequest,
        _: AuthenticatedIdentity = Depends(can_manage),
    ) -> OverrideResponse:
        override = await mutation_service.assign_company(
            user_id, body.company_id, role=body.role, expected_version=body.expected_version
        )
        return OverrideResponse.from_override(override)

    @router.post(
        "/overrides/{user_id}/role",
        response_model=OverrideResponse,
        summary="Re-base an override on another role",
    )
    async def change_role(
        user_id: str,
        body: RoleChangeRequest,
        _: AuthenticatedIdentity = Depends(can_manage),
    ) -> OverrideResponse:
        override = await mutation_service.change_role(
            user_id, body.role, expected_version=body.expected_version
        )
        return OverrideResponse.from_override(override)

    return router
