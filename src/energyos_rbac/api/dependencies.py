"""FastAPI access-control dependencies."""

import logging
from typing import Annotated, Any, Callable, Iterable, List, Optional

from fastapi import Depends, HTTPException, Request, status

from ..config.constants import MatchMode
from ..core.exceptions import OverrideStoreUnavailableError
from ..features.permissions.entities import AuthenticatedIdentity, Decision, DenyReason, Permission
from ..features.permissions.services import AccessDecisionService, OverrideMutationService

logger = logging.getLogger(__name__)


class AccessDeniedError(HTTPException):
    """HTTP error carrying a deny decision as its body."""

    def __init__(self, decision: Decision):
        status_code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if decision.reason is DenyReason.UNAVAILABLE
            else status.HTTP_403_FORBIDDEN
        )
        super().__init__(status_code=status_code, detail=decision.to_dict())
        self.decision = decision


def _tokens(permissions: Iterable[Any]) -> List[str]:
    if isinstance(permissions, (str, Permission)):
        permissions = [permissions]
    return [p.value if isinstance(p, Permission) else p for p in permissions]


class AccessControlDependencies:
    """FastAPI permission-guard dependencies factory.

    ``identity_dependency`` is whatever dependency the application uses to
    authenticate a request; it must resolve to an AuthenticatedIdentity.

    With a ``mutation_service``, tenant-scoped guards create the override of
    a first-time user from the identity's company, so the tenant check has a
    stored scope to compare against. Existing overrides are never changed.
    """

    def __init__(
        self,
        access_service: AccessDecisionService,
        identity_dependency: Callable[..., Any],
        mutation_service: Optional[OverrideMutationService] = None,
    ):
        self.access_service = access_service
        self.identity_dependency = identity_dependency
        self.mutation_service = mutation_service

    async def _provision(self, identity: AuthenticatedIdentity) -> None:
        if self.mutation_service is None or identity.company_id is None:
            return
        try:
            await self.mutation_service.ensure_override(identity.user_id, identity.role, identity.company_id)
        except OverrideStoreUnavailableError as e:
            logger.warning(f"Could not provision override for user {identity.user_id}: {e.message}")
            raise AccessDeniedError(Decision.deny(DenyReason.UNAVAILABLE, e.message))

    def require_permissions(
        self,
        permissions: Iterable[Any],
        any_of: bool = False,
        owner_company_param: Optional[str] = None,
    ):
        """Require permissions of the authenticated identity.

        Args:
            permissions: Permission tokens (or members) to require
            any_of: Require at least one instead of all
            owner_company_param: Path or query parameter naming the company
                that owns the addressed resource

        Returns:
            Dependency resolving to the identity on Allow
        """
        tokens = _tokens(permissions)
        match = MatchMode.ANY if any_of else MatchMode.ALL

        async def dependency(
            request: Request,
            identity: Annotated[AuthenticatedIdentity, Depends(self.identity_dependency)],
        ) -> AuthenticatedIdentity:
            owner_company_id = None
            if owner_company_param:
                owner_company_id = (
                    request.path_params.get(owner_company_param)
                    or request.query_params.get(owner_company_param)
                )
                if owner_company_id is not None:
                    await self._provision(identity)

            decision = await self.access_service.check_access(
                identity.access_request(tokens, resource_owner_company_id=owner_company_id, match=match)
            )
            if not decision.allowed:
                logger.warning(
                    f"User {identity.user_id} denied {request.method} {request.url.path}: "
                    f"{decision.reason.value} {decision.detail}"
                )
                raise AccessDeniedError(decision)
            return identity

        return dependency

    def require_permission(self, permission: Any, owner_company_param: Optional[str] = None):
        """Require one specific permission."""
        return self.require_permissions([permission], owner_company_param=owner_company_param)

    def require_any_permission(self, permissions: Iterable[Any], owner_company_param: Optional[str] = None):
        """Require any of the specified permissions."""
        return self.require_permissions(permissions, any_of=True, owner_company_param=owner_company_param)

    def require_all_permissions(self, permissions: Iterable[Any], owner_company_param: Optional[str] = None):
        """Require all of the specified permissions."""
        return self.require_permissions(permissions, owner_company_param=owner_company_param)


def require_permissions(
    access_service: AccessDecisionService,
    identity_dependency: Callable[..., Any],
    permissions: Iterable[Any],
    any_of: bool = False,
    owner_company_param: Optional[str] = None,
    mutation_service: Optional[OverrideMutationService] = None,
):
    """Build a one-off permission guard without keeping a factory around."""
    return AccessControlDependencies(access_service, identity_dependency, mutation_service).require_permissions(
        permissions, any_of=any_of, owner_company_param=owner_company_param
    )
