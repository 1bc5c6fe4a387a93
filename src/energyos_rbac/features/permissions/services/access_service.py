"""
Access decision service.

Answers AccessRequests with Allow/Deny by combining the role table, the
user's stored override and tenant ownership. Read-only: the only awaited
operation is a single override store read, and every failure of that read
resolves to a Deny.
"""
import asyncio
import logging
from typing import FrozenSet, Optional

from ....config.constants import MatchMode, StoreDefaults
from ....core.exceptions import OverrideStoreUnavailableError
from ..entities.access import AccessRequest, Decision, DenyReason
from ..entities.override import UserOverride
from ..entities.permission import Permission
from ..entities.protocols import OverrideStore
from ..entities.role import Role
from ..registry import is_known_permission
from .resolver import effective_permissions

logger = logging.getLogger(__name__)


class AccessDecisionService:
    """
    Entry point for authorization checks.

    Provides fail-closed permission checking with per-user overrides and
    tenant isolation. Decisions are returned as values; auditing them is the
    caller's responsibility.
    """

    def __init__(
        self,
        override_store: OverrideStore,
        store_timeout_seconds: Optional[float] = StoreDefaults.READ_TIMEOUT_SECONDS
    ):
        """
        Initialize access decision service.

        Args:
            override_store: Store holding per-user overrides
            store_timeout_seconds: Upper bound for the override read; None disables it
        """
        self.override_store = override_store
        self.store_timeout_seconds = store_timeout_seconds

    async def _load_override(self, user_id: str) -> Optional[UserOverride]:
        """Read the override; any failure of the read becomes store unavailability."""
        try:
            if self.store_timeout_seconds is None:
                return await self.override_store.get_override(user_id)
            return await asyncio.wait_for(
                self.override_store.get_override(user_id),
                timeout=self.store_timeout_seconds
            )
        except asyncio.TimeoutError:
            raise OverrideStoreUnavailableError(
                f"Override read for user {user_id} timed out after {self.store_timeout_seconds}s"
            )
        except OverrideStoreUnavailableError:
            raise
        except Exception as e:
            raise OverrideStoreUnavailableError(f"Override read for user {user_id} failed: {e}") from e

    async def check_access(self, request: AccessRequest) -> Decision:
        """
        Decide whether the request's identity may proceed.

        Args:
            request: Validated access request

        Returns:
            Decision.allow() or Decision.deny(reason, detail)
        """
        # 1. Catalog membership
        for token in request.required_permissions:
            if not is_known_permission(token):
                logger.error(
                    f"Access check for user {request.user_id} requested unknown permission {token!r}"
                )
                return Decision.deny(DenyReason.INVALID_PERMISSION, token)

        # 2. Override snapshot, fail-closed
        try:
            override = await self._load_override(request.user_id)
        except OverrideStoreUnavailableError as e:
            logger.warning(f"Denying access for user {request.user_id}: {e.message}")
            return Decision.deny(DenyReason.UNAVAILABLE, e.message)

        # 3. Effective set
        effective = effective_permissions(request.role, override)

        # 4. Permission coverage
        missing = self._find_missing(request, effective)
        if missing is not None:
            logger.debug(f"Permission denied: {missing} for user {request.user_id}")
            return Decision.deny(DenyReason.MISSING_PERMISSION, missing)

        # 5. Tenant scoping
        owner_company_id = request.resource_owner_company_id
        if owner_company_id is not None and not request.role.bypasses_tenant_scope:
            company_id = override.company_id if override is not None else None
            if company_id is None or company_id != owner_company_id:
                logger.debug(
                    f"Cross-tenant access denied for user {request.user_id}: "
                    f"company {company_id} vs resource owner {owner_company_id}"
                )
                return Decision.deny(DenyReason.CROSS_TENANT_ACCESS, owner_company_id)

        return Decision.allow()

    @staticmethod
    def _find_missing(request: AccessRequest, effective: FrozenSet[Permission]) -> Optional[str]:
        """Return the detail of the uncovered requirement, or None if covered."""
        required = request.required_permissions

        if request.match is MatchMode.ANY:
            if any(Permission.lookup(token) in effective for token in required):
                return None
            return ",".join(required)

        for token in required:
            if Permission.lookup(token) not in effective:
                return token
        return None

    async def has_permission(self, role: Role, user_id: str, permission: str) -> bool:
        """Check a single permission with no tenant constraint."""
        decision = await self.check_access(
            AccessRequest(role=role, user_id=user_id, required_permissions=(permission,))
        )
        return decision.allowed

    async def get_effective_permissions(self, role: Role, user_id: str) -> FrozenSet[Permission]:
        """
        Get the resolved permission set of a user.

        Args:
            role: Role the user is acting under
            user_id: User identifier

        Returns:
            Effective permission set

        Raises:
            OverrideStoreUnavailableError: If the override cannot be read
        """
        override = await self._load_override(user_id)
        return effective_permissions(role, override)
