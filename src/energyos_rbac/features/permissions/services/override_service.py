"""
Override mutation service.

Administrative write path for per-user overrides. Every operation is a
read-modify-write guarded by the override version: callers pass the version
they last read (0 when no override existed) and receive a ConflictError if
someone else wrote in between.
"""
import logging
from typing import Optional, Union

from ....config.constants import INITIAL_OVERRIDE_VERSION
from ....core.exceptions import (
    AccessControlError,
    ConflictError,
    InvalidOperationError,
    OverrideStoreUnavailableError,
    ValidationError,
)
from ..entities.override import UserOverride
from ..entities.permission import Permission
from ..entities.protocols import OverrideStore
from ..entities.role import Role
from ..registry import base_permissions, parse_permission

logger = logging.getLogger(__name__)


class OverrideMutationService:
    """Grant, revoke and restore permissions on user overrides."""

    def __init__(self, override_store: OverrideStore):
        self.override_store = override_store

    async def _read(self, user_id: str) -> Optional[UserOverride]:
        """Read the override; any failure of the read becomes store unavailability."""
        try:
            return await self.override_store.get_override(user_id)
        except OverrideStoreUnavailableError:
            raise
        except Exception as e:
            raise OverrideStoreUnavailableError(f"Override read for user {user_id} failed: {e}") from e

    async def get_override(self, user_id: str) -> Optional[UserOverride]:
        """Get the stored override of a user, or None."""
        return await self._read(user_id)

    async def _load_for_write(
        self,
        user_id: str,
        role: Optional[Role],
        expected_version: int,
        company_id: Optional[str] = None
    ) -> UserOverride:
        """Read the current override and verify the caller's version.

        An absent override is materialized as an empty version-0 override for
        ``role``. Role mismatches against a stored override are rejected.
        """
        if not isinstance(expected_version, int) or isinstance(expected_version, bool) or expected_version < 0:
            raise ValidationError(
                "expected_version must be a non-negative integer", "expected_version", expected_version
            )

        current = await self._read(user_id)
        actual_version = current.version if current is not None else INITIAL_OVERRIDE_VERSION
        if actual_version != expected_version:
            logger.info(
                f"Version conflict on override for user {user_id}: "
                f"expected {expected_version}, found {actual_version}"
            )
            raise ConflictError(user_id, expected_version, actual_version)

        if current is None:
            if role is None:
                raise InvalidOperationError(
                    f"User {user_id} has no override; a role is required to create one", user_id
                )
            member = Role.lookup(role)
            if member is None:
                raise ValidationError(f"Unknown role: {role!r}", "role", role)
            return UserOverride.empty(user_id, member, company_id)

        if role is not None and Role.lookup(role) is not current.role:
            raise InvalidOperationError(
                f"Override for user {user_id} belongs to role {current.role.value}, not {role}; "
                f"use change_role to re-base it",
                user_id,
            )
        return current

    async def _save(self, updated: UserOverride, expected_version: int, operation: str) -> UserOverride:
        try:
            stored = await self.override_store.save_override(updated, expected_version)
        except AccessControlError:
            raise
        except Exception as e:
            raise OverrideStoreUnavailableError(
                f"Override write for user {updated.user_id} failed: {e}"
            ) from e
        logger.info(
            f"Override {operation} for user {stored.user_id} saved at version {stored.version}"
        )
        return stored

    async def grant_permission(
        self,
        user_id: str,
        permission: Union[Permission, str],
        *,
        role: Optional[Role] = None,
        expected_version: int,
        company_id: Optional[str] = None
    ) -> UserOverride:
        """
        Grant an extra permission to a user.

        Granting a permission the role already implies, or one already
        granted, is a no-op: nothing is written and the current override is
        returned.

        Args:
            user_id: User identifier
            permission: Permission to grant
            role: User's role; required when no override exists yet
            expected_version: Version the caller last read
            company_id: Tenant scope recorded when the override is created;
                on an existing override it must match the stored scope
                (use assign_company to move a user between tenants)

        Returns:
            Current override after the grant

        Raises:
            ValidationError: Unknown permission or bad version
            ConflictError: Stale ``expected_version``
            InvalidOperationError: Role or company differs from the stored override's
        """
        permission = parse_permission(permission)
        current = await self._load_for_write(user_id, role, expected_version, company_id)

        if company_id is not None and current.company_id != company_id:
            raise InvalidOperationError(
                f"Override for user {user_id} is scoped to company {current.company_id}, not {company_id}; "
                f"use assign_company to change it",
                user_id,
            )

        if permission in base_permissions(current.role) or permission in current.custom_permissions:
            logger.debug(f"Grant of {permission} to user {user_id} is already effective; no-op")
            return current

        updated = current.with_changes(
            custom_permissions=current.custom_permissions | {permission}
        )
        return await self._save(updated, expected_version, f"grant {permission}")

    async def revoke_permission(
        self,
        user_id: str,
        permission: Union[Permission, str],
        *,
        role: Optional[Role] = None,
        expected_version: int
    ) -> UserOverride:
        """
        Revoke a permission from a user.

        A base permission of the role is added to the revoked set. A
        permission held only through a custom grant has that grant withdrawn.
        Revoking something the user never held is an invalid operation.

        Raises:
            ValidationError: Unknown permission or bad version
            ConflictError: Stale ``expected_version``
            InvalidOperationError: Permission is neither a base nor a custom grant
        """
        permission = parse_permission(permission)
        current = await self._load_for_write(user_id, role, expected_version)

        if permission in base_permissions(current.role):
            if permission in current.revoked_permissions:
                logger.debug(f"Permission {permission} already revoked for user {user_id}; no-op")
                return current
            updated = current.with_changes(
                revoked_permissions=current.revoked_permissions | {permission}
            )
            return await self._save(updated, expected_version, f"revoke {permission}")

        if permission in current.custom_permissions:
            updated = current.with_changes(
                custom_permissions=current.custom_permissions - {permission}
            )
            return await self._save(updated, expected_version, f"withdraw {permission}")

        raise InvalidOperationError(
            f"Cannot revoke {permission}: role {current.role.value} does not grant it "
            f"and user {user_id} holds no custom grant for it",
            user_id,
            permission.value,
        )

    async def restore_permission(
        self,
        user_id: str,
        permission: Union[Permission, str],
        *,
        role: Optional[Role] = None,
        expected_version: int
    ) -> UserOverride:
        """
        Undo a revocation, returning a base permission to the user.

        Restoring a permission that is not revoked is a no-op.
        """
        permission = parse_permission(permission)
        current = await self._load_for_write(user_id, role, expected_version)

        if permission not in current.revoked_permissions:
            logger.debug(f"Permission {permission} is not revoked for user {user_id}; no-op")
            return current

        updated = current.with_changes(
            revoked_permissions=current.revoked_permissions - {permission}
        )
        return await self._save(updated, expected_version, f"restore {permission}")

    async def assign_company(
        self,
        user_id: str,
        company_id: Optional[str],
        *,
        role: Optional[Role] = None,
        expected_version: int
    ) -> UserOverride:
        """Set (or clear, with None) the tenant a user's override is scoped to."""
        if company_id is not None and (not isinstance(company_id, str) or not company_id.strip()):
            raise ValidationError("company_id must be a non-empty string or None", "company_id", company_id)

        current = await self._load_for_write(user_id, role, expected_version)
        if current.company_id == company_id and current.is_persisted:
            return current

        updated = current.with_changes(company_id=company_id)
        return await self._save(updated, expected_version, "company assignment")

    async def change_role(
        self,
        user_id: str,
        new_role: Role,
        *,
        expected_version: int
    ) -> UserOverride:
        """
        Re-base an existing override on a new role.

        Custom grants the new role already implies are dropped, as are
        revocations of permissions the new role does not grant.

        Raises:
            InvalidOperationError: If the user has no stored override
        """
        member = Role.lookup(new_role)
        if member is None:
            raise ValidationError(f"Unknown role: {new_role!r}", "role", new_role)

        current = await self._load_for_write(user_id, None, expected_version)
        if current.role is member:
            return current

        new_base = base_permissions(member)
        updated = current.with_changes(
            role=member,
            custom_permissions=current.custom_permissions - new_base,
            revoked_permissions=current.revoked_permissions & new_base,
        )
        return await self._save(updated, expected_version, f"role change to {member.value}")

    async def ensure_override(
        self,
        user_id: str,
        role: Role,
        company_id: Optional[str] = None
    ) -> UserOverride:
        """
        Create a user's override from their authenticated identity if none is stored.

        The new override records ``company_id`` as its tenant scope. A stored
        override is returned untouched; moving it between tenants goes through
        assign_company.

        Raises:
            ValidationError: Unknown role or blank company_id
            OverrideStoreUnavailableError: If the store cannot be read or written
        """
        current = await self._read(user_id)
        if current is not None:
            return current

        member = Role.lookup(role)
        if member is None:
            raise ValidationError(f"Unknown role: {role!r}", "role", role)
        if company_id is not None and (not isinstance(company_id, str) or not company_id.strip()):
            raise ValidationError("company_id must be a non-empty string or None", "company_id", company_id)

        try:
            return await self._save(
                UserOverride.empty(user_id, member, company_id), INITIAL_OVERRIDE_VERSION, "provisioning"
            )
        except ConflictError:
            # Provisioned concurrently
            logger.debug(f"Override for user {user_id} was created by another writer")
            return await self._read(user_id)
