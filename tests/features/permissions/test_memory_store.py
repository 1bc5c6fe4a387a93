"""Tests for the in-memory override store."""

import asyncio

import pytest

from energyos_rbac.core.exceptions import ConflictError
from energyos_rbac.features.permissions.entities import OverrideStore, Permission, Role, UserOverride
from energyos_rbac.features.permissions.repositories import InMemoryOverrideStore


class TestInMemoryOverrideStore:
    """Test compare-and-set semantics of the in-memory store."""

    def test_implements_protocol(self, override_store):
        assert isinstance(override_store, OverrideStore)

    @pytest.mark.asyncio
    async def test_absent_override(self, override_store):
        assert await override_store.get_override("nobody") is None

    @pytest.mark.asyncio
    async def test_save_increments_version(self, override_store):
        first = await override_store.save_override(UserOverride.empty("u1", Role.BANK), 0)
        second = await override_store.save_override(
            first.with_changes(custom_permissions=frozenset({Permission.REPORTS_EXPORT})), 1
        )

        assert first.version == 1
        assert second.version == 2
        assert second.updated_at >= first.updated_at
        assert await override_store.get_override("u1") == second

    @pytest.mark.asyncio
    async def test_first_write_conflicts_when_override_exists(self, override_store):
        await override_store.save_override(UserOverride.empty("u1", Role.BANK), 0)

        with pytest.raises(ConflictError) as exc_info:
            await override_store.save_override(UserOverride.empty("u1", Role.BANK, "bank-b"), 0)

        assert exc_info.value.actual_version == 1
        assert (await override_store.get_override("u1")).company_id is None

    @pytest.mark.asyncio
    async def test_concurrent_writers_one_wins(self):
        store = InMemoryOverrideStore()
        base = UserOverride.empty("u1", Role.SUPPORT)

        results = await asyncio.gather(
            store.save_override(base.with_changes(custom_permissions=frozenset({Permission.USERS_DELETE})), 0),
            store.save_override(base.with_changes(company_id="support-org"), 0),
            return_exceptions=True,
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        saved = [r for r in results if isinstance(r, UserOverride)]
        assert len(conflicts) == 1
        assert len(saved) == 1
        assert await store.get_override("u1") == saved[0]
