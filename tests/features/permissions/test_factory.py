"""Tests for store and service wiring."""

from unittest.mock import AsyncMock, patch

import pytest

from energyos_rbac.config import AccessControlSettings
from energyos_rbac.core.exceptions import ConfigurationError
from energyos_rbac.features.permissions.factory import create_access_control, create_override_store
from energyos_rbac.features.permissions.repositories import (
    AsyncPGOverrideStore,
    InMemoryOverrideStore,
    RedisOverrideStore,
)


def _settings(**values):
    return AccessControlSettings(_env_file=None, **values)


class TestCreateOverrideStore:
    """Test backend selection from settings."""

    @pytest.mark.asyncio
    async def test_memory_backend(self):
        store = await create_override_store(_settings(store_backend="memory"))
        assert isinstance(store, InMemoryOverrideStore)

    @pytest.mark.asyncio
    async def test_redis_backend(self):
        store = await create_override_store(
            _settings(store_backend="redis", redis_url="redis://localhost:6379/0", redis_key_prefix="tenant-x")
        )
        assert isinstance(store, RedisOverrideStore)
        assert store._key("u1") == "tenant-x:override:u1"

    @pytest.mark.asyncio
    async def test_redis_backend_requires_url(self):
        with pytest.raises(ConfigurationError):
            await create_override_store(_settings(store_backend="redis"))

    @pytest.mark.asyncio
    async def test_postgres_backend_requires_url(self):
        with pytest.raises(ConfigurationError):
            await create_override_store(_settings(store_backend="postgres"))

    @pytest.mark.asyncio
    async def test_postgres_backend(self):
        with patch("asyncpg.create_pool", new=AsyncMock(return_value=object())) as create_pool:
            store = await create_override_store(
                _settings(store_backend="postgres", database_url="postgresql://localhost/energyos", db_pool_max_size=4)
            )

        assert isinstance(store, AsyncPGOverrideStore)
        create_pool.assert_awaited_once_with("postgresql://localhost/energyos", min_size=1, max_size=4)


class TestCreateAccessControl:
    """Test service wiring."""

    @pytest.mark.asyncio
    async def test_services_share_store(self):
        access_control = await create_access_control(_settings(store_timeout_seconds=0.5))

        assert access_control.access.override_store is access_control.store
        assert access_control.mutations.override_store is access_control.store
        assert access_control.access.store_timeout_seconds == 0.5

    @pytest.mark.asyncio
    async def test_given_store_is_used(self, override_store):
        access_control = await create_access_control(_settings(), store=override_store)
        assert access_control.store is override_store

    @pytest.mark.asyncio
    async def test_close_releases_store(self):
        store = InMemoryOverrideStore()
        store.close = AsyncMock()
        access_control = await create_access_control(_settings(), store=store)

        await access_control.close()

        store.close.assert_awaited_once()
