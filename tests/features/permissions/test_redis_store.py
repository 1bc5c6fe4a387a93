"""Tests for the Redis override store."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import WatchError

from energyos_rbac.core.exceptions import ConflictError, OverrideStoreUnavailableError
from energyos_rbac.features.permissions.entities import Permission, Role, UserOverride
from energyos_rbac.features.permissions.repositories import RedisOverrideStore


def _stored_json(version=1, **changes):
    override = UserOverride(user_id="u1", role=Role.BANK, **changes).stamped(version)
    return json.dumps(override.to_dict()).encode()


@pytest.fixture
def pipe():
    """Mock Redis transaction pipeline."""
    pipeline = MagicMock()
    pipeline.watch = AsyncMock()
    pipeline.unwatch = AsyncMock()
    pipeline.get = AsyncMock(return_value=None)
    pipeline.execute = AsyncMock(return_value=[True])
    return pipeline


@pytest.fixture
def redis_client(pipe):
    """Mock async Redis client handing out the mock pipeline."""
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.aclose = AsyncMock()
    client.pipeline.return_value.__aenter__.return_value = pipe
    client.pipeline.return_value.__aexit__.return_value = False
    return client


@pytest.fixture
def store(redis_client):
    return RedisOverrideStore(redis_client, key_prefix="test")


class TestRedisOverrideStore:
    """Test Redis store reads, compare-and-set writes and failures."""

    @pytest.mark.asyncio
    async def test_get_absent(self, store, redis_client):
        assert await store.get_override("u1") is None
        redis_client.get.assert_awaited_once_with("test:override:u1")

    @pytest.mark.asyncio
    async def test_get_decodes_document(self, store, redis_client):
        redis_client.get.return_value = _stored_json(version=3, custom_permissions={Permission.REPORTS_EXPORT})

        override = await store.get_override("u1")

        assert override.version == 3
        assert override.role is Role.BANK
        assert override.custom_permissions == frozenset({Permission.REPORTS_EXPORT})

    @pytest.mark.asyncio
    async def test_get_backend_error(self, store, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")

        with pytest.raises(OverrideStoreUnavailableError) as exc_info:
            await store.get_override("u1")

        assert exc_info.value.backend == "redis"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        b"{not json",
        b"\xff\xfe",
        json.dumps({"user_id": "u1", "role": "OWNER", "version": 1}).encode(),
    ])
    async def test_get_unreadable_document(self, store, redis_client, raw):
        redis_client.get.return_value = raw

        with pytest.raises(OverrideStoreUnavailableError) as exc_info:
            await store.get_override("u1")

        assert exc_info.value.backend == "redis"
        assert "corrupt" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_first_save(self, store, pipe):
        stored = await store.save_override(UserOverride.empty("u1", Role.BANK, "bank-a"), 0)

        assert stored.version == 1
        pipe.watch.assert_awaited_once_with("test:override:u1")
        pipe.multi.assert_called_once()
        key, payload = pipe.set.call_args.args
        assert key == "test:override:u1"
        assert json.loads(payload)["version"] == 1
        assert json.loads(payload)["company_id"] == "bank-a"
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_save_with_matching_version(self, store, pipe):
        pipe.get.return_value = _stored_json(version=2)

        stored = await store.save_override(UserOverride.empty("u1", Role.BANK), 2)

        assert stored.version == 3

    @pytest.mark.asyncio
    async def test_stale_version_conflicts_without_writing(self, store, pipe):
        pipe.get.return_value = _stored_json(version=2)

        with pytest.raises(ConflictError) as exc_info:
            await store.save_override(UserOverride.empty("u1", Role.BANK), 1)

        assert exc_info.value.actual_version == 2
        pipe.unwatch.assert_awaited_once()
        pipe.set.assert_not_called()
        pipe.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_change_conflicts(self, store, pipe):
        pipe.execute.side_effect = WatchError("watched key changed")

        with pytest.raises(ConflictError):
            await store.save_override(UserOverride.empty("u1", Role.BANK), 0)

    @pytest.mark.asyncio
    async def test_save_backend_error(self, store, pipe):
        pipe.watch.side_effect = RedisConnectionError("refused")

        with pytest.raises(OverrideStoreUnavailableError):
            await store.save_override(UserOverride.empty("u1", Role.BANK), 0)

    @pytest.mark.asyncio
    async def test_save_over_unreadable_document(self, store, pipe):
        pipe.get.return_value = b"{not json"

        with pytest.raises(OverrideStoreUnavailableError):
            await store.save_override(UserOverride.empty("u1", Role.BANK), 0)

        pipe.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close(self, store, redis_client):
        await store.close()
        redis_client.aclose.assert_awaited_once()
