"""
Redis override store.

Overrides are stored as JSON documents, one key per user. Writes use an
optimistic WATCH/MULTI/EXEC transaction so a concurrent writer turns into a
ConflictError instead of a lost update.
"""
import json
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError, WatchError

from ....config.constants import CacheKeys, INITIAL_OVERRIDE_VERSION, StoreDefaults
from ....core.exceptions import ConflictError, OverrideStoreUnavailableError, ValidationError
from ..entities.override import UserOverride
from ..entities.protocols import OverrideStore

logger = logging.getLogger(__name__)


class RedisOverrideStore(OverrideStore):
    """
    Redis implementation of the override store.

    Features:
    - One JSON document per user under a configurable key prefix
    - Compare-and-set on the document's version via WATCH
    - Backend failures and unreadable documents surfaced as
      OverrideStoreUnavailableError
    """

    backend_name = "redis"

    def __init__(self, redis_client: redis.Redis, key_prefix: str = StoreDefaults.REDIS_KEY_PREFIX):
        self._redis = redis_client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = StoreDefaults.REDIS_KEY_PREFIX) -> "RedisOverrideStore":
        """Create a store with its own client from a redis:// URL."""
        return cls(redis.from_url(url), key_prefix=key_prefix)

    def _key(self, user_id: str) -> str:
        return CacheKeys.USER_OVERRIDE.format(prefix=self._key_prefix, user_id=user_id)

    @staticmethod
    def _decode(raw) -> Optional[UserOverride]:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return UserOverride.from_dict(json.loads(raw))

    def _decode_or_unavailable(self, raw, user_id: str) -> Optional[UserOverride]:
        try:
            return self._decode(raw)
        except (ValueError, ValidationError) as e:
            logger.error(f"Override document for user {user_id} is unreadable: {e}")
            raise OverrideStoreUnavailableError(
                f"Stored override for user {user_id} is corrupt: {e}", backend=self.backend_name
            ) from e

    async def get_override(self, user_id: str) -> Optional[UserOverride]:
        try:
            raw = await self._redis.get(self._key(user_id))
        except RedisError as e:
            logger.warning(f"Failed to read override for user {user_id} from Redis: {e}")
            raise OverrideStoreUnavailableError(f"Redis read failed: {e}", backend=self.backend_name)
        return self._decode_or_unavailable(raw, user_id)

    async def save_override(self, override: UserOverride, expected_version: int) -> UserOverride:
        key = self._key(override.user_id)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                current = self._decode_or_unavailable(await pipe.get(key), override.user_id)
                actual_version = current.version if current is not None else INITIAL_OVERRIDE_VERSION
                if actual_version != expected_version:
                    await pipe.unwatch()
                    raise ConflictError(override.user_id, expected_version, actual_version)

                stored = override.stamped(expected_version + 1)
                pipe.multi()
                pipe.set(key, json.dumps(stored.to_dict()))
                await pipe.execute()
        except WatchError:
            logger.info(f"Override key for user {override.user_id} changed during write")
            raise ConflictError(override.user_id, expected_version)
        except RedisError as e:
            logger.warning(f"Failed to write override for user {override.user_id} to Redis: {e}")
            raise OverrideStoreUnavailableError(f"Redis write failed: {e}", backend=self.backend_name)

        logger.debug(f"Stored override for user {stored.user_id} at version {stored.version}")
        return stored

    async def close(self) -> None:
        await self._redis.aclose()
