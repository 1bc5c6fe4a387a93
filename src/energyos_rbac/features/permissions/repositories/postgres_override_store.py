"""PostgreSQL override store using AsyncPG.

Compare-and-set is expressed in SQL: the first write is an
``INSERT ... ON CONFLICT DO NOTHING`` and later writes are
``UPDATE ... WHERE version = $expected``. Zero affected rows means another
writer got there first.
"""

import logging
from typing import Any, Optional

import asyncpg

from ....config.constants import INITIAL_OVERRIDE_VERSION, StoreDefaults
from ....core.exceptions import (
    ConfigurationError,
    ConflictError,
    OverrideStoreUnavailableError,
    ValidationError,
)
from ..entities.override import UserOverride
from ..entities.protocols import OverrideStore

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class AsyncPGOverrideStore(OverrideStore):
    """Override store backed by a single PostgreSQL table."""

    backend_name = "postgres"

    def __init__(self, pool: asyncpg.Pool, table: str = StoreDefaults.OVERRIDE_TABLE):
        """Initialize the store with a connection pool and table name."""
        self.pool = pool
        self.table = self._validate_table_name(table)

    @staticmethod
    def _validate_table_name(table: str) -> str:
        """Validate table name to prevent SQL injection."""
        parts = table.split(".")
        if len(parts) > 2 or not all(part.isidentifier() for part in parts):
            raise ConfigurationError(f"Invalid override table name: {table}")
        return table

    @classmethod
    async def from_dsn(
        cls,
        dsn: str,
        table: str = StoreDefaults.OVERRIDE_TABLE,
        min_size: int = StoreDefaults.DB_POOL_MIN_SIZE,
        max_size: int = StoreDefaults.DB_POOL_MAX_SIZE
    ) -> "AsyncPGOverrideStore":
        """Create a store with its own connection pool."""
        try:
            pool = await asyncpg.create_pool(dsn, min_size=min_size, max_size=max_size)
        except _BACKEND_ERRORS as e:
            raise OverrideStoreUnavailableError(f"PostgreSQL connection failed: {e}", backend=cls.backend_name)
        return cls(pool, table=table)

    async def create_schema(self) -> None:
        """Create the override table if it does not exist."""
        query = f"""
        CREATE TABLE IF NOT EXISTS {self.table} (
            user_id TEXT PRIMARY KEY,
            role TEXT NOT NULL,
            company_id TEXT NULL,
            custom_permissions TEXT[] NOT NULL DEFAULT '{{}}',
            revoked_permissions TEXT[] NOT NULL DEFAULT '{{}}',
            updated_at TIMESTAMPTZ NOT NULL,
            version INTEGER NOT NULL CHECK (version > 0)
        )
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query)

    @staticmethod
    def _row_to_override(row: Any) -> UserOverride:
        return UserOverride.from_dict({
            "user_id": row["user_id"],
            "role": row["role"],
            "company_id": row["company_id"],
            "custom_permissions": list(row["custom_permissions"] or []),
            "revoked_permissions": list(row["revoked_permissions"] or []),
            "updated_at": row["updated_at"],
            "version": row["version"],
        })

    async def get_override(self, user_id: str) -> Optional[UserOverride]:
        query = f"""
        SELECT user_id, role, company_id, custom_permissions, revoked_permissions,
               updated_at, version
        FROM {self.table}
        WHERE user_id = $1
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, user_id)
        except _BACKEND_ERRORS as e:
            logger.warning(f"Failed to read override for user {user_id}: {e}")
            raise OverrideStoreUnavailableError(f"PostgreSQL read failed: {e}", backend=self.backend_name)

        if row is None:
            return None
        try:
            return self._row_to_override(row)
        except ValidationError as e:
            logger.error(f"Override row for user {user_id} is unreadable: {e.message}")
            raise OverrideStoreUnavailableError(
                f"Stored override for user {user_id} is corrupt: {e.message}", backend=self.backend_name
            ) from e

    async def save_override(self, override: UserOverride, expected_version: int) -> UserOverride:
        stored = override.stamped(expected_version + 1)
        params = (
            stored.user_id,
            stored.role.value,
            stored.company_id,
            sorted(p.value for p in stored.custom_permissions),
            sorted(p.value for p in stored.revoked_permissions),
            stored.updated_at,
            stored.version,
        )

        if expected_version == INITIAL_OVERRIDE_VERSION:
            query = f"""
            INSERT INTO {self.table}
                (user_id, role, company_id, custom_permissions, revoked_permissions, updated_at, version)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            ON CONFLICT (user_id) DO NOTHING
            RETURNING version
            """
            args = params
        else:
            query = f"""
            UPDATE {self.table}
            SET role = $2,
                company_id = $3,
                custom_permissions = $4,
                revoked_permissions = $5,
                updated_at = $6,
                version = $7
            WHERE user_id = $1 AND version = $8
            RETURNING version
            """
            args = params + (expected_version,)

        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    written = await conn.fetchval(query, *args)
                    if written is None:
                        actual_version = await conn.fetchval(
                            f"SELECT version FROM {self.table} WHERE user_id = $1", stored.user_id
                        )
                        raise ConflictError(
                            stored.user_id,
                            expected_version,
                            actual_version if actual_version is not None else INITIAL_OVERRIDE_VERSION,
                        )
        except _BACKEND_ERRORS as e:
            logger.warning(f"Failed to write override for user {stored.user_id}: {e}")
            raise OverrideStoreUnavailableError(f"PostgreSQL write failed: {e}", backend=self.backend_name)

        logger.debug(f"Stored override for user {stored.user_id} at version {stored.version}")
        return stored

    async def close(self) -> None:
        await self.pool.close()
