"""
Factory functions wiring the override store and services from settings.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ...config.constants import StoreBackend
from ...config.settings import AccessControlSettings, get_settings
from ...core.exceptions import ConfigurationError
from .entities.protocols import OverrideStore
from .repositories import AsyncPGOverrideStore, InMemoryOverrideStore, RedisOverrideStore
from .services import AccessDecisionService, OverrideMutationService

logger = logging.getLogger(__name__)


@dataclass
class AccessControl:
    """Wired access-control components sharing one override store."""

    store: OverrideStore
    access: AccessDecisionService
    mutations: OverrideMutationService

    async def close(self) -> None:
        """Release store connections, if the store holds any."""
        close = getattr(self.store, "close", None)
        if close is not None:
            await close()


async def create_override_store(settings: Optional[AccessControlSettings] = None) -> OverrideStore:
    """
    Create the override store selected by settings.

    Args:
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        Configured override store

    Raises:
        ConfigurationError: If the selected backend lacks its connection URL
        OverrideStoreUnavailableError: If the PostgreSQL pool cannot be created
    """
    settings = settings or get_settings()
    backend = settings.store_backend

    if backend is StoreBackend.MEMORY:
        if settings.is_production:
            logger.warning("In-memory override store selected in production; overrides are not shared")
        return InMemoryOverrideStore()

    if backend is StoreBackend.REDIS:
        if not settings.redis_url:
            raise ConfigurationError("RBAC_REDIS_URL is required for the redis override store")
        return RedisOverrideStore.from_url(settings.redis_url, key_prefix=settings.redis_key_prefix)

    if backend is StoreBackend.POSTGRES:
        if not settings.database_url:
            raise ConfigurationError("RBAC_DATABASE_URL is required for the postgres override store")
        return await AsyncPGOverrideStore.from_dsn(
            settings.database_url,
            table=settings.override_table,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    raise ConfigurationError(f"Unsupported override store backend: {backend}")


async def create_access_control(
    settings: Optional[AccessControlSettings] = None,
    store: Optional[OverrideStore] = None
) -> AccessControl:
    """
    Create decision and mutation services over one override store.

    Args:
        settings: Settings to use; defaults to the cached environment settings
        store: Pre-built store; when given, no store is created from settings

    Returns:
        Wired AccessControl bundle
    """
    settings = settings or get_settings()
    if store is None:
        store = await create_override_store(settings)

    logger.info(f"Access control initialized with {type(store).__name__}")
    return AccessControl(
        store=store,
        access=AccessDecisionService(store, store_timeout_seconds=settings.store_timeout_seconds),
        mutations=OverrideMutationService(store),
    )
