"""Constants and enums for energyos-rbac.

This module defines the constants, enums, and configuration values
shared by the access-control core, its store adapters and the HTTP layer.
"""

from enum import Enum
from typing import Final


class StoreBackend(str, Enum):
    """Override store backends selectable from settings."""

    MEMORY = "memory"
    REDIS = "redis"
    POSTGRES = "postgres"


class MatchMode(str, Enum):
    """How the required permissions of a request are combined."""

    ALL = "all"
    ANY = "any"


class CacheKeys:
    """Key patterns for Redis."""

    USER_OVERRIDE: Final[str] = "{prefix}:override:{user_id}"


class StoreDefaults:
    """Default store connection values."""

    REDIS_KEY_PREFIX: Final[str] = "energyos_rbac"
    OVERRIDE_TABLE: Final[str] = "user_permission_overrides"
    READ_TIMEOUT_SECONDS: Final[float] = 2.0
    DB_POOL_MIN_SIZE: Final[int] = 1
    DB_POOL_MAX_SIZE: Final[int] = 10


# Version an absent override is considered to have
INITIAL_OVERRIDE_VERSION: Final[int] = 0

# Permission guarding the administrative override routes
MANAGE_OVERRIDES_PERMISSION: Final[str] = "users:manage_roles"
