"""Configuration module for energyos-rbac."""

from .constants import (
    StoreBackend,
    MatchMode,
    CacheKeys,
    StoreDefaults,
    INITIAL_OVERRIDE_VERSION,
    MANAGE_OVERRIDES_PERMISSION,
)
from .settings import AccessControlSettings, get_settings
from .logging_config import LoggingConfig, setup_logging, get_logger

__all__ = [
    "StoreBackend",
    "MatchMode",
    "CacheKeys",
    "StoreDefaults",
    "INITIAL_OVERRIDE_VERSION",
    "MANAGE_OVERRIDES_PERMISSION",
    "AccessControlSettings",
    "get_settings",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
]
