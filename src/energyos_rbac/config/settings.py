"""
Settings for the access-control core.

Values are read from the environment (``RBAC_`` prefix) or a ``.env`` file and
select which override store backs the decision and mutation services.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import StoreBackend, StoreDefaults


class AccessControlSettings(BaseSettings):
    """Access-control settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="RBAC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    environment: str = Field(default="development")

    # Override store selection
    store_backend: StoreBackend = Field(default=StoreBackend.MEMORY)
    store_timeout_seconds: float = Field(default=StoreDefaults.READ_TIMEOUT_SECONDS, gt=0)

    # Redis store
    redis_url: Optional[str] = Field(default=None)
    redis_key_prefix: str = Field(default=StoreDefaults.REDIS_KEY_PREFIX)

    # PostgreSQL store
    database_url: Optional[str] = Field(default=None)
    override_table: str = Field(default=StoreDefaults.OVERRIDE_TABLE)
    db_pool_min_size: int = Field(default=StoreDefaults.DB_POOL_MIN_SIZE, ge=1)
    db_pool_max_size: int = Field(default=StoreDefaults.DB_POOL_MAX_SIZE, ge=1)

    @field_validator("override_table")
    @classmethod
    def _validate_table_name(cls, value: str) -> str:
        # Interpolated into SQL, so restrict to [schema.]identifier
        parts = value.split(".")
        if len(parts) > 2 or not all(part.isidentifier() for part in parts):
            raise ValueError(f"Invalid override table name: {value}")
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> AccessControlSettings:
    """Get cached settings instance."""
    return AccessControlSettings()
