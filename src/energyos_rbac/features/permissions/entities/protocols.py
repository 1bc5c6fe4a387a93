"""Protocol interfaces for permission feature dependency injection.

Defines the contract of the override store collaborator. Concrete stores live
in ``repositories`` and are selected by the factory.
"""

from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable

from .override import UserOverride


@runtime_checkable
class OverrideStore(Protocol):
    """Persistence contract for per-user permission overrides."""

    @abstractmethod
    async def get_override(self, user_id: str) -> Optional[UserOverride]:
        """Get the stored override for a user, or None if none exists.

        Raises:
            OverrideStoreUnavailableError: If the backend cannot be reached
        """
        ...

    @abstractmethod
    async def save_override(self, override: UserOverride, expected_version: int) -> UserOverride:
        """Compare-and-set write of an override.

        The write succeeds only if the stored version equals
        ``expected_version`` (0 meaning "no override stored yet"). The stored
        copy carries ``expected_version + 1`` and a fresh ``updated_at``.

        Returns:
            The override as stored

        Raises:
            ConflictError: If the stored version differs; nothing is written
            OverrideStoreUnavailableError: If the backend cannot be reached
        """
        ...
