"""In-process override store.

Suitable for tests and single-process deployments. Compare-and-set runs
under an asyncio lock so concurrent writers observe consistent versions;
reads take no lock.
"""

import asyncio
import logging
from typing import Dict, Optional

from ....config.constants import INITIAL_OVERRIDE_VERSION
from ....core.exceptions import ConflictError
from ..entities.override import UserOverride
from ..entities.protocols import OverrideStore

logger = logging.getLogger(__name__)


class InMemoryOverrideStore(OverrideStore):
    """Dictionary-backed override store with optimistic versioning."""

    def __init__(self):
        self._overrides: Dict[str, UserOverride] = {}
        self._write_lock = asyncio.Lock()

    async def get_override(self, user_id: str) -> Optional[UserOverride]:
        return self._overrides.get(user_id)

    async def save_override(self, override: UserOverride, expected_version: int) -> UserOverride:
        async with self._write_lock:
            current = self._overrides.get(override.user_id)
            actual_version = current.version if current is not None else INITIAL_OVERRIDE_VERSION
            if actual_version != expected_version:
                raise ConflictError(override.user_id, expected_version, actual_version)

            stored = override.stamped(expected_version + 1)
            self._overrides[override.user_id] = stored
            logger.debug(f"Stored override for user {stored.user_id} at version {stored.version}")
            return stored

    def __len__(self) -> int:
        return len(self._overrides)
