"""Permission feature services."""

from .resolver import effective_permissions
from .access_service import AccessDecisionService
from .override_service import OverrideMutationService

__all__ = [
    "effective_permissions",
    "AccessDecisionService",
    "OverrideMutationService",
]
