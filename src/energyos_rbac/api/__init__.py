"""FastAPI integration for energyos-rbac."""

from .dependencies import AccessControlDependencies, AccessDeniedError, require_permissions
from .exception_handlers import register_exception_handlers
from .routers import create_access_control_router

__all__ = [
    "AccessControlDependencies",
    "AccessDeniedError",
    "require_permissions",
    "register_exception_handlers",
    "create_access_control_router",
]
