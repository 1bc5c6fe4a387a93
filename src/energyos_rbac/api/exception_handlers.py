"""
Exception handlers mapping access-control errors to JSON responses.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.exceptions import AccessControlError, create_error_response, get_http_status_code

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register access-control exception handlers on a FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AccessControlError)
    async def access_control_exception_handler(request: Request, exc: AccessControlError):
        """Render library exceptions with their mapped status code."""
        status_code = get_http_status_code(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error_code}: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code}: {exc.message}")
        return JSONResponse(status_code=status_code, content=create_error_response(exc))
