"""
Domain errors and their HTTP mapping.

Services raise these; the app turns them into JSON responses shaped like
``{"detail": {"error": "<code>", "message": "<text>"}}``.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors that terminate the current request."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def headers(self) -> Optional[Dict[str, str]]:
        return None


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"

    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class Invalid(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid"


class UpstreamFailure(ServiceError):
    """The external asset host was unreachable or rejected the request."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_failure"


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(
            "request_failed: method=%s path=%s code=%s message=%s",
            request.method,
            request.url.path,
            exc.code,
            exc.message,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"error": exc.code, "message": exc.message}},
        headers=exc.headers(),
    )


# PUBLIC_INTERFACE
def register_error_handlers(app: FastAPI) -> None:
    """Install the ServiceError -> JSON response mapping on ``app``."""
    app.add_exception_handler(ServiceError, _service_error_handler)
