"""Domain errors and their HTTP rendering.

Services raise these; ``create_app`` registers ``handle_roadworks_error`` so a
route never has to translate them itself.
"""
from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RoadworksError(Exception):
    status_code: int = 500
    default_detail: str = "Internal error."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(RoadworksError):
    status_code = 401
    default_detail = "Not authenticated."


class Forbidden(RoadworksError):
    status_code = 403
    default_detail = "Not authorized."


class NotFound(RoadworksError):
    status_code = 404
    default_detail = "Not found."


class InvalidTransition(RoadworksError):
    status_code = 409
    default_detail = "Transition not allowed."


class InvalidGeometry(RoadworksError):
    status_code = 422
    default_detail = "Invalid geometry."


class InvalidAssignmentWindow(RoadworksError):
    status_code = 422
    default_detail = "Assignment start must precede its end."


class StorageUnavailable(RoadworksError):
    """Transient backing-store failure. Never retried server-side."""

    status_code = 503
    default_detail = "Storage temporarily unavailable."


async def handle_roadworks_error(request: Request, exc: RoadworksError) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "request failed",
        extra={
            "request_id": rid,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "errorType": type(exc).__name__},
    )
