"""
Domain exceptions and their HTTP translation.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class VisitorKioskError(Exception):
    """Base class for errors raised by the visitor kiosk core."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class VisitorNotFoundError(VisitorKioskError):
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateVisitorError(VisitorKioskError):
    status_code = status.HTTP_409_CONFLICT


class InvalidStatusTransitionError(VisitorKioskError):
    status_code = status.HTTP_409_CONFLICT


class StaffNotFoundError(VisitorKioskError):
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateStaffError(VisitorKioskError):
    status_code = status.HTTP_409_CONFLICT


class StorageUnavailableError(VisitorKioskError):
    """The visitor store or event log could not complete a read or write."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(VisitorKioskError)
    async def visitor_kiosk_exception_handler(request: Request, exc: VisitorKioskError):
        if exc.status_code >= 500:
            logger.error(f"[API] {request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(content={"detail": exc.message}, status_code=exc.status_code)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(f"[API] Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(content={"detail": "Internal server error"}, status_code=500)
