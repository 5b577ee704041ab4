# app/core/exceptions.py
"""Booking error taxonomy and its HTTP rendering"""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for every error the booking core reports to its caller"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "booking_error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__


class ValidationError(BookingError):
    """Malformed or out-of-range input; the caller must fix it and retry"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class NotFound(BookingError):
    """Unknown business, service, appointment or token"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class SlotUnavailable(BookingError):
    """The requested window is taken or outside opening hours"""
    status_code = status.HTTP_409_CONFLICT
    code = "slot_unavailable"


class InvalidTransition(BookingError):
    """Lifecycle guard rejected a status change"""
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"


class AlreadyCancelled(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_cancelled"


class Timeout(BookingError):
    """Booking lock not acquired in time; safe to retry"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "timeout"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    logger.info(
        f"{exc.code}: {exc.detail}",
        extra={"correlation_id": correlation_id, "path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail},
    )
