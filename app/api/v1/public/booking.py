# ============================================================================
# app/api/v1/public/booking.py
# Unauthenticated booking endpoints: a business slug or a cancellation token
# is the only credential
# ============================================================================
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.schemas.booking import BookingRequest, CancelRequest
from app.services.appointment.booking_service import BookingService
from app.services.appointment.cancellation_tokens import CancellationTokenManager
from app.services.availability.availability_service import AvailabilityService
from app.services.holiday.holiday_service import HolidayService

router = APIRouter()


@router.get("/businesses/{business_slug}/availability")
def get_availability(
        business_slug: str = Path(..., description="Public business identifier"),
        service_id: UUID = Query(..., description="Service to book"),
        target_date: date = Query(..., alias="date", description="Date to list slots for"),
        db: Session = Depends(get_db)
):
    """Slots for one date, each marked available or not for the given service"""
    return AvailabilityService.get_availability(db, business_slug, service_id, target_date)


@router.post("/businesses/{business_slug}/appointments", status_code=status.HTTP_201_CREATED)
def book_appointment(
        request: BookingRequest,
        business_slug: str = Path(...),
        db: Session = Depends(get_db)
):
    """
    Book a slot. The response carries the cancellation token, which is the
    customer's only way back to this appointment.
    """
    appointment = BookingService.reserve(
        db,
        business_slug=business_slug,
        service_id=request.service_id,
        requested_datetime=request.appointment_datetime,
        customer_info=request.customer,
        notes=request.notes,
    )
    return appointment.to_dict(include_token=True)


@router.get("/businesses/{business_slug}/holidays")
def list_upcoming_holidays(business_slug: str = Path(...), db: Session = Depends(get_db)):
    holidays = HolidayService.list_public_holidays(db, business_slug)
    return {"holidays": [holiday.to_dict() for holiday in holidays]}


@router.get("/appointments/{token}")
def get_appointment_by_token(token: str = Path(..., max_length=128), db: Session = Depends(get_db)):
    appointment = CancellationTokenManager.resolve(db, token)
    return appointment.to_dict()


@router.post("/appointments/{token}/cancel")
def cancel_appointment_by_token(
        request: CancelRequest,
        token: str = Path(..., max_length=128),
        db: Session = Depends(get_db)
):
    appointment = CancellationTokenManager.cancel(db, token, request.reason)
    return {
        "success": True,
        "message": "Appointment cancelled",
        "appointment": appointment.to_dict(),
    }
