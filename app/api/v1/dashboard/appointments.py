# ============================================================================
# FILE: app/api/v1/dashboard/appointments.py
# JWT authenticated endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from app.api.dependencies import get_current_business_id
from app.config.database import get_db
from app.models.appointment import AppointmentStatus
from app.schemas.booking import StatusUpdateRequest
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments")


@router.get("")
def list_appointments(
        start_date: Optional[date] = Query(None, description="Filter appointments on or after this date"),
        end_date: Optional[date] = Query(None, description="Filter appointments on or before this date"),
        status: Optional[AppointmentStatus] = Query(None, description="Filter by status"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    """Get a list of all appointments for your business."""
    return AppointmentQueryService.list_appointments(
        db=db,
        business_id=business_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
        skip=skip,
        limit=limit
    )


@router.get("/{appointment_id}")
def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    """Get one appointment, including cancelled ones."""
    return AppointmentQueryService.get_for_business(db, business_id, appointment_id).to_dict()


@router.patch("/{appointment_id}/status")
def update_appointment_status(
        request: StatusUpdateRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    """Confirm, cancel or mark a no-show."""
    appointment = AppointmentService.update_status(
        db, business_id, appointment_id, request.status, reason=request.reason
    )
    return appointment.to_dict()
