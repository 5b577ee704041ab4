# ============================================================================
# FILE: app/api/v1/dashboard/schedules.py
# Weekly hours, dated exceptions and the resolved opening preview
# ============================================================================
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_business_id
from app.config.database import get_db
from app.schemas.schedule import WeeklyScheduleRequest, ScheduleExceptionRequest
from app.services.schedule.schedule_service import ScheduleService

router = APIRouter(prefix="/schedule")


@router.get("/weekly")
def list_weekly_hours(
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    return {"weekly": [entry.to_dict() for entry in ScheduleService.list_weekly(db, business_id)]}


@router.put("/weekly")
def set_weekly_hours(
        request: WeeklyScheduleRequest,
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    return ScheduleService.upsert_weekly(db, business_id, request).to_dict()


@router.delete("/weekly/{day_of_week}")
def deactivate_weekly_hours(
        day_of_week: int = Path(..., ge=0, le=6),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    return ScheduleService.deactivate_weekly(db, business_id, day_of_week).to_dict()


@router.get("/exceptions")
def list_exceptions(
        from_date: Optional[date] = Query(None),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    exceptions = ScheduleService.list_exceptions(db, business_id, from_date)
    return {"exceptions": [exception.to_dict() for exception in exceptions]}


@router.put("/exceptions")
def set_exception(
        request: ScheduleExceptionRequest,
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    return ScheduleService.upsert_exception(db, business_id, request).to_dict()


@router.delete("/exceptions/{exception_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exception(
        exception_id: UUID = Path(...),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    ScheduleService.delete_exception(db, business_id, exception_id)


@router.get("/open-intervals")
def preview_open_intervals(
        start_date: date = Query(...),
        end_date: date = Query(...),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    """Opening hours per date after exceptions and holidays are applied"""
    return {"days": ScheduleService.open_intervals(db, business_id, start_date, end_date)}
