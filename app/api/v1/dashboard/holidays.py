# ============================================================================
# FILE: app/api/v1/dashboard/holidays.py
# ============================================================================
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_business_id
from app.config.database import get_db
from app.schemas.schedule import HolidayRequest
from app.services.holiday.holiday_service import HolidayCascadeResolver, HolidayService
from app.utils import clock

router = APIRouter(prefix="/holidays")


@router.get("")
def list_holidays(
        upcoming: bool = Query(False, description="Only holidays that have not ended"),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    holidays = HolidayService.list_holidays(
        db, business_id, upcoming_from=clock.now().date() if upcoming else None
    )
    return {"holidays": [holiday.to_dict() for holiday in holidays]}


@router.get("/preview")
def preview_holiday(
        start_date: date = Query(...),
        end_date: date = Query(...),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    """Appointments a holiday over this range would cancel. Changes nothing."""
    ids = HolidayCascadeResolver.preview(db, business_id, start_date, end_date)
    return {"affected_appointments": [str(i) for i in ids], "count": len(ids)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_holiday(
        request: HolidayRequest,
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    return HolidayService.create_holiday(db, business_id, request)


@router.put("/{holiday_id}")
def update_holiday(
        request: HolidayRequest,
        holiday_id: UUID = Path(...),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    return HolidayService.update_holiday(db, business_id, holiday_id, request)


@router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(
        holiday_id: UUID = Path(...),
        business_id: UUID = Depends(get_current_business_id),
        db: Session = Depends(get_db)
):
    HolidayService.delete_holiday(db, business_id, holiday_id)
