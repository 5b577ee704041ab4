# app/services/holiday/holiday_service.py
"""Holiday ranges and the cancellations they cascade into"""
from datetime import date, datetime, timedelta
import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from app.models.business import Business
from app.models.holiday import HolidayRange
from app.models.notification import NotificationKind
from app.schemas.schedule import HolidayRequest
from app.services.appointment.lifecycle import Actor, AppointmentLifecycle
from app.services.notification.notification_service import NotificationService
from app.utils import clock

logger = logging.getLogger(__name__)


def holiday_reason(reason: Optional[str]) -> str:
    text = "Cancelled automatically: the business is closed on this date"
    if reason:
        text += f" ({reason})"
    return text[:500]


class HolidayCascadeResolver:
    """
    Holiday -> cancelled appointments -> notifications, as separate steps.
    affected_appointments() is the read-only half used for previews.
    """

    @staticmethod
    def affected_appointments(
            db: Session,
            business_id: UUID,
            start_date: date,
            end_date: date,
            not_before: Optional[datetime] = None
    ) -> List[Appointment]:
        """PENDING/CONFIRMED appointments starting in [start_date, end_date], from `not_before` on"""
        query = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.appointment_datetime >= datetime.combine(start_date, datetime.min.time()),
            Appointment.appointment_datetime < datetime.combine(end_date + timedelta(days=1), datetime.min.time())
        )
        if not_before is not None:
            query = query.filter(Appointment.appointment_datetime >= not_before)
        return query.order_by(Appointment.appointment_datetime.asc()).all()

    @staticmethod
    def preview(
            db: Session,
            business_id: UUID,
            start_date: date,
            end_date: date,
            now: Optional[datetime] = None
    ) -> List[UUID]:
        if end_date < start_date:
            raise ValidationError("End date must be after or equal to start date")
        affected = HolidayCascadeResolver.affected_appointments(
            db, business_id, start_date, end_date, not_before=now or clock.now()
        )
        return [appointment.id for appointment in affected]

    @staticmethod
    def cancel_affected(db: Session, holiday: HolidayRange, now: datetime) -> Tuple[List[Appointment], List]:
        """
        Cancel every affected appointment that has not started yet, inside the
        caller's transaction. A lifecycle failure (e.g. a concurrent change)
        propagates so the whole cascade rolls back. Returns the cancelled
        appointments and the outbox rows to dispatch after commit.
        """
        affected = HolidayCascadeResolver.affected_appointments(
            db, holiday.business_id, holiday.start_date, holiday.end_date, not_before=now
        )
        reason = holiday_reason(holiday.reason)

        notifications = []
        for appointment in affected:
            AppointmentLifecycle.transition(
                db, appointment, AppointmentStatus.CANCELLED, Actor.HOLIDAY, now, reason=reason
            )
            notifications.append(
                NotificationService.enqueue(db, appointment, NotificationKind.CANCELLATION)
            )

        logger.info(
            f"Holiday {holiday.start_date}..{holiday.end_date} cancelled "
            f"{len(affected)} appointments for business {holiday.business_id}"
        )
        return affected, notifications


class HolidayService:
    """Holiday CRUD for the authenticated business"""

    @staticmethod
    def list_holidays(db: Session, business_id: UUID, upcoming_from: Optional[date] = None) -> List[HolidayRange]:
        query = db.query(HolidayRange).filter(HolidayRange.business_id == business_id)
        if upcoming_from is not None:
            query = query.filter(HolidayRange.end_date >= upcoming_from)
        return query.order_by(HolidayRange.start_date.asc()).all()

    @staticmethod
    def list_public_holidays(db: Session, business_slug: str, today: Optional[date] = None) -> List[HolidayRange]:
        business = db.query(Business).filter(Business.slug == business_slug).first()
        if not business or not business.is_bookable:
            raise NotFound("Business not found")
        return HolidayService.list_holidays(db, business.id, upcoming_from=today or clock.now().date())

    @staticmethod
    def _get(db: Session, business_id: UUID, holiday_id: UUID) -> HolidayRange:
        holiday = db.query(HolidayRange).filter(
            HolidayRange.id == holiday_id,
            HolidayRange.business_id == business_id
        ).first()
        if not holiday:
            raise NotFound("Holiday not found")
        return holiday

    @staticmethod
    def _save_and_cascade(db: Session, holiday: HolidayRange, now: datetime) -> Dict:
        try:
            db.flush()
            cancelled, notifications = HolidayCascadeResolver.cancel_affected(db, holiday, now)
            db.commit()
        except Exception:
            db.rollback()
            raise

        NotificationService.dispatch(notifications)
        db.refresh(holiday)
        return {
            "holiday": holiday.to_dict(),
            "cancelled_appointments": [str(appointment.id) for appointment in cancelled],
            "cancelled_count": len(cancelled),
        }

    @staticmethod
    def create_holiday(
            db: Session,
            business_id: UUID,
            request: HolidayRequest,
            now: Optional[datetime] = None
    ) -> Dict:
        """Create a holiday range and cancel the appointments it covers"""
        now = now or clock.now()
        if request.start_date < now.date():
            raise ValidationError("Cannot create holiday in the past")

        holiday = HolidayRange(
            business_id=business_id,
            start_date=request.start_date,
            end_date=request.end_date,
            reason=request.reason,
        )
        db.add(holiday)
        result = HolidayService._save_and_cascade(db, holiday, now)
        logger.info(f"Holiday created for business {business_id}: {request.start_date} to {request.end_date}")
        return result

    @staticmethod
    def update_holiday(
            db: Session,
            business_id: UUID,
            holiday_id: UUID,
            request: HolidayRequest,
            now: Optional[datetime] = None
    ) -> Dict:
        """Move or resize a holiday; appointments in the new range are cancelled"""
        now = now or clock.now()
        holiday = HolidayService._get(db, business_id, holiday_id)
        # a running holiday may keep its start date; it cannot be moved into the past
        if request.start_date < now.date() and request.start_date != holiday.start_date:
            raise ValidationError("Cannot move holiday into the past")

        holiday.start_date = request.start_date
        holiday.end_date = request.end_date
        holiday.reason = request.reason
        result = HolidayService._save_and_cascade(db, holiday, now)
        logger.info(f"Holiday updated: {holiday_id}")
        return result

    @staticmethod
    def delete_holiday(db: Session, business_id: UUID, holiday_id: UUID):
        """Remove a holiday. Appointments it cancelled stay cancelled."""
        holiday = HolidayService._get(db, business_id, holiday_id)
        db.delete(holiday)
        db.commit()
        logger.info(f"Holiday deleted: {holiday_id}")
