# ===== app/services/availability/availability_service.py =====
from typing import Dict, List, Optional
from datetime import date, datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.models.appointment import Appointment, ACTIVE_STATUSES
from app.models.business import Business
from app.models.service import Service
from app.services.availability.schedule_resolver import ScheduleResolver
from app.services.availability.slot_generator import generate_slots
from app.utils import clock
import logging

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Public availability listing: date -> slot sequence"""

    @staticmethod
    def get_bookable_business(db: Session, business_slug: str) -> Business:
        business = db.query(Business).filter(Business.slug == business_slug).first()
        if not business or not business.is_bookable:
            raise NotFound("Business not found")
        return business

    @staticmethod
    def get_bookable_service(db: Session, business: Business, service_id: UUID) -> Service:
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.business_id == business.id
        ).first()
        if not service:
            raise NotFound("Service not found")
        if not service.is_active:
            raise ValidationError("Service is not active")
        return service

    @staticmethod
    def active_appointments_between(
            db: Session,
            business_id: UUID,
            start: datetime,
            end: datetime
    ) -> List[Appointment]:
        """
        PENDING/CONFIRMED appointments that may overlap [start, end).

        Appointments never cross midnight, so looking back one day from `start`
        is enough to catch anything still running at `start`.
        """
        return db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.appointment_datetime >= start - timedelta(days=1),
            Appointment.appointment_datetime < end
        ).order_by(Appointment.appointment_datetime.asc()).all()

    @staticmethod
    def get_availability(
            db: Session,
            business_slug: str,
            service_id: UUID,
            target_date: date,
            now: Optional[datetime] = None
    ) -> Dict:
        """
        Get the slots for one date.

        Past dates are allowed as a read-only preview; every slot there is
        reported unavailable.
        """
        now = now or clock.now()

        business = AvailabilityService.get_bookable_business(db, business_slug)
        service = AvailabilityService.get_bookable_service(db, business, service_id)

        day = ScheduleResolver.resolve(db, business.id, target_date)

        day_start = datetime.combine(target_date, datetime.min.time())
        appointments = []
        if not day.is_closed:
            appointments = AvailabilityService.active_appointments_between(
                db, business.id, day_start, day_start + timedelta(days=1)
            )

        slots = [
            slot.to_dict()
            for slot in generate_slots(
                day.intervals,
                day.slot_duration_minutes,
                appointments,
                service_duration_minutes=service.duration_minutes,
                now=now,
            )
        ]

        available_count = sum(1 for slot in slots if slot["available"])
        logger.info(
            f"Generated {len(slots)} slots, {available_count} available "
            f"for business {business.slug} on {target_date}"
        )

        return {
            "business_id": str(business.id),
            "service_id": str(service.id),
            "date": target_date.isoformat(),
            "slot_duration_minutes": day.slot_duration_minutes,
            "slots": slots,
        }
