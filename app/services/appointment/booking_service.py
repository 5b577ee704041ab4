# ============================================================================
# app/services/appointment/booking_service.py
# The single write path that creates appointments
# ============================================================================
from datetime import datetime, timedelta
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import SlotUnavailable, ValidationError
from app.models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from app.models.notification import NotificationKind
from app.schemas.booking import CustomerInfo
from app.services.appointment.cancellation_tokens import CancellationTokenManager
from app.services.appointment.locking import booking_window_lock
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.schedule_resolver import ScheduleResolver
from app.services.availability.slot_generator import blocking_appointments
from app.services.customer.customer_service import CustomerService
from app.services.notification.notification_service import NotificationService
from app.utils import clock

logger = logging.getLogger(__name__)

BOOKING_INSERT_ATTEMPTS = 2


class BookingService:
    """Reserves slots for public, unauthenticated customers"""

    @staticmethod
    def _locked_overlaps(db: Session, business_id: UUID, start: datetime, end: datetime):
        """Re-read the live overlapping rows, locking them on databases that support it"""
        candidates = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.appointment_datetime >= start - timedelta(days=1),
            Appointment.appointment_datetime < end
        ).with_for_update().all()
        return blocking_appointments(candidates, start, end)

    @staticmethod
    def _insert_locked(
            db: Session,
            business_id: UUID,
            service_id: UUID,
            start: datetime,
            end: datetime,
            customer_info: CustomerInfo,
            snapshot: tuple,
            notes: Optional[str]
    ):
        """Re-check overlaps and insert in one transaction; the caller holds the lock"""
        service_name, duration, price = snapshot

        conflicts = BookingService._locked_overlaps(db, business_id, start, end)
        if conflicts:
            logger.info(f"Slot {start.isoformat()} conflicts with appointment {conflicts[0].id}")
            raise SlotUnavailable("This time slot is no longer available")

        customer = CustomerService.find_or_create(db, business_id, customer_info)
        token, token_expires_at = CancellationTokenManager.issue(end)

        appointment = Appointment(
            business_id=business_id,
            service_id=service_id,
            customer=customer,
            appointment_datetime=start,
            duration_minutes=duration,
            service_name=service_name,
            price=price,
            status=AppointmentStatus.PENDING,
            notes=notes,
            cancellation_token=token,
            cancellation_token_expires_at=token_expires_at,
        )
        db.add(appointment)
        CustomerService.record_booking(customer, start)
        db.flush()

        notification = NotificationService.enqueue(db, appointment, NotificationKind.CONFIRMATION)
        db.commit()
        return appointment, notification

    @staticmethod
    def reserve(
            db: Session,
            business_slug: str,
            service_id: UUID,
            requested_datetime: datetime,
            customer_info: CustomerInfo,
            notes: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Appointment:
        """
        Book `requested_datetime` for a service.

        The read-only checks (business, service, opening hours) run first. The
        overlap re-check and the insert then run under the per-business-day lock
        in one transaction, so of several requests for the same window exactly
        one commits and the others get SlotUnavailable. A unique-key collision on
        the customer or token row rolls back and runs the locked section once more.
        """
        settings = get_settings()
        now = now or clock.now()

        business = AvailabilityService.get_bookable_business(db, business_slug)
        service = AvailabilityService.get_bookable_service(db, business, service_id)

        if requested_datetime <= now:
            raise ValidationError("Cannot book an appointment in the past")

        start = requested_datetime
        end = start + timedelta(minutes=service.duration_minutes)

        day = ScheduleResolver.resolve(db, business.id, start.date())
        if not any(interval.start <= start and end <= interval.end for interval in day.intervals):
            raise SlotUnavailable("The requested time is outside opening hours")

        # snapshot before the critical section so later edits to the service don't leak in
        snapshot = (service.name, service.duration_minutes, service.price)
        duration = service.duration_minutes
        business_id = business.id
        db.rollback()  # end the read transaction; the write gets a fresh one

        for attempt in range(BOOKING_INSERT_ATTEMPTS):
            # rollback releases the database lock, so each attempt takes it again
            with booking_window_lock(db, business_id, start.date(), settings.BOOKING_LOCK_TIMEOUT_SECONDS):
                try:
                    appointment, notification = BookingService._insert_locked(
                        db, business_id, service_id, start, end, customer_info, snapshot, notes
                    )
                    break
                except IntegrityError as e:
                    # customer rows are shared across days, so the day lock does not cover them
                    db.rollback()
                    if attempt + 1 == BOOKING_INSERT_ATTEMPTS:
                        logger.error(f"Booking insert failed for business {business_slug}: {e}")
                        raise
                    logger.warning(f"Booking insert collided for business {business_slug}, retrying: {e.orig}")
                except Exception:
                    db.rollback()
                    raise

        db.refresh(appointment)
        NotificationService.dispatch([notification])

        logger.info(
            f"Booked appointment {appointment.id} for business {business_slug} "
            f"at {start.isoformat()} ({duration} min)"
        )
        return appointment
