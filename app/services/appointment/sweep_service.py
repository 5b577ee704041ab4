# ============================================================================
# app/services/appointment/sweep_service.py
# Time-driven batch jobs: auto-complete and reminders
# ============================================================================
from datetime import datetime, timedelta
import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from app.models.notification import NotificationKind
from app.services.appointment.lifecycle import Actor, AppointmentLifecycle
from app.services.notification.notification_service import NotificationService
from app.utils import clock

logger = logging.getLogger(__name__)


class AppointmentSweeper:
    """Drives appointments forward as wall-clock time passes"""

    @staticmethod
    def _ended_confirmed_ids(db: Session, now: datetime) -> List[UUID]:
        # end = start + duration is not portable SQL; bound by start, then check in Python
        candidates = db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.CONFIRMED,
            Appointment.appointment_datetime < now
        ).order_by(Appointment.appointment_datetime.asc()).all()
        return [appointment.id for appointment in candidates if appointment.end_datetime < now]

    @staticmethod
    def auto_complete(db: Session, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Complete every CONFIRMED appointment that has ended.

        Each appointment is committed on its own. A failure is rolled back,
        logged and skipped so the rest of the batch still runs. PENDING
        appointments are left for the business to reconcile.
        """
        now = now or clock.now()
        ids = AppointmentSweeper._ended_confirmed_ids(db, now)

        completed = 0
        failed = 0
        for appointment_id in ids:
            try:
                appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
                if appointment is None:
                    continue
                AppointmentLifecycle.transition(db, appointment, AppointmentStatus.COMPLETED, Actor.SWEEP, now)
                db.commit()
                completed += 1
            except Exception as e:
                db.rollback()
                failed += 1
                logger.error(f"Auto-complete failed for appointment {appointment_id}: {e}")

        logger.info(f"Auto-complete sweep: {completed} completed, {failed} failed, {len(ids)} candidates")
        return {"candidates": len(ids), "completed": completed, "failed": failed}

    @staticmethod
    def enqueue_reminders(db: Session, now: Optional[datetime] = None) -> Dict[str, int]:
        """Queue a REMINDER for active appointments starting in the reminder window"""
        settings = get_settings()
        now = now or clock.now()
        window_start = now + timedelta(hours=settings.REMINDER_WINDOW_START_HOURS)
        window_end = now + timedelta(hours=settings.REMINDER_WINDOW_END_HOURS)

        appointments = db.query(Appointment).filter(
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.appointment_datetime >= window_start,
            Appointment.appointment_datetime < window_end,
            Appointment.reminder_sent_at.is_(None)
        ).all()

        notifications = []
        try:
            for appointment in appointments:
                notifications.append(
                    NotificationService.enqueue(db, appointment, NotificationKind.REMINDER)
                )
                appointment.reminder_sent_at = now
            db.commit()
        except Exception:
            db.rollback()
            raise

        NotificationService.dispatch(notifications)
        queued = sum(1 for n in notifications if n is not None)
        logger.info(f"Reminders: {queued} queued for {len(appointments)} appointments")
        return {"appointments": len(appointments), "queued": queued}
