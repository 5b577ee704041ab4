# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""Business-triggered status changes"""
from datetime import datetime
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.appointment import Appointment, AppointmentStatus
from app.models.notification import NotificationKind
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.lifecycle import Actor, AppointmentLifecycle
from app.services.notification.notification_service import NotificationService
from app.utils import clock

logger = logging.getLogger(__name__)

STATUS_NOTIFICATIONS = {
    AppointmentStatus.CONFIRMED: NotificationKind.CONFIRMATION,
    AppointmentStatus.CANCELLED: NotificationKind.CANCELLATION,
}


class AppointmentService:
    """Handles appointment operations performed by the business"""

    @staticmethod
    def update_status(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            new_status: AppointmentStatus,
            reason: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Appointment:
        """Confirm, cancel or mark a no-show through the lifecycle"""
        now = now or clock.now()
        appointment = AppointmentQueryService.get_for_business(db, business_id, appointment_id)

        notification = None
        try:
            AppointmentLifecycle.transition(
                db, appointment, new_status, Actor.BUSINESS, now,
                reason=reason or ("Cancelled by the business" if new_status == AppointmentStatus.CANCELLED else None),
            )
            kind = STATUS_NOTIFICATIONS.get(new_status)
            if kind is not None:
                notification = NotificationService.enqueue(db, appointment, kind)
            db.commit()
        except Exception:
            db.rollback()
            raise

        NotificationService.dispatch([notification])
        return appointment
