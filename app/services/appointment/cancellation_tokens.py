# ============================================================================
# app/services/appointment/cancellation_tokens.py
# Public, unauthenticated access to one appointment through an opaque token
# ============================================================================
from datetime import datetime, timedelta
import logging
import secrets
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import AlreadyCancelled, NotFound, ValidationError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.notification import NotificationKind
from app.schemas.booking import CANCELLATION_REASON_MAX, CANCELLATION_REASON_MIN
from app.services.appointment.lifecycle import Actor, AppointmentLifecycle
from app.services.notification.notification_service import NotificationService
from app.utils import clock

logger = logging.getLogger(__name__)

# Same message for unknown, expired and revoked tokens
TOKEN_NOT_FOUND = "Appointment not found"


class CancellationTokenManager:
    """Issues, resolves and spends cancellation tokens"""

    @staticmethod
    def generate_token() -> str:
        """Generate a URL-safe token with at least 32 bytes of entropy"""
        return secrets.token_urlsafe(get_settings().CANCELLATION_TOKEN_BYTES)

    @staticmethod
    def issue(appointment_end: datetime) -> Tuple[str, datetime]:
        """Token and its expiry: the appointment end plus the configured margin"""
        margin = timedelta(hours=get_settings().CANCELLATION_TOKEN_MARGIN_HOURS)
        return CancellationTokenManager.generate_token(), appointment_end + margin

    @staticmethod
    def _find(db: Session, token: str) -> Optional[Appointment]:
        if not token:
            return None
        return db.query(Appointment).filter(Appointment.cancellation_token == token).first()

    @staticmethod
    def resolve(db: Session, token: str, now: Optional[datetime] = None) -> Appointment:
        """The appointment carrying exactly this token, if the token is still valid"""
        now = now or clock.now()
        appointment = CancellationTokenManager._find(db, token)
        if appointment is None or not appointment.token_valid_at(now):
            raise NotFound(TOKEN_NOT_FOUND)
        return appointment

    @staticmethod
    def cancel(
            db: Session,
            token: str,
            reason: str,
            now: Optional[datetime] = None
    ) -> Appointment:
        """
        Cancel the appointment behind a token.

        A token whose appointment is already cancelled reports AlreadyCancelled
        even though cancellation revoked it; any other invalid token is NotFound.
        """
        now = now or clock.now()
        reason = (reason or "").strip()
        if not CANCELLATION_REASON_MIN <= len(reason) <= CANCELLATION_REASON_MAX:
            raise ValidationError(
                f"Cancellation reason must be {CANCELLATION_REASON_MIN}-{CANCELLATION_REASON_MAX} characters"
            )

        appointment = CancellationTokenManager._find(db, token)
        if appointment is None:
            raise NotFound(TOKEN_NOT_FOUND)
        if appointment.status == AppointmentStatus.CANCELLED:
            raise AlreadyCancelled("Appointment is already cancelled")
        if not appointment.token_valid_at(now):
            raise NotFound(TOKEN_NOT_FOUND)

        try:
            AppointmentLifecycle.transition(
                db, appointment, AppointmentStatus.CANCELLED, Actor.CUSTOMER, now, reason=reason
            )
            notification = NotificationService.enqueue(db, appointment, NotificationKind.CANCELLATION)
            db.commit()
        except Exception:
            db.rollback()
            raise

        NotificationService.dispatch([notification])
        logger.info(f"Appointment {appointment.id} cancelled by customer")
        return appointment
