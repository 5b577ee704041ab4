# app/services/notification/notification_service.py
"""Notification enqueueing (outbox rows + fire-and-forget Celery dispatch)"""
import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models.appointment import Appointment
from app.models.notification import Notification, NotificationChannel, NotificationKind

logger = logging.getLogger(__name__)


def queue_notification(notification_id: str):
    """Hand one outbox row to the notification worker"""
    from app.tasks.notification_tasks import send_appointment_notification

    send_appointment_notification.delay(notification_id)


class NotificationService:
    """Handles notification operations"""

    @staticmethod
    def default_channel(appointment: Appointment) -> NotificationChannel:
        if appointment.customer and appointment.customer.email:
            return NotificationChannel.EMAIL
        return NotificationChannel.SMS

    @staticmethod
    def enqueue(
            db: Session,
            appointment: Appointment,
            kind: NotificationKind,
            channel: Optional[NotificationChannel] = None
    ) -> Optional[Notification]:
        """
        Add an outbox row in the caller's transaction.
        Call dispatch() with the result after the transaction commits.
        """
        channel = channel or NotificationService.default_channel(appointment)
        customer = appointment.customer
        recipient = None
        if customer is not None:
            recipient = customer.email if channel == NotificationChannel.EMAIL else customer.phone

        if not recipient:
            logger.warning(
                f"No {channel.value} recipient for appointment {appointment.id}, skipping {kind.value}"
            )
            return None

        notification = Notification(
            appointment_id=appointment.id,
            kind=kind,
            channel=channel,
            recipient=recipient,
        )
        db.add(notification)
        return notification

    @staticmethod
    def dispatch(notifications: Iterable[Optional[Notification]]):
        """Queue delivery without waiting on it; failures are logged, never raised"""
        for notification in notifications:
            if notification is None:
                continue
            try:
                queue_notification(str(notification.id))
            except Exception as e:
                logger.error(f"Failed to queue notification {notification.id}: {e}")

    @staticmethod
    def render(notification: Notification) -> Tuple[str, str]:
        """Subject and plain-text body for a notification"""
        appointment = notification.appointment
        business_name = appointment.business.name if appointment.business else "your provider"
        when = appointment.appointment_datetime.strftime("%A %d %B %Y at %H:%M")
        manage_url = f"{settings.FRONTEND_URL}/booking/{appointment.cancellation_token}"

        if notification.kind == NotificationKind.CONFIRMATION:
            subject = f"Booking received: {appointment.service_name} with {business_name}"
            body = (
                f"Your {appointment.service_name} appointment on {when} is booked.\n"
                f"View or cancel it here: {manage_url}"
            )
        elif notification.kind == NotificationKind.CANCELLATION:
            subject = f"Appointment cancelled: {appointment.service_name}"
            body = f"Your {appointment.service_name} appointment on {when} has been cancelled."
            if appointment.cancellation_reason:
                body += f"\nReason: {appointment.cancellation_reason}"
        elif notification.kind == NotificationKind.REMINDER:
            subject = f"Reminder: {appointment.service_name} tomorrow"
            body = (
                f"This is a reminder of your {appointment.service_name} appointment on {when}.\n"
                f"Can't make it? Cancel here: {manage_url}"
            )
        else:
            subject = f"Appointment updated: {appointment.service_name}"
            body = (
                f"Your {appointment.service_name} appointment on {when} is now "
                f"{appointment.status.value.lower()}."
            )

        return subject, body
