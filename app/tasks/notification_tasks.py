# ===== app/tasks/notification_tasks.py =====
from datetime import datetime, timezone
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.config.settings import get_settings
from app.models.notification import Notification, NotificationChannel, NotificationStatus
from app.services.email.email_service import EmailService
from app.services.notification.notification_service import NotificationService
from app.services.sms.sms_service import SMSService

logger = logging.getLogger(__name__)


def deliver_notification(db: Session, notification_id: str) -> dict:
    """
    Render and send one outbox row, recording the attempt.
    Raises on delivery failure so the task can retry.
    """
    notification = db.query(Notification).filter(Notification.id == UUID(notification_id)).first()
    if not notification:
        return {"status": "skipped", "reason": "notification_not_found"}
    if notification.status == NotificationStatus.SENT:
        return {"status": "skipped", "reason": "already_sent"}

    subject, body = NotificationService.render(notification)
    notification.attempts += 1

    try:
        if notification.channel == NotificationChannel.EMAIL:
            EmailService.send_email(
                to_email=notification.recipient,
                subject=subject,
                html_content=EmailService.render_html(subject, body),
                plain_text=body,
            )
        else:
            SMSService().send_sms(notification.recipient, f"{subject}\n{body}")
    except Exception as exc:
        notification.status = NotificationStatus.FAILED
        notification.last_error = str(exc)[:1000]
        db.commit()
        raise

    notification.status = NotificationStatus.SENT
    notification.last_error = None
    notification.sent_at = datetime.now(timezone.utc)
    db.commit()

    logger.info(
        f"{notification.kind.value} {notification.channel.value} sent for appointment "
        f"{notification.appointment_id}"
    )
    return {"status": "success", "notification_id": notification_id}


@celery_app.task(bind=True, max_retries=get_settings().MAX_RETRY_ATTEMPTS)
def send_appointment_notification(self, notification_id: str):
    """
    Deliver a queued appointment notification

    Args:
        notification_id: Notification outbox row id
    """
    db = SessionLocal()
    try:
        return deliver_notification(db, notification_id)

    except Exception as exc:
        logger.error(f"Failed to deliver notification {notification_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
    finally:
        db.close()
