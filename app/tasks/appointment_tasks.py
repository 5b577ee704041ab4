# ===== app/tasks/appointment_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.config.redis import RedisKeys, get_sync_redis
from app.config.settings import get_settings
from app.services.appointment.sweep_service import AppointmentSweeper

logger = logging.getLogger(__name__)


def _run_single_flight(lock_key: str, job, job_name: str) -> dict:
    """Run `job(db)` unless another worker already holds the lock for it"""
    settings = get_settings()
    lock = get_sync_redis().lock(
        lock_key, timeout=settings.SWEEP_LOCK_TIMEOUT_SECONDS, blocking=False
    )
    if not lock.acquire():
        logger.info(f"{job_name} already running elsewhere, skipping this run")
        return {"status": "skipped", "reason": "already_running"}

    db = SessionLocal()
    try:
        result = job(db)
        return {"status": "success", **result}
    finally:
        db.close()
        if lock.owned():
            lock.release()
        else:
            logger.warning(f"{job_name} outlived its lock timeout; the lock was already gone")


@celery_app.task
def auto_complete_appointments():
    """Daily: mark ended CONFIRMED appointments COMPLETED"""
    return _run_single_flight(RedisKeys.SWEEP_LOCK, AppointmentSweeper.auto_complete, "Auto-complete sweep")


@celery_app.task
def enqueue_appointment_reminders():
    """Hourly: queue reminders for appointments about a day away"""
    return _run_single_flight(RedisKeys.REMINDER_LOCK, AppointmentSweeper.enqueue_reminders, "Reminder job")
