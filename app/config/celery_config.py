# app/config/celery_config.py
"""Celery application and periodic schedule"""
from celery import Celery
from celery.schedules import crontab

from app.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure the Celery application"""
    app = Celery(
        "slotkeeper",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=[
            "app.tasks.notification_tasks",
            "app.tasks.appointment_tasks",
        ],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone=settings.DEFAULT_TIMEZONE,
        enable_utc=False,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        task_routes={
            "app.tasks.notification_tasks.*": {"queue": "notifications"},
            "app.tasks.appointment_tasks.*": {"queue": "maintenance"},
        },
    )

    app.conf.beat_schedule = {
        "auto-complete-past-appointments": {
            "task": "app.tasks.appointment_tasks.auto_complete_appointments",
            "schedule": crontab(hour=settings.SWEEP_HOUR, minute=settings.SWEEP_MINUTE),
        },
        "enqueue-appointment-reminders": {
            "task": "app.tasks.appointment_tasks.enqueue_appointment_reminders",
            "schedule": crontab(minute=0),
        },
    }

    return app


celery_app = create_celery_app()
