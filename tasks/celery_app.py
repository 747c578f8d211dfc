"""
tasks/celery_app.py
Celery application instance for the background trigger handlers.

Workers are started with:
    celery -A tasks.celery_app worker --loglevel=info -Q notifications
"""

from celery import Celery
from celery.signals import setup_logging

from config.logging_config import configure_logging
from config.settings import settings

celery_app = Celery(
    "tutorbook_notifications",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "tasks.trigger_tasks",
    ],
)

# ── Configuration ─────────────────────────────────────────────────────────────

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    enable_utc=True,

    # Notifications are fire-and-forget: ack on receipt, never redeliver
    task_acks_late=False,

    # Result expiry: keep task results for 1 hour
    result_expires=3600,

    task_routes={
        "tasks.trigger_tasks.*": {"queue": "notifications"},
    },

    worker_prefetch_multiplier=1,
)


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    configure_logging(settings.DEBUG)
