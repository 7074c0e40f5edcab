"""Celery application instance for asynchronous task processing."""

from celery import Celery
from celery.signals import after_setup_logger

from banqa.core.config import get_settings
from banqa.core.logging import configure_logging

# Load settings
settings = get_settings()

celery_app = Celery(
    "banqa_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Serialization settings
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # Timezone settings
    timezone="UTC",
    enable_utc=True,

    # Task tracking and execution settings
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    result_expires=3600,  # Results expire after 1 hour
)


@after_setup_logger.connect
def _setup_banqa_logging(**kwargs) -> None:
    configure_logging(settings.LOG_LEVEL)
