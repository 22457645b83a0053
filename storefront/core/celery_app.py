"""Celery application configuration"""

from celery import Celery
from kombu import Exchange, Queue
from storefront.core.config import settings

# Create Celery app
celery_app = Celery(
    "storefront",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "storefront.tasks.reconciliation_tasks"
    ]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.CELERY_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=10 * 60,
    task_soft_time_limit=8 * 60,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    task_routes={
        "storefront.tasks.reconciliation_tasks.*": {"queue": "payments"}
    },

    task_default_retry_delay=60,
    task_max_retries=3,

    result_expires=3600,
)

celery_app.conf.task_queues = (
    Queue("default", Exchange("default"), routing_key="default"),
    Queue("payments", Exchange("payments"), routing_key="payments"),
)

# Sweep for card orders whose webhook never arrived
celery_app.conf.beat_schedule = {
    "reconcile-pending-payments": {
        "task": "storefront.tasks.reconciliation_tasks.reconcile_pending_payments",
        "schedule": settings.RECONCILIATION_INTERVAL_MINUTES * 60,
        "options": {"queue": "payments"}
    },
}
