"""
Celery configuration for the worker dispatch backend.

Only used when ``watchlist_dispatch_backend`` is ``celery``; the inline
backend never touches the broker.
"""

import logging
from typing import List

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun

from .config import settings

logger = logging.getLogger(__name__)


class CeleryConfig:
    """Celery configuration class."""

    # Dispatch is at-most-once: acknowledge on receipt, never redeliver
    task_acks_late = False
    task_reject_on_worker_lost = False
    task_time_limit = 5 * 60
    task_soft_time_limit = 4 * 60

    # Serialization settings
    task_serializer = "json"
    accept_content = ["json"]
    result_serializer = "json"

    timezone = "UTC"
    enable_utc = True

    # Outcomes are only interesting for a short while
    result_expires = 60 * 60

    # Worker settings
    worker_prefetch_multiplier = 1
    worker_max_tasks_per_child = 1000
    worker_hijack_root_logger = False
    worker_log_color = False

    # Connection settings
    broker_connection_retry_on_startup = True
    broker_pool_limit = 10

    task_routes = {
        "guestwatch.domains.dispatch.tasks.*": {"queue": settings.watchlist_dispatch_queue},
    }
    task_default_queue = "default"


def create_celery_app() -> Celery:
    """Create and configure the Celery application."""
    includes: List[str] = [
        "guestwatch.domains.dispatch.tasks",
    ]

    app = Celery(
        "guestwatch",
        broker=settings.redis_url,
        backend=settings.redis_url,
        include=includes,
    )
    app.config_from_object(CeleryConfig)
    setup_signal_handlers(app)

    logger.info("Celery application created and configured")
    return app


def setup_signal_handlers(app: Celery) -> None:
    """Set up Celery signal handlers for logging."""

    @task_prerun.connect
    def task_prerun_handler(sender=None, task_id=None, task=None, **kwds):
        logger.info(f"Task {task.name} [{task_id}] started")

    @task_postrun.connect
    def task_postrun_handler(sender=None, task_id=None, task=None, retval=None, state=None, **kwds):
        logger.info(f"Task {task.name} [{task_id}] completed with state: {state} (result={retval})")

    @task_failure.connect
    def task_failure_handler(sender=None, task_id=None, exception=None, **kwds):
        logger.error(f"Task {sender.name} [{task_id}] failed: {exception}")


celery_app = create_celery_app()
