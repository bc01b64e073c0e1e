# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers, including the beat schedule that
# drives the due-reminder sweep.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a crashed worker's task is redelivered
    task_acks_late = True

    worker_prefetch_multiplier = 1

    # Sweep results are only interesting for a few minutes
    result_expires = 600

    # One sweep must finish well before the next beat tick stacks up behind it
    task_time_limit = 120
    task_soft_time_limit = 100

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "calls": {
            "exchange": "calls",
            "routing_key": "calls",
        },
    }

    task_routes = {
        "workers.tasks.check_due_reminders": {"queue": "calls"},
        "workers.tasks.place_reminder_call": {"queue": "calls"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Beat Schedule
    # -------------------------------------------------------------------------

    beat_schedule = {
        "check-due-reminders": {
            "task": "workers.tasks.check_due_reminders",
            "schedule": float(settings.SWEEP_INTERVAL_SECONDS),
            # Drop a tick rather than run two sweeps back to back
            "options": {"expires": settings.SWEEP_INTERVAL_SECONDS},
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
