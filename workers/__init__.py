# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# the reminder scheduler.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (due-reminder sweep, single reminder call)
# - config.py: Worker-specific settings, including the beat schedule
#
# Usage:
#   # Start worker with the embedded beat scheduler
#   celery -A workers.celery_app worker --beat --loglevel=info
#
#   # Or use the script
#   python scripts/start_worker.py
#
#   # Submit task (from API)
#   from workers.tasks import place_reminder_call
#   result = place_reminder_call.delay(reminder_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
