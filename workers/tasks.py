# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background tasks for the reminder scheduler.
#
# Tasks:
# - check_due_reminders: One sweep over due reminders (run by beat)
# - place_reminder_call: Call a single reminder now, without rescheduling
# =============================================================================

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


# =============================================================================
# Due-Reminder Sweep
# =============================================================================

@shared_task(bind=True, name="workers.tasks.check_due_reminders")
def check_due_reminders(self) -> dict[str, Any]:
    """
    Place calls for reminders that are due and advance their schedules.

    Runs every SWEEP_INTERVAL_SECONDS from Celery beat. The HTTP trigger
    (POST /api/v1/scheduler/check-reminders) runs the same sweep.

    Returns:
        SweepResult as a JSON-safe dict, or {"success": False, "error": ...}
        if the due-reminder query itself failed
    """
    from core.services.scheduler_service import SchedulerService

    try:
        result = SchedulerService.run_sweep()
    except Exception as e:
        logger.exception(f"Sweep failed: {e}")
        return {"success": False, "error": str(e)}

    return result.model_dump(mode="json")


# =============================================================================
# Single Reminder Call
# =============================================================================

@shared_task(bind=True, name="workers.tasks.place_reminder_call")
def place_reminder_call(self, reminder_id: str) -> dict[str, Any]:
    """
    Call one reminder immediately.

    Used for out-of-band calls; the reminder's schedule is left untouched.

    Args:
        reminder_id: The reminder UUID

    Returns:
        CallResult as a dict, or {"success": False, "error": ...}
    """
    from core.services.call_service import CallService
    from core.services.scheduler_service import build_call_request
    from lib.supabase_client import SupabaseClient

    logger.info(f"Placing call for reminder {reminder_id}")

    try:
        reminder = SupabaseClient.fetch_by_id("reminders", reminder_id)
        if not reminder:
            return {"success": False, "error": f"Reminder not found: {reminder_id}"}

        result = CallService.place_call(build_call_request(reminder), service_call=True)
        return result.model_dump(mode="json")

    except Exception as e:
        logger.exception(f"Reminder call failed: {e}")
        return {"success": False, "error": str(e)}
