# =============================================================================
# core/services/scheduler_service.py - Due-Reminder Sweep
# =============================================================================
# Finds reminders whose scheduled time has arrived, places their calls and
# moves repeating reminders to their next occurrence.
#
# One sweep:
#   1. Query active reminders with scheduled_at in [now - window, now]
#   2. For each reminder, independently:
#      - place the call (failures are recorded, never abort the sweep)
#      - once: deactivate
#      - repeating: compute the next occurrence in the reminder's timezone,
#        then reschedule (repeat_count + 1) or deactivate when it has ended
#   3. Return totals
#
# The sweep runs from Celery beat every SWEEP_INTERVAL_SECONDS and can also
# be triggered over HTTP (POST /api/v1/scheduler/check-reminders).
# =============================================================================

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lib.recurrence import (
    FrequencyConfig,
    FrequencyType,
    calculate_next_occurrence,
    should_continue,
)
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp, to_utc_iso, utc_now
from core.models.call_history import CallRequest
from core.models.scheduler import ReminderSweepOutcome, SweepResult
from core.services.call_service import CallService
from app.config import settings

logger = logging.getLogger(__name__)


def reminder_timezone(reminder: dict[str, Any]) -> ZoneInfo:
    """The reminder's IANA timezone, UTC if unset or unknown."""
    name = reminder.get("timezone") or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{name}' on reminder {reminder.get('id')}, using UTC")
        return ZoneInfo("UTC")


def next_schedule(reminder: dict[str, Any], default_max: int | None = None) -> datetime | None:
    """
    Next scheduled_at (UTC) for a reminder that just fired.

    Weekday and month arithmetic happen in the reminder's timezone so a
    9am reminder stays at 9am local time across DST changes.

    Returns:
        The next occurrence, or None if the reminder should be deactivated
    """
    config = FrequencyConfig.from_db_row(reminder)
    if not config.is_repeating:
        return None

    tz = reminder_timezone(reminder)
    current = parse_timestamp(reminder["scheduled_at"]).astimezone(tz)

    next_local = calculate_next_occurrence(current, config)
    if next_local is None:
        return None

    # repeat_count counts the calls before this one
    completed_count = (reminder.get("repeat_count") or 0) + 1

    if not should_continue(
        completed_count,
        next_local,
        max_occurrences=config.max_occurrences,
        repeat_until=config.end_date,
        default_max=default_max or settings.DEFAULT_MAX_OCCURRENCES,
    ):
        return None

    return next_local.astimezone(timezone.utc)


def build_call_request(reminder: dict[str, Any]) -> CallRequest:
    return CallRequest(
        reminder_id=reminder["id"],
        user_id=reminder["user_id"],
        recipient_name=reminder["recipient_name"],
        phone_number=reminder["phone_number"],
        message=reminder["message"],
        voice=reminder.get("voice") or "friendly_female",
        custom_voice_id=reminder.get("custom_voice_id"),
    )


class SchedulerService:
    """
    Service for the due-reminder sweep.
    """

    @staticmethod
    def is_authorized_trigger(authorization: str | None, cron_secret: str | None) -> bool:
        """
        Check credentials for the HTTP sweep trigger.

        Accepts "Authorization: Bearer <service key>", or "X-Cron-Secret"
        matching CRON_SECRET when one is configured.
        """
        expected_bearer = f"Bearer {settings.SUPABASE_SERVICE_KEY}"
        if authorization and hmac.compare_digest(authorization.encode(), expected_bearer.encode()):
            return True

        if settings.CRON_SECRET and cron_secret:
            return hmac.compare_digest(cron_secret.encode(), settings.CRON_SECRET.encode())

        return False

    @staticmethod
    def deactivate(reminder_id: str) -> None:
        client = SupabaseClient.get_client()
        client.table("reminders").update({"is_active": False}).eq("id", reminder_id).execute()

    @staticmethod
    def reschedule(reminder_id: str, next_at: datetime, repeat_count: int) -> None:
        client = SupabaseClient.get_client()
        client.table("reminders").update({
            "scheduled_at": to_utc_iso(next_at),
            "repeat_count": repeat_count,
        }).eq("id", reminder_id).execute()

    @staticmethod
    def process_reminder(reminder: dict[str, Any]) -> ReminderSweepOutcome:
        """
        Place one due reminder's call and advance its schedule.

        A failed call still advances the schedule; the failure is recorded
        in the call history by CallService.

        Raises:
            Exception: If the reminder row cannot be updated
        """
        reminder_id = normalize_uuid(reminder["id"])
        call_error = None

        try:
            result = CallService.place_call(build_call_request(reminder), service_call=True)
            success = result.success
        except Exception as e:
            logger.error(f"Call failed for reminder {reminder_id}: {e}")
            success = False
            call_error = str(e)

        next_at = None
        if reminder.get("frequency") in (None, FrequencyType.ONCE.value):
            SchedulerService.deactivate(reminder_id)
        else:
            next_at = next_schedule(reminder)
            if next_at is not None:
                SchedulerService.reschedule(
                    reminder_id, next_at, (reminder.get("repeat_count") or 0) + 1
                )
                logger.info(f"Rescheduled reminder {reminder_id} to {to_utc_iso(next_at)}")
            else:
                SchedulerService.deactivate(reminder_id)
                logger.info(f"Deactivated reminder {reminder_id} - recurrence ended")

        return ReminderSweepOutcome(
            reminder_id=reminder_id,
            success=success,
            next_scheduled_at=next_at,
            error=call_error,
        )

    @staticmethod
    def run_sweep(now: datetime | None = None) -> SweepResult:
        """
        Process every reminder due in the sweep window.

        Args:
            now: End of the window (defaults to the current time)

        Returns:
            SweepResult with per-reminder outcomes

        Raises:
            SupabaseClientError: If the due-reminder query fails
        """
        now = now or utc_now()
        window_start = now - timedelta(minutes=settings.REMINDER_WINDOW_MINUTES)

        logger.info(
            f"Checking for reminders due between {to_utc_iso(window_start)} and {to_utc_iso(now)}"
        )
        due = SupabaseClient.fetch_due_reminders(window_start, now)
        logger.info(f"Found {len(due)} due reminders")

        result = SweepResult()

        for reminder in due:
            result.processed += 1
            try:
                outcome = SchedulerService.process_reminder(reminder)
            except Exception as e:
                logger.error(f"Error processing reminder {reminder.get('id')}: {e}")
                result.failed += 1
                result.results.append(ReminderSweepOutcome(
                    reminder_id=str(reminder.get("id")),
                    success=False,
                    error=str(e),
                ))
                continue

            if outcome.success:
                result.succeeded += 1
            else:
                result.failed += 1

            if outcome.next_scheduled_at is not None:
                result.rescheduled += 1
            else:
                result.deactivated += 1

            result.results.append(outcome)

        logger.info(
            f"Sweep complete: {result.processed} processed, {result.succeeded} succeeded, "
            f"{result.failed} failed, {result.rescheduled} rescheduled, "
            f"{result.deactivated} deactivated"
        )
        return result
