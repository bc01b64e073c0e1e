# =============================================================================
# core/services/voice_form_service.py - Voice Form Population
# =============================================================================
# Turns a ParsedReminder from the parser agent into a ReminderDraft that
# prefills the create-reminder form.
#
# - scheduled_at: start_date + time in the user's timezone, as UTC
# - recurrence: once/daily map directly; weekly with explicit days becomes
#   custom (or weekdays/weekends when the days match exactly)
# - message: quick reminders keep the spoken action; medication reminders
#   get the generated medication script
# - warnings: the parser's clarifications plus any form fields left empty
#
# Unrelated and unclear transcripts are rejected with the parser's reason.
# =============================================================================

import logging
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lib.medication import MedicationEntry, generate_multi_medication_message
from lib.recurrence import (
    WEEKDAY_NUMBERS,
    WEEKEND_NUMBERS,
    EndType,
    FrequencyConfig,
    FrequencyType,
    get_default_config,
    get_recurrence_summary,
)
from lib.utils import utc_now
from agents.models.parsed_reminder import (
    ParsedFrequency,
    ParsedReminder,
    ParsedReminderType,
    ParsedSchedule,
)
from core.models.reminder import RecurrenceSettings, ReminderDraft, ReminderType
from app.exceptions import TranscriptParseError

logger = logging.getLogger(__name__)

DEFAULT_REJECTION = (
    "This doesn't appear to be a reminder request. "
    "Try something like 'Remind [name] to [action] at [time]'"
)

MAX_DRAFT_OCCURRENCES = 999


def _zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.warning(f"Ignoring unparseable date from parser: '{value}'")
        return None


def resolve_start(schedule: ParsedSchedule | None, tz: ZoneInfo, now: datetime) -> datetime:
    """
    First call time in the user's timezone.

    Without a usable schedule the draft starts one minute from now.
    """
    default = (now + timedelta(minutes=1)).astimezone(tz).replace(second=0, microsecond=0)
    if schedule is None:
        return default

    start_date = _parse_date(schedule.start_date) or default.date()
    hour, minute = (int(part) for part in schedule.time.split(":"))
    return datetime.combine(start_date, time(hour, minute), tzinfo=tz)


def build_recurrence(schedule: ParsedSchedule | None, start: datetime) -> FrequencyConfig:
    """
    Recurrence rule for a parsed schedule.

    Args:
        schedule: The parser's schedule, or None
        start: First occurrence in the user's timezone

    Returns:
        FrequencyConfig including the end condition
    """
    if schedule is None or schedule.frequency == ParsedFrequency.ONCE:
        return FrequencyConfig(frequency=FrequencyType.ONCE)

    if schedule.frequency == ParsedFrequency.DAILY:
        config = get_default_config(FrequencyType.DAILY, start.date())
    else:
        days = schedule.recurrence_days_of_week
        if days == WEEKDAY_NUMBERS:
            config = get_default_config(FrequencyType.WEEKDAYS, start.date())
        elif days == WEEKEND_NUMBERS:
            config = get_default_config(FrequencyType.WEEKENDS, start.date())
        elif days:
            config = FrequencyConfig(frequency=FrequencyType.CUSTOM, interval=1, days_of_week=days)
        else:
            config = get_default_config(FrequencyType.WEEKLY, start.date())

    repeat_until = _parse_date(schedule.repeat_until)
    if repeat_until:
        config.end_type = EndType.ON_DATE
        config.end_date = repeat_until
    elif schedule.max_occurrences:
        config.end_type = EndType.AFTER_COUNT
        config.max_occurrences = min(schedule.max_occurrences, MAX_DRAFT_OCCURRENCES)

    return config


def build_message(parsed: ParsedReminder) -> str:
    if parsed.reminder_type == ParsedReminderType.MEDICATION and parsed.medications:
        entries = [
            MedicationEntry(
                name=med.name,
                quantity=med.quantity,
                unit=med.unit.value,
                instruction=med.instruction.value,
            )
            for med in parsed.medications
        ]
        return generate_multi_medication_message(parsed.recipient_name or "", entries)
    return (parsed.message or "").strip()


def collect_warnings(parsed: ParsedReminder) -> list[str]:
    """Parser clarifications followed by the form fields voice left empty."""
    warnings = list(parsed.clarification_needed)

    missing = []
    if not parsed.recipient_name:
        missing.append("Recipient Name")
    if not parsed.phone_number:
        missing.append("Phone Number")
    if parsed.schedule is None:
        missing.append("Date & Time")
    if parsed.reminder_type == ParsedReminderType.MEDICATION:
        if not parsed.medications:
            missing.append("Reminder Message")
    elif not parsed.message:
        missing.append("Reminder Message")
    if missing:
        warnings.append(f"Please fill in: {', '.join(missing)}")

    extra = parsed.additional_time_slots_count
    if extra > 0 and not any("additional time slot" in w for w in warnings):
        warnings.append(
            f"{extra} additional time slot(s) were mentioned. "
            "Please create separate reminders for those."
        )
    return warnings


def build_reminder_draft(
    parsed: ParsedReminder,
    timezone: str = "UTC",
    now: datetime | None = None,
) -> ReminderDraft:
    """
    Build a form draft from a parsed transcript.

    Args:
        parsed: The parser's output
        timezone: The user's IANA timezone
        now: Current time (defaults to utc_now)

    Returns:
        ReminderDraft with scheduled_at in UTC

    Raises:
        TranscriptParseError: If the transcript was unrelated or unclear
    """
    if not parsed.is_usable():
        raise TranscriptParseError(
            parsed.rejection_reason or DEFAULT_REJECTION,
            status_code=422,
            details={"reminder_type": parsed.reminder_type.value},
        )

    tz = _zone(timezone)
    start = resolve_start(parsed.schedule, tz, now or utc_now())
    config = build_recurrence(parsed.schedule, start)

    draft = ReminderDraft(
        reminder_type=ReminderType(parsed.reminder_type.value),
        recipient_name=parsed.recipient_name,
        phone_number=parsed.phone_number,
        message=build_message(parsed),
        scheduled_at=start.astimezone(dt_timezone.utc),
        timezone=tz.key,
        recurrence=RecurrenceSettings.from_config(config),
        recurrence_summary=get_recurrence_summary(config, start.date()),
        confidence_score=parsed.confidence_score,
        warnings=collect_warnings(parsed),
    )

    logger.info(
        f"Built {draft.reminder_type.value} draft: {draft.recurrence_summary}, "
        f"{len(draft.warnings)} warnings"
    )
    return draft
