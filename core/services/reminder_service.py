# =============================================================================
# core/services/reminder_service.py - Reminder Business Logic
# =============================================================================
# Handles reminder CRUD operations. Recurrence rules arrive as
# RecurrenceSettings and are stored in the flat recurrence_* columns.
# Every query filters by user_id because the service key bypasses RLS.
# =============================================================================

import logging
from datetime import datetime
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from lib.pricing import estimate_call_cost
from lib.recurrence import FrequencyConfig, get_recurrence_summary
from lib.summary import generate_message_summary
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, parse_timestamp, to_utc_iso
from core.models.reminder import (
    RecurrenceSettings,
    ReminderBase,
    ReminderBulkCreate,
    ReminderCreate,
    ReminderSummaryResponse,
    ReminderUpdate,
    VoiceType,
)
from core.services.scheduler_service import reminder_timezone
from app.exceptions import ReminderNotFoundError, VoiceNotFoundError, VoiceNotReadyError

logger = logging.getLogger(__name__)


def localize(value: datetime, tz_name: str) -> datetime:
    """Attach the reminder's timezone to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=ZoneInfo(tz_name))
    return value


def recurrence_summary_for(row: dict[str, Any]) -> str:
    """Human summary of a reminder row's recurrence, e.g. 'Weekly on Monday'."""
    config = FrequencyConfig.from_db_row(row)
    tz = reminder_timezone(row)
    reference = parse_timestamp(row["scheduled_at"]).astimezone(tz).date()
    return get_recurrence_summary(config, reference)


class ReminderService:
    """
    Service for reminder management operations.
    """

    @staticmethod
    def _check_custom_voice(user_id: UUID | str, data: ReminderBase | ReminderUpdate) -> None:
        """
        A custom voice must be the user's own and finished processing.

        Raises:
            VoiceNotFoundError: If the voice doesn't belong to the user
            VoiceNotReadyError: If the voice is still processing or failed
        """
        if data.voice != VoiceType.CUSTOM or not data.custom_voice_id:
            return
        voice = SupabaseClient.fetch_by_id("user_voices", data.custom_voice_id, user_id=user_id)
        if not voice:
            raise VoiceNotFoundError(str(data.custom_voice_id))
        if voice.get("status") != "ready":
            raise VoiceNotReadyError(str(data.custom_voice_id), voice.get("status", "unknown"))

    @staticmethod
    def _build_row(user_id: UUID | str, data: ReminderBase, scheduled_at: datetime) -> dict[str, Any]:
        row = {
            "user_id": normalize_uuid(user_id),
            "recipient_name": data.recipient_name,
            "phone_number": data.phone_number,
            "message": data.message,
            "voice": data.voice.value,
            "custom_voice_id": (
                str(data.custom_voice_id)
                if data.voice == VoiceType.CUSTOM and data.custom_voice_id else None
            ),
            "scheduled_at": to_utc_iso(localize(scheduled_at, data.timezone)),
            "timezone": data.timezone,
            "reminder_type": data.reminder_type.value,
            "repeat_count": 0,
            "is_active": True,
        }
        row.update(data.recurrence.to_config().to_db_fields())
        return row

    @staticmethod
    def create_reminder(user_id: UUID | str, data: ReminderCreate) -> dict[str, Any]:
        """
        Create a reminder.

        Returns:
            Created reminder row

        Raises:
            Exception: If creation fails
        """
        ReminderService._check_custom_voice(user_id, data)

        client = SupabaseClient.get_client()
        row = ReminderService._build_row(user_id, data, data.scheduled_at)

        try:
            response = client.table("reminders").insert(row).execute()

            if response.data:
                reminder = response.data[0]
                logger.info(f"Created reminder: {reminder['id']} for user: {user_id}")
                return reminder

            raise SupabaseClientError(
                "Reminder insert returned no data",
                code="INSERT_FAILED",
                details={"table": "reminders"},
            )

        except Exception as e:
            logger.error(f"Failed to create reminder: {e}")
            raise

    @staticmethod
    def create_reminders_bulk(user_id: UUID | str, data: ReminderBulkCreate) -> list[dict[str, Any]]:
        """
        Create one reminder per time slot in a single insert.

        Returns:
            Created reminder rows
        """
        ReminderService._check_custom_voice(user_id, data)

        client = SupabaseClient.get_client()
        rows = [ReminderService._build_row(user_id, data, slot) for slot in data.time_slots]

        try:
            response = client.table("reminders").insert(rows).execute()
            created = response.data or []
            logger.info(f"Created {len(created)} reminders for user: {user_id}")
            return created

        except Exception as e:
            logger.error(f"Failed to create reminders: {e}")
            raise

    @staticmethod
    def get_reminder(reminder_id: UUID | str, user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            ReminderNotFoundError: If reminder doesn't exist or user doesn't own it
        """
        reminder = SupabaseClient.fetch_by_id("reminders", reminder_id, user_id=user_id)
        if not reminder:
            raise ReminderNotFoundError(str(reminder_id))
        return reminder

    @staticmethod
    def list_reminders(
        user_id: UUID | str,
        active_only: bool = False,
    ) -> list[dict[str, Any]]:
        """List a user's reminders by next scheduled time."""
        client = SupabaseClient.get_client()

        query = client.table("reminders").select("*").eq("user_id", normalize_uuid(user_id))
        if active_only:
            query = query.eq("is_active", True)

        response = query.order("scheduled_at").execute()
        return response.data or []

    @staticmethod
    def update_reminder(
        reminder_id: UUID | str,
        user_id: UUID | str,
        data: ReminderUpdate,
    ) -> dict[str, Any]:
        """
        Update a reminder.

        Rescheduling or changing the rule restarts the occurrence count.

        Raises:
            ReminderNotFoundError: If reminder doesn't exist or user doesn't own it
        """
        reminder = ReminderService.get_reminder(reminder_id, user_id)
        ReminderService._check_custom_voice(user_id, data)

        update_data: dict[str, Any] = {}
        for field in ("recipient_name", "phone_number", "message", "timezone", "is_active"):
            value = getattr(data, field)
            if value is not None:
                update_data[field] = value.strip() if isinstance(value, str) else value

        if data.voice is not None:
            update_data["voice"] = data.voice.value
            if data.voice != VoiceType.CUSTOM:
                update_data["custom_voice_id"] = None
        if data.custom_voice_id is not None:
            update_data["custom_voice_id"] = str(data.custom_voice_id)
        if data.reminder_type is not None:
            update_data["reminder_type"] = data.reminder_type.value

        tz_name = data.timezone or reminder.get("timezone") or "UTC"
        if data.scheduled_at is not None:
            update_data["scheduled_at"] = to_utc_iso(localize(data.scheduled_at, tz_name))
            update_data["repeat_count"] = 0
        if data.recurrence is not None:
            update_data.update(data.recurrence.to_config().to_db_fields())
            update_data["repeat_count"] = 0

        if not update_data:
            return reminder  # Nothing to update

        client = SupabaseClient.get_client()
        reminder_id_str = normalize_uuid(reminder_id)

        try:
            response = (
                client.table("reminders")
                .update(update_data)
                .eq("id", reminder_id_str)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )

            if response.data:
                logger.info(f"Updated reminder: {reminder_id_str}")
                return response.data[0]

            return reminder

        except Exception as e:
            logger.error(f"Failed to update reminder: {e}")
            raise

    @staticmethod
    def delete_reminder(reminder_id: UUID | str, user_id: UUID | str) -> None:
        """
        Raises:
            ReminderNotFoundError: If reminder doesn't exist or user doesn't own it
        """
        ReminderService.get_reminder(reminder_id, user_id)

        client = SupabaseClient.get_client()
        client.table("reminders").delete().eq("id", normalize_uuid(reminder_id)).eq(
            "user_id", normalize_uuid(user_id)
        ).execute()
        logger.info(f"Deleted reminder: {reminder_id}")

    @staticmethod
    def get_recurrence(reminder: dict[str, Any]) -> RecurrenceSettings:
        return RecurrenceSettings.from_config(FrequencyConfig.from_db_row(reminder))

    @staticmethod
    def summarize(reminder: dict[str, Any]) -> ReminderSummaryResponse:
        """Title, recurrence summary and per-call cost estimate for a reminder."""
        estimate = estimate_call_cost(reminder["phone_number"])
        return ReminderSummaryResponse(
            reminder_id=reminder["id"],
            title=generate_message_summary(reminder.get("message")),
            recurrence_summary=recurrence_summary_for(reminder),
            next_scheduled_at=(
                parse_timestamp(reminder["scheduled_at"]) if reminder.get("is_active") else None
            ),
            estimated_cost_per_call=estimate.estimated if estimate else None,
        )
