# =============================================================================
# core/services/call_history_service.py - Call History Business Logic
# =============================================================================
# Every call attempt leaves one call_history row:
# - CallService creates it as "pending" before doing anything else
# - CallService moves it to "in_progress" or "failed"
# - Twilio's status callback records the final outcome
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now, to_utc_iso
from core.models.call_history import CallStatus
from app.exceptions import CallHistoryNotFoundError

logger = logging.getLogger(__name__)

# AnsweredBy values from Twilio answering machine detection
MACHINE_ANSWERS = {
    "machine_start",
    "machine_end_beep",
    "machine_end_silence",
    "machine_end_other",
}


def map_twilio_status(call_status: str, answered_by: str | None = None) -> CallStatus | None:
    """
    Map a Twilio CallStatus to our call status.

    Returns:
        The final status, or None for intermediate statuses
        (queued, ringing, in-progress) that should be ignored
    """
    if call_status == "completed":
        if answered_by in MACHINE_ANSWERS:
            return CallStatus.VOICEMAIL
        return CallStatus.COMPLETED

    if call_status in ("busy", "no-answer"):
        return CallStatus.MISSED

    if call_status in ("failed", "canceled"):
        return CallStatus.FAILED

    return None


def parse_duration(value: str | int | None) -> int | None:
    """CallDuration as an int, or None if missing or not a number."""
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class CallHistoryService:
    """
    Service for call history operations.
    """

    @staticmethod
    def create_pending(
        user_id: UUID | str,
        reminder_id: UUID | str,
        recipient_name: str,
        phone_number: str,
        message: str,
        voice: str,
    ) -> dict[str, Any] | None:
        """
        Insert a pending row for a new call attempt.

        Returns:
            The created row, or None if the insert failed. A missing history
            row never blocks the call itself.
        """
        client = SupabaseClient.get_client()

        data = {
            "user_id": normalize_uuid(user_id),
            "reminder_id": normalize_uuid(reminder_id),
            "recipient_name": recipient_name,
            "phone_number": phone_number,
            "message": message,
            "voice": voice,
            "status": CallStatus.PENDING.value,
            "attempted_at": to_utc_iso(utc_now()),
        }

        try:
            response = client.table("call_history").insert(data).execute()
        except Exception as e:
            logger.error(f"Error creating call history: {e}")
            return None

        if not response.data:
            logger.error("Call history insert returned no data")
            return None

        return response.data[0]

    @staticmethod
    def update_status(
        history_id: UUID | str | None,
        status: CallStatus,
        error_message: str | None = None,
        call_sid: str | None = None,
    ) -> None:
        """
        Set a row's status. Clears error_message unless one is given.

        No-op when there is no history row.
        """
        if not history_id:
            return

        update_data: dict[str, Any] = {
            "status": status.value,
            "error_message": error_message,
        }
        if call_sid:
            update_data["twilio_call_sid"] = call_sid

        client = SupabaseClient.get_client()
        client.table("call_history").update(update_data).eq("id", normalize_uuid(history_id)).execute()

    @staticmethod
    def mark_failed(history_id: UUID | str | None, error_message: str) -> None:
        """
        Mark a row failed unless it already is.

        Used on unexpected errors, where the failure may already have been
        recorded with a more specific message.
        """
        if not history_id:
            return

        try:
            row = SupabaseClient.fetch_by_id("call_history", history_id, columns="status")
            if row and row.get("status") != CallStatus.FAILED.value:
                CallHistoryService.update_status(history_id, CallStatus.FAILED, error_message)
        except Exception as e:
            logger.error(f"Failed to update history with error: {e}")

    @staticmethod
    def apply_status_callback(
        call_sid: str,
        call_status: str,
        answered_by: str | None = None,
        duration: str | int | None = None,
    ) -> dict[str, Any] | None:
        """
        Record Twilio's final outcome for a call.

        Args:
            call_sid: Twilio CallSid
            call_status: Twilio CallStatus
            answered_by: Twilio AnsweredBy (answering machine detection)
            duration: Twilio CallDuration in seconds

        Returns:
            The updated row, or None if the status was intermediate or no row
            matched the SID
        """
        status = map_twilio_status(call_status, answered_by)
        if status is None:
            logger.info(f"Ignoring intermediate status: {call_status}")
            return None

        update_data: dict[str, Any] = {"status": status.value}
        duration_seconds = parse_duration(duration)
        if duration_seconds is not None:
            update_data["duration_seconds"] = duration_seconds

        client = SupabaseClient.get_client()
        response = (
            client.table("call_history")
            .update(update_data)
            .eq("twilio_call_sid", call_sid)
            .execute()
        )

        if not response.data:
            logger.warning(f"No call history found for SID: {call_sid}")
            return None

        row = response.data[0]
        logger.info(f"Updated call history {row['id']} to status: {status.value}")
        return row

    @staticmethod
    def list_calls(
        user_id: UUID | str,
        page: int = 1,
        page_size: int = 20,
        reminder_id: UUID | str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List a user's calls, newest first.

        Returns:
            Tuple of (rows for the page, total count)
        """
        client = SupabaseClient.get_client()
        offset = (page - 1) * page_size

        query = (
            client.table("call_history")
            .select("*", count="exact")
            .eq("user_id", normalize_uuid(user_id))
        )
        if reminder_id:
            query = query.eq("reminder_id", normalize_uuid(reminder_id))

        response = (
            query.order("created_at", desc=True)
            .range(offset, offset + page_size - 1)
            .execute()
        )

        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return rows, total

    @staticmethod
    def get_call(call_id: UUID | str, user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            CallHistoryNotFoundError: If the call doesn't exist or belongs to another user
        """
        row = SupabaseClient.fetch_by_id("call_history", call_id, user_id=user_id)
        if not row:
            raise CallHistoryNotFoundError(str(call_id))
        return row
