# =============================================================================
# tests/test_call_history.py - Call History Tests
# =============================================================================
# Tests for core/services/call_history_service.py:
# - Twilio status mapping (answered, voicemail, missed, failed)
# - Status callback updates
# - Pending row creation and status updates
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import CallHistoryNotFoundError
from core.models.call_history import CallStatus
from core.services.call_history_service import (
    CallHistoryService,
    map_twilio_status,
    parse_duration,
)

from tests.conftest import HISTORY_ID, REMINDER_ID, USER_ID


class TestMapTwilioStatus:
    """Tests for map_twilio_status()."""

    @pytest.mark.parametrize("call_status,answered_by,expected", [
        ("completed", None, CallStatus.COMPLETED),
        ("completed", "human", CallStatus.COMPLETED),
        ("completed", "unknown", CallStatus.COMPLETED),
        ("completed", "machine_start", CallStatus.VOICEMAIL),
        ("completed", "machine_end_beep", CallStatus.VOICEMAIL),
        ("busy", None, CallStatus.MISSED),
        ("no-answer", None, CallStatus.MISSED),
        ("failed", None, CallStatus.FAILED),
        ("canceled", None, CallStatus.FAILED),
    ])
    def test_final_statuses(self, call_status, answered_by, expected):
        assert map_twilio_status(call_status, answered_by) == expected

    @pytest.mark.parametrize("call_status", ["queued", "ringing", "in-progress", "initiated"])
    def test_intermediate_statuses_ignored(self, call_status):
        assert map_twilio_status(call_status) is None

    @pytest.mark.parametrize("value,expected", [
        ("42", 42), (" 7 ", 7), (15, 15), ("", None), (None, None), ("abc", None),
    ])
    def test_parse_duration(self, value, expected):
        assert parse_duration(value) == expected


class TestApplyStatusCallback:
    """Tests for CallHistoryService.apply_status_callback()."""

    def _update_chain(self, mock_supabase):
        return mock_supabase.table.return_value.update.return_value.eq.return_value.execute

    def test_answered_call(self, mock_supabase):
        execute = self._update_chain(mock_supabase)
        execute.return_value = MagicMock(data=[{
            "id": HISTORY_ID, "user_id": USER_ID, "status": "completed", "duration_seconds": 42,
        }])

        row = CallHistoryService.apply_status_callback("CA123", "completed", "human", "42")

        assert row["status"] == "completed"
        mock_supabase.table.return_value.update.assert_called_once_with({
            "status": "completed",
            "duration_seconds": 42,
        })
        mock_supabase.table.return_value.update.return_value.eq.assert_called_once_with(
            "twilio_call_sid", "CA123"
        )

    def test_voicemail_without_duration(self, mock_supabase):
        self._update_chain(mock_supabase).return_value = MagicMock(data=[{"id": HISTORY_ID}])

        CallHistoryService.apply_status_callback("CA123", "completed", "machine_end_silence")

        mock_supabase.table.return_value.update.assert_called_once_with({"status": "voicemail"})

    def test_intermediate_status_does_not_touch_db(self, mock_supabase):
        assert CallHistoryService.apply_status_callback("CA123", "ringing") is None
        mock_supabase.table.assert_not_called()

    def test_unknown_sid(self, mock_supabase):
        self._update_chain(mock_supabase).return_value = MagicMock(data=[])
        assert CallHistoryService.apply_status_callback("CA404", "busy") is None


class TestHistoryRows:
    """Tests for row creation and status updates."""

    def test_create_pending(self, mock_supabase):
        insert = mock_supabase.table.return_value.insert
        insert.return_value.execute.return_value = MagicMock(data=[{"id": HISTORY_ID}])

        row = CallHistoryService.create_pending(
            user_id=USER_ID,
            reminder_id=REMINDER_ID,
            recipient_name="Mom",
            phone_number="+447700900123",
            message="Hello Mom. Take your pills.",
            voice="friendly_female",
        )

        assert row == {"id": HISTORY_ID}
        data = insert.call_args.args[0]
        assert data["status"] == "pending"
        assert data["attempted_at"]

    def test_create_pending_swallows_insert_errors(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.side_effect = Exception("down")

        row = CallHistoryService.create_pending(USER_ID, REMINDER_ID, "Mom", "+447700900123", "Hi", "friendly_female")

        assert row is None

    def test_update_status_with_sid(self, mock_supabase):
        CallHistoryService.update_status(HISTORY_ID, CallStatus.IN_PROGRESS, call_sid="CA123")

        mock_supabase.table.return_value.update.assert_called_once_with({
            "status": "in_progress",
            "error_message": None,
            "twilio_call_sid": "CA123",
        })

    def test_update_status_without_row_is_noop(self, mock_supabase):
        CallHistoryService.update_status(None, CallStatus.FAILED, "boom")
        mock_supabase.table.assert_not_called()

    @patch("core.services.call_history_service.SupabaseClient.fetch_by_id")
    def test_mark_failed_keeps_specific_error(self, mock_fetch, mock_supabase):
        mock_fetch.return_value = {"status": "failed"}

        CallHistoryService.mark_failed(HISTORY_ID, "generic")

        mock_supabase.table.assert_not_called()

    @patch("core.services.call_history_service.SupabaseClient.fetch_by_id")
    def test_get_call_not_found(self, mock_fetch):
        mock_fetch.return_value = None
        with pytest.raises(CallHistoryNotFoundError):
            CallHistoryService.get_call(HISTORY_ID, USER_ID)
