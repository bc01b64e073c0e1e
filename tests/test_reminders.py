# =============================================================================
# tests/test_reminders.py - Reminder Model and Service Tests
# =============================================================================
# Tests for reminder input validation and ReminderService row handling:
# - Phone number, timezone and text validation
# - RecurrenceSettings <-> FrequencyConfig mapping
# - Row building (UTC storage, custom voice, recurrence columns)
# - Updates restarting the occurrence count
# - Summaries (title, recurrence, cost)
# =============================================================================

from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from app.exceptions import ReminderNotFoundError, VoiceNotFoundError, VoiceNotReadyError
from core.models.reminder import (
    RecurrenceSettings,
    ReminderBulkCreate,
    ReminderCreate,
    ReminderUpdate,
    VoiceType,
)
from core.services.reminder_service import ReminderService, localize
from lib.recurrence import EndType, FrequencyType
from lib.supabase_client import SupabaseClientError

from tests.conftest import REMINDER_ID, USER_ID

VOICE_ID = "990e8400-e29b-41d4-a716-446655440000"


def make_create(**overrides) -> ReminderCreate:
    data = {
        "recipient_name": "Mom",
        "phone_number": "+447700900123",
        "message": "Don't forget your 3pm appointment.",
        "scheduled_at": "2026-03-05T15:00:00+00:00",
    }
    data.update(overrides)
    return ReminderCreate(**data)


# =============================================================================
# Model Validation
# =============================================================================

class TestReminderCreate:
    """Input validation for ReminderCreate."""

    def test_valid(self):
        reminder = make_create()
        assert reminder.voice == VoiceType.FRIENDLY_FEMALE
        assert reminder.timezone == "UTC"
        assert reminder.recurrence.frequency == FrequencyType.ONCE

    @pytest.mark.parametrize("phone", ["07700900123", "+0447700900123", "+44 7700 900123", "+12345"])
    def test_invalid_phone(self, phone):
        with pytest.raises(ValidationError):
            make_create(phone_number=phone)

    def test_phone_is_stripped(self):
        assert make_create(phone_number=" +447700900123 ").phone_number == "+447700900123"

    def test_invalid_timezone(self):
        with pytest.raises(ValidationError):
            make_create(timezone="Europe/Atlantis")

    def test_short_recipient_name(self):
        with pytest.raises(ValidationError):
            make_create(recipient_name="M")

    def test_message_too_long(self):
        with pytest.raises(ValidationError):
            make_create(message="x" * 501)

    def test_text_is_stripped(self):
        reminder = make_create(recipient_name="  Mom  ", message="  Call me back  ")
        assert reminder.recipient_name == "Mom"
        assert reminder.message == "Call me back"

    def test_bulk_requires_slots(self):
        with pytest.raises(ValidationError):
            ReminderBulkCreate(
                recipient_name="Mom",
                phone_number="+447700900123",
                message="Pills",
                time_slots=[],
            )


class TestRecurrenceSettings:
    """RecurrenceSettings validation and mapping."""

    def test_days_sorted_and_unique(self):
        settings = RecurrenceSettings(frequency="custom", days_of_week=[5, 1, 3, 1])
        assert settings.days_of_week == [1, 3, 5]

    def test_invalid_day(self):
        with pytest.raises(ValidationError):
            RecurrenceSettings(frequency="custom", days_of_week=[7])

    def test_invalid_week_of_month(self):
        with pytest.raises(ValidationError):
            RecurrenceSettings(frequency="monthly", week_of_month=5)

    def test_last_week_allowed(self):
        assert RecurrenceSettings(frequency="monthly", week_of_month=-1).week_of_month == -1

    def test_interval_bounds(self):
        with pytest.raises(ValidationError):
            RecurrenceSettings(frequency="daily", interval=0)
        with pytest.raises(ValidationError):
            RecurrenceSettings(frequency="daily", interval=100)

    def test_config_round_trip(self):
        settings = RecurrenceSettings(
            frequency="weekly",
            interval=2,
            days_of_week=[2],
            end_type="on_date",
            end_date=date(2026, 6, 30),
        )
        assert RecurrenceSettings.from_config(settings.to_config()) == settings


class TestReminderUpdate:
    def test_all_optional(self):
        update = ReminderUpdate()
        assert update.model_dump(exclude_none=True) == {}

    def test_phone_validated_when_present(self):
        with pytest.raises(ValidationError):
            ReminderUpdate(phone_number="12345")


# =============================================================================
# Row Building
# =============================================================================

class TestBuildRow:
    """ReminderService._build_row()"""

    def test_stores_utc(self):
        data = make_create(
            scheduled_at=datetime(2026, 7, 1, 9, 0),
            timezone="Europe/London",
        )

        row = ReminderService._build_row(USER_ID, data, data.scheduled_at)

        # Naive times are local to the reminder's timezone (BST in July)
        assert row["scheduled_at"] == "2026-07-01T08:00:00+00:00"
        assert row["timezone"] == "Europe/London"
        assert row["repeat_count"] == 0
        assert row["is_active"] is True

    def test_recurrence_columns(self):
        data = make_create(recurrence={
            "frequency": "daily",
            "end_type": "after_count",
            "max_occurrences": 10,
        })

        row = ReminderService._build_row(USER_ID, data, data.scheduled_at)

        assert row["frequency"] == "daily"
        assert row["recurrence_interval"] == 1
        assert row["max_occurrences"] == 10
        assert row["repeat_until"] is None

    def test_custom_voice_only_with_custom(self):
        data = make_create(voice="friendly_male", custom_voice_id=VOICE_ID)
        row = ReminderService._build_row(USER_ID, data, data.scheduled_at)
        assert row["custom_voice_id"] is None

        data = make_create(voice="custom", custom_voice_id=VOICE_ID)
        row = ReminderService._build_row(USER_ID, data, data.scheduled_at)
        assert row["custom_voice_id"] == VOICE_ID

    def test_localize_keeps_aware(self):
        aware = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)
        assert localize(aware, "Asia/Karachi") is aware


# =============================================================================
# Service Operations
# =============================================================================

class TestCreateReminder:
    """ReminderService.create_reminder()"""

    def test_inserts_row(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.return_value.data = [
            {"id": REMINDER_ID}
        ]

        result = ReminderService.create_reminder(USER_ID, make_create())

        assert result["id"] == REMINDER_ID
        inserted = mock_supabase.table.return_value.insert.call_args.args[0]
        assert inserted["user_id"] == USER_ID
        assert inserted["recipient_name"] == "Mom"

    def test_empty_insert_raises(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.return_value.data = []

        with pytest.raises(SupabaseClientError, match="insert returned no data"):
            ReminderService.create_reminder(USER_ID, make_create())

    @patch("core.services.reminder_service.SupabaseClient.fetch_by_id", return_value=None)
    def test_unknown_custom_voice(self, mock_fetch, mock_supabase):
        with pytest.raises(VoiceNotFoundError):
            ReminderService.create_reminder(
                USER_ID, make_create(voice="custom", custom_voice_id=VOICE_ID)
            )

    @patch("core.services.reminder_service.SupabaseClient.fetch_by_id")
    def test_custom_voice_not_ready(self, mock_fetch, mock_supabase):
        mock_fetch.return_value = {"id": VOICE_ID, "status": "processing"}

        with pytest.raises(VoiceNotReadyError):
            ReminderService.create_reminder(
                USER_ID, make_create(voice="custom", custom_voice_id=VOICE_ID)
            )

    def test_bulk_one_row_per_slot(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.return_value.data = [
            {"id": "a"}, {"id": "b"}
        ]
        data = ReminderBulkCreate(
            recipient_name="Grandma",
            phone_number="+447700900123",
            message="Take your pills",
            time_slots=["2026-03-05T08:00:00+00:00", "2026-03-05T20:00:00+00:00"],
        )

        created = ReminderService.create_reminders_bulk(USER_ID, data)

        assert len(created) == 2
        rows = mock_supabase.table.return_value.insert.call_args.args[0]
        assert [row["scheduled_at"] for row in rows] == [
            "2026-03-05T08:00:00+00:00",
            "2026-03-05T20:00:00+00:00",
        ]


class TestUpdateReminder:
    """ReminderService.update_reminder()"""

    @patch("core.services.reminder_service.SupabaseClient.fetch_by_id", return_value=None)
    def test_not_found(self, mock_fetch, mock_supabase):
        with pytest.raises(ReminderNotFoundError):
            ReminderService.update_reminder(REMINDER_ID, USER_ID, ReminderUpdate(message="Hi"))

    @patch("core.services.reminder_service.SupabaseClient.fetch_by_id")
    def test_nothing_to_update(self, mock_fetch, mock_supabase, sample_reminder_row):
        mock_fetch.return_value = sample_reminder_row

        result = ReminderService.update_reminder(REMINDER_ID, USER_ID, ReminderUpdate())

        assert result is sample_reminder_row
        mock_supabase.table.return_value.update.assert_not_called()

    @patch("core.services.reminder_service.SupabaseClient.fetch_by_id")
    def test_reschedule_resets_count(self, mock_fetch, mock_supabase, sample_reminder_row):
        mock_fetch.return_value = {**sample_reminder_row, "repeat_count": 7}
        update_chain = mock_supabase.table.return_value.update.return_value
        update_chain.eq.return_value.eq.return_value.execute.return_value.data = [{"id": REMINDER_ID}]

        ReminderService.update_reminder(
            REMINDER_ID,
            USER_ID,
            ReminderUpdate(scheduled_at=datetime(2026, 4, 1, 9, 0)),
        )

        payload = mock_supabase.table.return_value.update.call_args.args[0]
        assert payload["repeat_count"] == 0
        assert payload["scheduled_at"] == "2026-04-01T09:00:00+00:00"

    @patch("core.services.reminder_service.SupabaseClient.fetch_by_id")
    def test_message_only_keeps_count(self, mock_fetch, mock_supabase, sample_reminder_row):
        mock_fetch.return_value = sample_reminder_row
        update_chain = mock_supabase.table.return_value.update.return_value
        update_chain.eq.return_value.eq.return_value.execute.return_value.data = [{"id": REMINDER_ID}]

        ReminderService.update_reminder(REMINDER_ID, USER_ID, ReminderUpdate(message=" Hello "))

        payload = mock_supabase.table.return_value.update.call_args.args[0]
        assert payload == {"message": "Hello"}

    @patch("core.services.reminder_service.SupabaseClient.fetch_by_id")
    def test_switching_off_custom_voice(self, mock_fetch, mock_supabase, sample_reminder_row):
        mock_fetch.return_value = {**sample_reminder_row, "voice": "custom", "custom_voice_id": VOICE_ID}
        update_chain = mock_supabase.table.return_value.update.return_value
        update_chain.eq.return_value.eq.return_value.execute.return_value.data = [{"id": REMINDER_ID}]

        ReminderService.update_reminder(
            REMINDER_ID, USER_ID, ReminderUpdate(voice="friendly_male")
        )

        payload = mock_supabase.table.return_value.update.call_args.args[0]
        assert payload["voice"] == "friendly_male"
        assert payload["custom_voice_id"] is None


class TestSummarize:
    """ReminderService.summarize()"""

    def test_summary(self, sample_reminder_row):
        summary = ReminderService.summarize({**sample_reminder_row, "phone_number": "+447400123456"})

        assert str(summary.reminder_id) == REMINDER_ID
        assert summary.recurrence_summary == "Daily"
        assert summary.next_scheduled_at == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
        assert summary.estimated_cost_per_call == pytest.approx(0.14)

    def test_inactive_has_no_next_call(self, sample_reminder_row):
        summary = ReminderService.summarize({**sample_reminder_row, "is_active": False})
        assert summary.next_scheduled_at is None

    def test_unknown_destination(self, sample_reminder_row):
        summary = ReminderService.summarize({**sample_reminder_row, "phone_number": "+9999999999"})
        assert summary.estimated_cost_per_call is None

    def test_recurrence_from_row(self, sample_reminder_row):
        settings = ReminderService.get_recurrence({
            **sample_reminder_row,
            "frequency": "weekly",
            "recurrence_days_of_week": [1],
            "max_occurrences": 5,
        })
        assert settings.frequency == FrequencyType.WEEKLY
        assert settings.end_type == EndType.AFTER_COUNT
        assert settings.max_occurrences == 5
