# =============================================================================
# tests/test_reminder_parser.py - Reminder Parser Agent Tests
# =============================================================================
# This module contains tests for:
# - ParsedReminder schema validation
# - ReminderParserAgent logic (with mocked OpenAI)
# - Contact phone lookup
# - Error handling (actionable messages)
#
# Tests use mocked OpenAI responses to avoid API costs.
# =============================================================================

from __future__ import annotations

import json
import logging
from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from agents.models.parsed_reminder import (
    MedicationInstruction,
    MedicationUnit,
    ParsedMedication,
    ParsedReminder,
    ParsedReminderType,
    ParsedSchedule,
)
from agents.prompts.reminder_parser_system import TOOL_NAME
from agents.reminder_parser import (
    ParseError,
    ReminderParserAgent,
    apply_defaults,
    find_contact_by_name,
)

CONTACTS = [
    {"name": "Mom", "phone_number": "+447700900123"},
    {"name": "Dr Patel", "phone_number": "+442071234567"},
]


def completion(arguments, tool_name=TOOL_NAME):
    """Build a chat completion carrying one tool call."""
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    tool_call = SimpleNamespace(function=SimpleNamespace(name=tool_name, arguments=raw))
    message = SimpleNamespace(tool_calls=[tool_call], content=None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_agent(response=None, side_effect=None) -> tuple[ReminderParserAgent, MagicMock]:
    client = MagicMock()
    create = client.chat.completions.create
    if side_effect is not None:
        create.side_effect = side_effect
    else:
        create.return_value = response
    return ReminderParserAgent(model="gpt-4o-mini", temperature=0, client=client), client


MEDICATION_ARGS = {
    "reminder_type": "medication",
    "recipient_name": "mom",
    "medications": [
        {"name": "Calpol", "quantity": 2, "unit": "tablet", "instruction": "with_food"},
    ],
    "schedule": {"start_date": "2026-03-05", "time": "9:00", "frequency": "daily"},
    "confidence_score": 0.92,
    "clarification_needed": [],
}


# =============================================================================
# ParsedReminder Schema Tests
# =============================================================================

class TestParsedReminderSchema:
    """Test ParsedReminder Pydantic validation."""

    def test_defaults(self):
        parsed = ParsedReminder()
        assert parsed.reminder_type == ParsedReminderType.UNCLEAR
        assert parsed.confidence_score == 0.5
        assert parsed.clarification_needed == []
        assert parsed.additional_time_slots_count == 0
        assert parsed.is_usable() is False

    def test_medication_defaults(self):
        med = ParsedMedication(name="Aspirin")
        assert med.quantity == 1
        assert med.unit == MedicationUnit.TABLET
        assert med.instruction == MedicationInstruction.NONE

    def test_time_normalized(self):
        schedule = ParsedSchedule(start_date="2026-03-05", time="9:05")
        assert schedule.time == "09:05"

    def test_invalid_time(self):
        with pytest.raises(ValidationError):
            ParsedSchedule(start_date="2026-03-05", time="25:00")

    def test_days_sorted_and_unique(self):
        schedule = ParsedSchedule(
            start_date="2026-03-05", time="08:00", frequency="weekly",
            recurrence_days_of_week=[5, 1, 3, 1],
        )
        assert schedule.recurrence_days_of_week == [1, 3, 5]

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            ParsedReminder(confidence_score=1.5)


# =============================================================================
# Helper Tests
# =============================================================================

class TestHelpers:
    def test_find_contact_case_insensitive(self):
        assert find_contact_by_name(CONTACTS, "  MOM ")["phone_number"] == "+447700900123"

    def test_find_contact_no_partial_match(self):
        assert find_contact_by_name(CONTACTS, "Patel") is None

    def test_find_contact_without_contacts(self):
        assert find_contact_by_name(None, "Mom") is None

    def test_apply_defaults_drops_nulls(self):
        data = apply_defaults({"reminder_type": None, "recipient_name": "Mom", "phone_number": None})
        assert data == {
            "recipient_name": "Mom",
            "reminder_type": "unclear",
            "confidence_score": 0.5,
            "clarification_needed": [],
            "additional_time_slots_count": 0,
        }


# =============================================================================
# ReminderParserAgent Tests
# =============================================================================

class TestReminderParserAgent:
    """Test ReminderParserAgent with a mocked OpenAI client."""

    def test_parse_medication_reminder(self):
        agent, client = make_agent(completion(MEDICATION_ARGS))

        parsed = agent.parse(
            "Remind mom to take 2 Calpol with food every day at 9",
            timezone="Europe/London",
            contacts=CONTACTS,
            today=date(2026, 3, 5),
        )

        assert parsed.reminder_type == ParsedReminderType.MEDICATION
        assert parsed.schedule.time == "09:00"
        assert parsed.medications[0].instruction == MedicationInstruction.WITH_FOOD
        # Filled from the matching contact
        assert parsed.phone_number == "+447700900123"

    def test_forces_extraction_tool(self):
        agent, client = make_agent(completion(MEDICATION_ARGS))

        agent.parse("Remind mom at 9", timezone="Europe/London", today=date(2026, 3, 5))

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "function", "function": {"name": TOOL_NAME}}
        assert kwargs["tools"][0]["function"]["name"] == TOOL_NAME
        system_prompt = kwargs["messages"][0]["content"]
        assert "2026-03-05" in system_prompt
        assert "Europe/London" in system_prompt
        assert "Remind mom at 9" in kwargs["messages"][1]["content"]

    def test_spoken_phone_number_kept(self):
        args = dict(MEDICATION_ARGS, phone_number="+15551234567")
        agent, _ = make_agent(completion(args))

        parsed = agent.parse("...", contacts=CONTACTS, today=date(2026, 3, 5))

        assert parsed.phone_number == "+15551234567"

    def test_transcript_text_not_logged(self, caplog):
        agent, _ = make_agent(completion(MEDICATION_ARGS))
        transcript = "Remind mom to take 2 Calpol with food every day at 9"

        with caplog.at_level(logging.DEBUG, logger="agents.reminder_parser"):
            agent.parse(transcript, timezone="Europe/London", contacts=CONTACTS, today=date(2026, 3, 5))

        assert f"{len(transcript)} chars" in caplog.text
        assert "Calpol" not in caplog.text

    def test_unrelated_returned_not_raised(self):
        agent, _ = make_agent(completion({
            "reminder_type": "unrelated",
            "confidence_score": 0.95,
            "rejection_reason": "This is a weather question, not a reminder.",
        }))

        parsed = agent.parse("What's the weather like?", today=date(2026, 3, 5))

        assert parsed.is_usable() is False
        assert "weather" in parsed.rejection_reason

    def test_empty_transcript(self):
        agent, client = make_agent(completion(MEDICATION_ARGS))

        with pytest.raises(ParseError) as exc_info:
            agent.parse("   ")

        assert exc_info.value.code == "EMPTY_TRANSCRIPT"
        assert exc_info.value.status_code == 400
        client.chat.completions.create.assert_not_called()

    def test_openai_failure(self):
        agent, _ = make_agent(side_effect=RuntimeError("rate limited"))

        with pytest.raises(ParseError) as exc_info:
            agent.parse("Remind mom at 9", today=date(2026, 3, 5))

        assert exc_info.value.code == "OPENAI_ERROR"
        assert exc_info.value.status_code == 502

    def test_no_tool_call(self):
        message = SimpleNamespace(tool_calls=None, content="Sure!")
        agent, _ = make_agent(SimpleNamespace(choices=[SimpleNamespace(message=message)]))

        with pytest.raises(ParseError) as exc_info:
            agent.parse("Remind mom at 9", today=date(2026, 3, 5))

        assert exc_info.value.code == "NO_TOOL_CALL"

    def test_invalid_json_arguments(self):
        agent, _ = make_agent(completion("{not json"))

        with pytest.raises(ParseError) as exc_info:
            agent.parse("Remind mom at 9", today=date(2026, 3, 5))

        assert exc_info.value.code == "JSON_PARSE_ERROR"

    def test_invalid_structure(self):
        agent, _ = make_agent(completion({"reminder_type": "quick", "confidence_score": 7}))

        with pytest.raises(ParseError) as exc_info:
            agent.parse("Remind mom at 9", today=date(2026, 3, 5))

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.suggestion

    def test_error_str_includes_suggestion(self):
        error = ParseError("boom", code="X", suggestion="try again")
        assert str(error) == "[X] boom Suggestion: try again"
