# =============================================================================
# agents/models/parsed_reminder.py - Parsed Reminder Schema
# =============================================================================
# This module defines ParsedReminder - the contract between the reminder
# parser agent and the form population service.
#
# The parser turns a dictated transcript into a ParsedReminder; the form
# service turns a ParsedReminder into a ReminderDraft the user reviews.
#
# Example flow:
#   Transcript: "Remind Grandma to take 2 Calpol with food every day at 9am"
#   Parser outputs:
#   {
#       "reminder_type": "medication",
#       "recipient_name": "Grandma",
#       "medications": [{"name": "Calpol", "quantity": 2, "unit": "tablet",
#                        "instruction": "with_food"}],
#       "schedule": {"start_date": "2026-03-05", "time": "09:00",
#                    "frequency": "daily"},
#       "confidence_score": 0.9,
#       "clarification_needed": ["Phone number not provided"],
#       "additional_time_slots_count": 0
#   }
# =============================================================================

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


# =============================================================================
# Enums
# =============================================================================

class ParsedReminderType(str, Enum):
    """
    Classification of a transcript.

    - quick / medication: a usable reminder
    - unrelated: not a reminder request at all
    - unclear: a reminder attempt missing who or when
    """
    QUICK = "quick"
    MEDICATION = "medication"
    UNRELATED = "unrelated"
    UNCLEAR = "unclear"


class ParsedFrequency(str, Enum):
    """Repeat patterns the parser can express."""
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"


class MedicationUnit(str, Enum):
    TABLET = "tablet"
    CAPSULE = "capsule"
    ML = "ml"
    DROPS = "drops"
    PUFF = "puff"
    UNIT = "unit"


class MedicationInstruction(str, Enum):
    NONE = "none"
    WITH_FOOD = "with_food"
    WITH_WATER = "with_water"
    BEFORE_MEAL = "before_meal"
    AFTER_MEAL = "after_meal"
    EMPTY_STOMACH = "empty_stomach"
    BEFORE_BED = "before_bed"


# =============================================================================
# Sub-Models
# =============================================================================

class ParsedMedication(BaseModel):
    """
    One medication in a medication reminder.

    Special preparation goes in the name, e.g. "Calpol (crushed)".
    """

    name: str = Field(..., min_length=1)
    quantity: float = Field(default=1, gt=0)
    unit: MedicationUnit = Field(default=MedicationUnit.TABLET)
    instruction: MedicationInstruction = Field(default=MedicationInstruction.NONE)


class ParsedSchedule(BaseModel):
    """
    When the first call happens and how it repeats.

    Dates are YYYY-MM-DD and times HH:mm (24-hour) in the user's timezone.
    """

    start_date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:mm, 24-hour")
    frequency: ParsedFrequency = Field(default=ParsedFrequency.ONCE)
    recurrence_days_of_week: list[int] | None = Field(
        default=None,
        description="0=Sunday .. 6=Saturday"
    )
    repeat_until: str | None = Field(default=None, description="YYYY-MM-DD")
    max_occurrences: int | None = Field(default=None, ge=1)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Normalize to zero-padded HH:mm."""
        match = TIME_PATTERN.match(v.strip())
        if not match:
            raise ValueError(f"Time must be HH:mm, got '{v}'")
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    @field_validator("recurrence_days_of_week")
    @classmethod
    def validate_days(cls, v: list[int] | None) -> list[int] | None:
        if not v:
            return None
        days = sorted({int(day) for day in v})
        for day in days:
            if not 0 <= day <= 6:
                raise ValueError(f"Day of week must be 0-6, got {day}")
        return days


# =============================================================================
# Main Model
# =============================================================================

class ParsedReminder(BaseModel):
    """
    Structured reminder extracted from a voice transcript.

    Only reminder_type, confidence_score, clarification_needed and
    additional_time_slots_count are always present; everything else is
    filled when the transcript mentions it.
    """

    reminder_type: ParsedReminderType = Field(default=ParsedReminderType.UNCLEAR)

    recipient_name: str | None = None

    phone_number: str | None = Field(
        default=None,
        description="E.164, from the transcript or a matching contact"
    )

    message: str | None = Field(
        default=None,
        description="Quick reminders: the action, e.g. 'pick up groceries'"
    )

    medications: list[ParsedMedication] | None = None

    schedule: ParsedSchedule | None = None

    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)

    clarification_needed: list[str] = Field(default_factory=list)

    rejection_reason: str | None = None

    additional_time_slots_count: int = Field(default=0, ge=0)

    def is_usable(self) -> bool:
        """Whether the transcript produced a reminder (not unrelated/unclear)."""
        return self.reminder_type in (ParsedReminderType.QUICK, ParsedReminderType.MEDICATION)
