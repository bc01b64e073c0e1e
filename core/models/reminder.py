# =============================================================================
# core/models/reminder.py - Reminder Schemas
# =============================================================================
# These models define the API contract for reminder operations:
# - RecurrenceSettings: The repeat rule, mapped onto lib.recurrence.FrequencyConfig
# - ReminderCreate / ReminderUpdate: Input for creating and editing reminders
# - ReminderBulkCreate: One reminder per time slot (medication schedules)
# - ReminderResponse / ReminderList: Output when returning reminders
# - ReminderDraft: A voice-parsed reminder ready to fill the create form
#
# A reminder is a scheduled phone call: who to call, what to say, which voice
# to say it in, when, and how often.
# =============================================================================

import re
from datetime import date, datetime
from enum import Enum
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from lib.recurrence import EndType, FrequencyConfig, FrequencyType, MonthlyType

# -----------------------------------------------------------------------------
# Validation Constants
# -----------------------------------------------------------------------------
# E.164: "+" then 7-15 digits, no leading zero in the country code

E164_PHONE_PATTERN = re.compile(r"^\+[1-9]\d{6,14}$")

MIN_MESSAGE_LENGTH = 1
MAX_MESSAGE_LENGTH = 500
MIN_RECIPIENT_NAME_LENGTH = 2
MAX_RECIPIENT_NAME_LENGTH = 100


def validate_phone_number(value: str) -> str:
    value = value.strip()
    if not E164_PHONE_PATTERN.match(value):
        raise ValueError(
            "Invalid phone number format. Expected international format: +[country code][number]"
        )
    return value


def validate_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {value}")
    return value


class VoiceType(str, Enum):
    """Voice used to speak the reminder."""
    FRIENDLY_FEMALE = "friendly_female"
    FRIENDLY_MALE = "friendly_male"
    CUSTOM = "custom"


class ReminderType(str, Enum):
    """
    Kind of reminder.

    - quick: free-text message
    - medication: message generated from a medication list
    """
    QUICK = "quick"
    MEDICATION = "medication"


class RecurrenceSettings(BaseModel):
    """
    Repeat rule for a reminder.

    Example:
        {"frequency": "custom", "interval": 2, "days_of_week": [1, 3, 5],
         "end_type": "after_count", "max_occurrences": 10}
    """

    frequency: FrequencyType = Field(
        default=FrequencyType.ONCE,
        description="Base repetition pattern"
    )

    interval: int = Field(
        default=1,
        ge=1,
        le=99,
        description="Repeat every N days/weeks/months/years"
    )

    days_of_week: list[int] | None = Field(
        default=None,
        description="Weekdays for custom rules (0=Sunday .. 6=Saturday)"
    )

    monthly_type: MonthlyType | None = Field(
        default=None,
        description="Anchor monthly repeats to a day number or an ordinal weekday"
    )

    day_of_month: int | None = Field(default=None, ge=1, le=31)

    week_of_month: int | None = Field(
        default=None,
        description="1-4, or -1 for the last week"
    )

    day_of_week_for_monthly: int | None = Field(default=None, ge=0, le=6)

    end_type: EndType = Field(default=EndType.NEVER)

    end_date: date | None = Field(
        default=None,
        description="Last day an occurrence may fall on (end_type=on_date)"
    )

    max_occurrences: int | None = Field(
        default=None,
        ge=1,
        le=999,
        description="Total number of calls (end_type=after_count)"
    )

    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, v: list[int] | None) -> list[int] | None:
        """Keep weekday lists sorted and unique."""
        if v is None:
            return None
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"Day of week must be 0-6, got {day}")
        return sorted(set(v)) or None

    @field_validator("week_of_month")
    @classmethod
    def validate_week_of_month(cls, v: int | None) -> int | None:
        if v is not None and v not in (1, 2, 3, 4, -1):
            raise ValueError("Week of month must be 1-4 or -1 (last)")
        return v

    def to_config(self) -> FrequencyConfig:
        return FrequencyConfig(
            frequency=self.frequency,
            interval=self.interval,
            days_of_week=self.days_of_week,
            monthly_type=self.monthly_type,
            day_of_month=self.day_of_month,
            week_of_month=self.week_of_month,
            day_of_week_for_monthly=self.day_of_week_for_monthly,
            end_type=self.end_type,
            end_date=self.end_date,
            max_occurrences=self.max_occurrences,
        )

    @classmethod
    def from_config(cls, config: FrequencyConfig) -> "RecurrenceSettings":
        end_date = config.end_date
        if isinstance(end_date, datetime):
            end_date = end_date.date()
        return cls(
            frequency=config.frequency,
            interval=config.interval,
            days_of_week=config.days_of_week,
            monthly_type=config.monthly_type,
            day_of_month=config.day_of_month,
            week_of_month=config.week_of_month,
            day_of_week_for_monthly=config.day_of_week_for_monthly,
            end_type=config.end_type,
            end_date=end_date,
            max_occurrences=config.max_occurrences,
        )


class ReminderBase(BaseModel):
    """Fields shared by every reminder input."""

    recipient_name: str = Field(
        ...,
        min_length=MIN_RECIPIENT_NAME_LENGTH,
        max_length=MAX_RECIPIENT_NAME_LENGTH,
        description="Name spoken at the start of the call"
    )

    phone_number: str = Field(
        ...,
        description="Recipient phone number in E.164 format"
    )

    message: str = Field(
        ...,
        min_length=MIN_MESSAGE_LENGTH,
        max_length=MAX_MESSAGE_LENGTH,
        description="Script spoken after the greeting"
    )

    voice: VoiceType = Field(default=VoiceType.FRIENDLY_FEMALE)

    custom_voice_id: UUID | None = Field(
        default=None,
        description="user_voices row to use when voice is 'custom'"
    )

    timezone: str = Field(
        default="UTC",
        description="IANA timezone the recurrence is evaluated in"
    )

    reminder_type: ReminderType = Field(default=ReminderType.QUICK)

    recurrence: RecurrenceSettings = Field(default_factory=RecurrenceSettings)

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, v: str) -> str:
        return validate_phone_number(v)

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        return validate_timezone(v)

    @field_validator("recipient_name", "message")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class ReminderCreate(ReminderBase):
    """
    Schema for creating a reminder.

    Example:
        {
            "recipient_name": "Mom",
            "phone_number": "+447700900123",
            "message": "Don't forget your 3pm appointment.",
            "scheduled_at": "2026-03-05T15:00:00Z",
            "timezone": "Europe/London",
            "recurrence": {"frequency": "weekly"}
        }
    """

    scheduled_at: datetime = Field(
        ...,
        description="First call time (timezone-aware)"
    )


class ReminderBulkCreate(ReminderBase):
    """
    Schema for creating one reminder per time slot.

    Medication schedules often need several calls a day ("morning and
    evening"); each slot becomes its own reminder sharing the rest.
    """

    time_slots: list[datetime] = Field(
        ...,
        min_length=1,
        max_length=10,
        description="First call time of each reminder"
    )


class ReminderUpdate(BaseModel):
    """
    Schema for updating a reminder. Only provided fields change.

    Changing `recurrence` replaces the whole rule.
    """

    recipient_name: str | None = Field(
        default=None,
        min_length=MIN_RECIPIENT_NAME_LENGTH,
        max_length=MAX_RECIPIENT_NAME_LENGTH,
    )
    phone_number: str | None = None
    message: str | None = Field(
        default=None,
        min_length=MIN_MESSAGE_LENGTH,
        max_length=MAX_MESSAGE_LENGTH,
    )
    voice: VoiceType | None = None
    custom_voice_id: UUID | None = None
    scheduled_at: datetime | None = None
    timezone: str | None = None
    reminder_type: ReminderType | None = None
    recurrence: RecurrenceSettings | None = None
    is_active: bool | None = None

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, v: str | None) -> str | None:
        return validate_phone_number(v) if v is not None else None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str | None) -> str | None:
        return validate_timezone(v) if v is not None else None


class ReminderResponse(BaseModel):
    """
    Schema for returning a reminder to clients.

    Recurrence is returned both flat (as stored) and as a human summary.
    """

    id: UUID
    user_id: UUID
    recipient_name: str
    phone_number: str
    message: str
    voice: VoiceType
    custom_voice_id: UUID | None = None
    scheduled_at: datetime
    timezone: str = "UTC"
    reminder_type: ReminderType = ReminderType.QUICK
    frequency: FrequencyType = FrequencyType.ONCE
    recurrence_interval: int | None = None
    recurrence_days_of_week: list[int] | None = None
    recurrence_day_of_month: int | None = None
    recurrence_week_of_month: int | None = None
    recurrence_day_of_week: int | None = None
    repeat_until: datetime | date | None = None
    max_occurrences: int | None = None
    repeat_count: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    recurrence_summary: str | None = Field(
        default=None,
        description="e.g. 'Every 2 weeks on Tuesday, 5 times'"
    )

    class Config:
        """Pydantic configuration for this model."""
        from_attributes = True


class ReminderList(BaseModel):
    """Schema for listing reminders."""

    reminders: list[ReminderResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


class ReminderSummaryResponse(BaseModel):
    """
    Short descriptions of a reminder for list rows and confirmations.

    Example:
        {
            "reminder_id": "550e8400-...",
            "title": "Medication",
            "recurrence_summary": "Daily, 30 times",
            "next_scheduled_at": "2026-03-05T09:00:00Z",
            "estimated_cost_per_call": 0.14
        }
    """

    reminder_id: UUID
    title: str
    recurrence_summary: str
    next_scheduled_at: datetime | None = None
    estimated_cost_per_call: float | None = None
    currency: str = "USD"


class ReminderDraft(BaseModel):
    """
    A reminder built from a voice transcript, ready to prefill the form.

    The user still reviews and submits it; nothing is saved yet.
    """

    reminder_type: ReminderType
    recipient_name: str | None = None
    phone_number: str | None = None
    message: str = ""
    scheduled_at: datetime | None = None
    timezone: str = "UTC"
    recurrence: RecurrenceSettings = Field(default_factory=RecurrenceSettings)
    recurrence_summary: str | None = None
    confidence_score: float = 0.5
    warnings: list[str] = Field(
        default_factory=list,
        description="Things the user should double-check before saving"
    )
