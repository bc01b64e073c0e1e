# =============================================================================
# lib/recurrence.py - Recurrence Rules and Next-Occurrence Math
# =============================================================================
# Pure calendar arithmetic for repeating reminders:
# - FrequencyConfig: the recurrence descriptor edited in the reminder form
# - Human-readable labels and summaries ("Every 2 weeks on Tuesday")
# - Mapping between FrequencyConfig and the flat recurrence_* columns
# - calculate_next_occurrence(): where a reminder goes after it fires
# - should_continue(): whether a repeating reminder has reached its end
#
# Day-of-week numbers follow the stored convention: 0=Sunday ... 6=Saturday.
# Weekday arithmetic is done in the timezone of the datetime passed in, so
# callers convert UTC timestamps to the reminder's zone first.
#
# Usage:
#   from lib.recurrence import FrequencyConfig, calculate_next_occurrence
#   config = FrequencyConfig.from_db_row(reminder_row)
#   next_at = calculate_next_occurrence(current, config)
# =============================================================================

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Any

from dateutil.relativedelta import relativedelta

from lib.utils import parse_timestamp


# =============================================================================
# Enums
# =============================================================================

class FrequencyType(str, Enum):
    """How often a reminder repeats."""
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    CUSTOM = "custom"


class EndType(str, Enum):
    """When a repeating reminder stops."""
    NEVER = "never"
    ON_DATE = "on_date"
    AFTER_COUNT = "after_count"


class MonthlyType(str, Enum):
    """Monthly anchoring: a calendar day or an ordinal weekday."""
    DAY_OF_MONTH = "day_of_month"
    WEEK_OF_MONTH = "week_of_month"


# =============================================================================
# Constants
# =============================================================================

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DAY_NAMES_FULL = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# Index 5 and -1 both read "last"
WEEK_ORDINALS = ["", "first", "second", "third", "fourth", "last"]

WEEKDAY_NUMBERS = [1, 2, 3, 4, 5]
WEEKEND_NUMBERS = [0, 6]

LAST_WEEK_OF_MONTH = -1

DEFAULT_MAX_OCCURRENCES = 30


# =============================================================================
# FrequencyConfig
# =============================================================================

@dataclass
class FrequencyConfig:
    """
    Recurrence descriptor for a reminder.

    Attributes:
        frequency: Base repetition pattern
        interval: Repeat every N units (days/weeks/months/years)
        days_of_week: Selected weekdays for custom/weekly patterns (0=Sun)
        monthly_type: Anchor monthly repeats to a day or an ordinal weekday
        day_of_month: 1-31, used with DAY_OF_MONTH
        week_of_month: 1-4 or -1 (last), used with WEEK_OF_MONTH
        day_of_week_for_monthly: 0-6, the weekday for "first Monday" style rules
        end_type: When the recurrence stops
        end_date: Last allowed occurrence (ON_DATE)
        max_occurrences: Number of calls before stopping (AFTER_COUNT)
    """
    frequency: FrequencyType = FrequencyType.ONCE
    interval: int = 1
    days_of_week: list[int] | None = None
    monthly_type: MonthlyType | None = None
    day_of_month: int | None = None
    week_of_month: int | None = None
    day_of_week_for_monthly: int | None = None
    end_type: EndType = EndType.NEVER
    end_date: datetime | date | None = None
    max_occurrences: int | None = None

    def __post_init__(self) -> None:
        self.frequency = FrequencyType(self.frequency)
        self.end_type = EndType(self.end_type)
        if self.monthly_type is not None:
            self.monthly_type = MonthlyType(self.monthly_type)
        if not self.interval or self.interval < 1:
            self.interval = 1
        if self.days_of_week is not None:
            for day in self.days_of_week:
                if not 0 <= day <= 6:
                    raise ValueError(f"Day of week must be 0-6, got {day}")
        if self.week_of_month is not None and self.week_of_month not in (1, 2, 3, 4, LAST_WEEK_OF_MONTH):
            raise ValueError(f"Week of month must be 1-4 or -1, got {self.week_of_month}")
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise ValueError(f"Day of month must be 1-31, got {self.day_of_month}")

    @property
    def is_repeating(self) -> bool:
        return self.frequency != FrequencyType.ONCE

    # -------------------------------------------------------------------------
    # Database Mapping
    # -------------------------------------------------------------------------

    def to_db_fields(self) -> dict[str, Any]:
        """
        Convert to the flat recurrence columns on the reminders table.

        Only the fields relevant to the selected monthly/end type are written;
        the others are nulled so stale values never leak into a new rule.
        """
        end_date = None
        if self.end_type == EndType.ON_DATE and self.end_date:
            end_date = self.end_date.isoformat()

        is_week_of_month = self.monthly_type == MonthlyType.WEEK_OF_MONTH

        return {
            "frequency": self.frequency.value,
            "recurrence_interval": self.interval or 1,
            "recurrence_days_of_week": self.days_of_week or None,
            "recurrence_day_of_month": (
                self.day_of_month if self.monthly_type == MonthlyType.DAY_OF_MONTH else None
            ),
            "recurrence_week_of_month": self.week_of_month if is_week_of_month else None,
            "recurrence_day_of_week": self.day_of_week_for_monthly if is_week_of_month else None,
            "repeat_until": end_date,
            "max_occurrences": (
                self.max_occurrences if self.end_type == EndType.AFTER_COUNT else None
            ),
        }

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "FrequencyConfig":
        """
        Build a config from a reminders row.

        End type is derived: repeat_until wins, then max_occurrences, else never.
        Monthly type is derived: a week-of-month value wins over a day-of-month.
        """
        repeat_until = row.get("repeat_until")
        max_occurrences = row.get("max_occurrences")

        if repeat_until:
            end_type = EndType.ON_DATE
        elif max_occurrences:
            end_type = EndType.AFTER_COUNT
        else:
            end_type = EndType.NEVER

        week_of_month = row.get("recurrence_week_of_month")
        day_of_month = row.get("recurrence_day_of_month")

        if week_of_month is not None:
            monthly_type = MonthlyType.WEEK_OF_MONTH
        elif day_of_month is not None:
            monthly_type = MonthlyType.DAY_OF_MONTH
        else:
            monthly_type = None

        return cls(
            frequency=FrequencyType(row.get("frequency") or FrequencyType.ONCE.value),
            interval=row.get("recurrence_interval") or 1,
            days_of_week=row.get("recurrence_days_of_week") or None,
            monthly_type=monthly_type,
            day_of_month=day_of_month or None,
            week_of_month=week_of_month or None,
            day_of_week_for_monthly=row.get("recurrence_day_of_week"),
            end_type=end_type,
            end_date=_parse_end_date(repeat_until),
            max_occurrences=max_occurrences or None,
        )


def config_to_db_fields(config: FrequencyConfig) -> dict[str, Any]:
    """Convert a FrequencyConfig to database fields."""
    return config.to_db_fields()


def db_fields_to_config(row: dict[str, Any]) -> FrequencyConfig:
    """Convert database fields to a FrequencyConfig."""
    return FrequencyConfig.from_db_row(row)


def _parse_end_date(value: Any) -> datetime | date | None:
    """Accept a date, datetime, 'YYYY-MM-DD' or ISO timestamp string."""
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return value
    text = str(value)
    if len(text) == 10:
        return date.fromisoformat(text)
    return parse_timestamp(text)


# =============================================================================
# Weekday Helpers
# =============================================================================

def js_weekday(value: date) -> int:
    """Weekday number with 0=Sunday ... 6=Saturday."""
    return (value.weekday() + 1) % 7


def set_weekday(value: datetime, weekday: int) -> datetime:
    """Move to `weekday` within the same Sunday-start week."""
    return value + timedelta(days=weekday - js_weekday(value))


def nth_weekday_of_month(year: int, month: int, weekday: int, n: int) -> date:
    """
    Date of the n-th `weekday` (0=Sun) in a month; n=-1 means the last one.

    Example:
        nth_weekday_of_month(2026, 3, 1, 1)   # first Monday of March 2026
        nth_weekday_of_month(2026, 3, 5, -1)  # last Friday of March 2026
    """
    days_in_month = calendar.monthrange(year, month)[1]

    if n == LAST_WEEK_OF_MONTH:
        last = date(year, month, days_in_month)
        return last - timedelta(days=(js_weekday(last) - weekday) % 7)

    first = date(year, month, 1)
    offset = (weekday - js_weekday(first)) % 7
    day = 1 + offset + (n - 1) * 7
    if day > days_in_month:
        raise ValueError(f"No {WEEK_ORDINALS[n]} {DAY_NAMES_FULL[weekday]} in {year}-{month:02d}")
    return date(year, month, day)


def ordinal(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 23 -> '23rd'."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _month_day(value: date) -> str:
    return f"{value:%B} {value.day}"


def _short_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


# =============================================================================
# Labels & Summaries
# =============================================================================

def get_preset_label(preset: FrequencyType | str, reference: date) -> str:
    """Label shown in the frequency picker for a preset."""
    preset = FrequencyType(preset)

    if preset == FrequencyType.DAILY:
        return "Daily"
    if preset == FrequencyType.WEEKLY:
        return f"Weekly on {DAY_NAMES_FULL[js_weekday(reference)]}"
    if preset == FrequencyType.MONTHLY:
        return f"Monthly on the {ordinal(reference.day)}"
    if preset == FrequencyType.YEARLY:
        return f"Annually on {_month_day(reference)}"
    if preset == FrequencyType.WEEKDAYS:
        return "Every weekday (Mon-Fri)"
    if preset == FrequencyType.WEEKENDS:
        return "Every weekend (Sat-Sun)"
    if preset == FrequencyType.CUSTOM:
        return "Custom..."
    return "Does not repeat"


def get_recurrence_summary(config: FrequencyConfig, reference: date) -> str:
    """
    Human-readable summary of a recurrence rule.

    Examples:
        "Every 2 weeks on Tuesday"
        "Monthly on the last Friday until Mar 5, 2026"
        "Weekly on Mon, Wed, Fri, 10 times"
    """
    frequency = config.frequency
    interval = config.interval or 1

    if frequency == FrequencyType.ONCE:
        return "Does not repeat"

    if frequency == FrequencyType.DAILY:
        summary = "Daily" if interval == 1 else f"Every {interval} days"

    elif frequency == FrequencyType.WEEKLY:
        day_name = DAY_NAMES_FULL[js_weekday(reference)]
        summary = f"Weekly on {day_name}" if interval == 1 else f"Every {interval} weeks on {day_name}"

    elif frequency == FrequencyType.MONTHLY:
        if (
            config.monthly_type == MonthlyType.WEEK_OF_MONTH
            and config.week_of_month is not None
            and config.day_of_week_for_monthly is not None
        ):
            week = "last" if config.week_of_month == LAST_WEEK_OF_MONTH else WEEK_ORDINALS[config.week_of_month]
            target = f"the {week} {DAY_NAMES_FULL[config.day_of_week_for_monthly]}"
        else:
            target = f"the {ordinal(config.day_of_month or reference.day)}"
        summary = f"Monthly on {target}" if interval == 1 else f"Every {interval} months on {target}"

    elif frequency == FrequencyType.YEARLY:
        day = _month_day(reference)
        summary = f"Annually on {day}" if interval == 1 else f"Every {interval} years on {day}"

    elif frequency == FrequencyType.WEEKDAYS:
        summary = "Every weekday (Mon-Fri)"

    elif frequency == FrequencyType.WEEKENDS:
        summary = "Every weekend (Sat-Sun)"

    else:
        if config.days_of_week:
            names = ", ".join(DAY_NAMES[d] for d in sorted(config.days_of_week))
            summary = f"Weekly on {names}" if interval == 1 else f"Every {interval} weeks on {names}"
        else:
            summary = "Daily" if interval == 1 else f"Every {interval} days"

    if config.end_type == EndType.ON_DATE and config.end_date:
        summary += f" until {_short_date(config.end_date)}"
    elif config.end_type == EndType.AFTER_COUNT and config.max_occurrences:
        plural = "s" if config.max_occurrences > 1 else ""
        summary += f", {config.max_occurrences} time{plural}"

    return summary


# =============================================================================
# Defaults
# =============================================================================

def get_default_config(frequency: FrequencyType | str, reference: date) -> FrequencyConfig:
    """Default FrequencyConfig when a preset is picked for `reference`."""
    frequency = FrequencyType(frequency)
    weekday = js_weekday(reference)

    if frequency in (FrequencyType.DAILY, FrequencyType.YEARLY):
        return FrequencyConfig(frequency=frequency, interval=1)
    if frequency in (FrequencyType.WEEKLY, FrequencyType.CUSTOM):
        return FrequencyConfig(frequency=frequency, interval=1, days_of_week=[weekday])
    if frequency == FrequencyType.MONTHLY:
        return FrequencyConfig(
            frequency=frequency,
            interval=1,
            monthly_type=MonthlyType.DAY_OF_MONTH,
            day_of_month=reference.day,
        )
    if frequency == FrequencyType.WEEKDAYS:
        return FrequencyConfig(frequency=frequency, days_of_week=list(WEEKDAY_NUMBERS))
    if frequency == FrequencyType.WEEKENDS:
        return FrequencyConfig(frequency=frequency, days_of_week=list(WEEKEND_NUMBERS))
    return FrequencyConfig(frequency=FrequencyType.ONCE)


# =============================================================================
# Next Occurrence
# =============================================================================

def calculate_next_occurrence(current: datetime, config: FrequencyConfig) -> datetime | None:
    """
    Calculate when a reminder should fire after `current`.

    Time of day and tzinfo are preserved. Month and year steps clamp to the
    end of shorter months (Jan 31 + 1 month -> Feb 28/29).

    Args:
        current: The occurrence that just fired, in the reminder's timezone
        config: The reminder's recurrence rule

    Returns:
        The next occurrence, or None for one-time reminders
    """
    frequency = config.frequency
    interval = config.interval or 1

    if frequency == FrequencyType.ONCE:
        return None

    if frequency == FrequencyType.DAILY:
        return current + timedelta(days=interval)

    if frequency == FrequencyType.WEEKLY:
        return current + timedelta(weeks=interval)

    if frequency == FrequencyType.MONTHLY:
        return _next_monthly(current, config, interval)

    if frequency == FrequencyType.YEARLY:
        return current + relativedelta(years=interval)

    if frequency == FrequencyType.WEEKDAYS:
        return _next_matching_day(current, WEEKDAY_NUMBERS)

    if frequency == FrequencyType.WEEKENDS:
        return _next_matching_day(current, WEEKEND_NUMBERS)

    # custom
    if config.days_of_week:
        days = sorted(set(config.days_of_week))
        today = js_weekday(current)
        later_this_week = [d for d in days if d > today]
        if later_this_week:
            return set_weekday(current, later_this_week[0])
        return set_weekday(current + timedelta(weeks=interval), days[0])

    return current + timedelta(days=interval)


def _next_monthly(current: datetime, config: FrequencyConfig, interval: int) -> datetime:
    if config.week_of_month is not None:
        target_month = current + relativedelta(months=interval)
        weekday = config.day_of_week_for_monthly
        if weekday is None:
            weekday = js_weekday(current)
        target_day = nth_weekday_of_month(
            target_month.year, target_month.month, weekday, config.week_of_month
        )
        return current.replace(year=target_day.year, month=target_day.month, day=target_day.day)

    if config.day_of_month:
        # relativedelta clamps day=31 to the month's last day
        return current + relativedelta(months=interval, day=config.day_of_month)

    return current + relativedelta(months=interval)


def _next_matching_day(current: datetime, allowed: list[int]) -> datetime:
    candidate = current + timedelta(days=1)
    while js_weekday(candidate) not in allowed:
        candidate += timedelta(days=1)
    return candidate


# =============================================================================
# End Conditions
# =============================================================================

def end_of_day(value: datetime | date, tz: tzinfo | None = None) -> datetime:
    """
    Latest moment covered by an end date.

    Date-only values (as produced by the voice parser) include the whole day
    in the reminder's timezone; datetimes are returned unchanged.
    """
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.max, tzinfo=tz)


def should_continue(
    completed_count: int,
    next_scheduled_at: datetime,
    max_occurrences: int | None = None,
    repeat_until: datetime | date | None = None,
    default_max: int = DEFAULT_MAX_OCCURRENCES,
) -> bool:
    """
    Decide whether a repeating reminder gets another occurrence.

    Args:
        completed_count: Calls made so far, including the one just placed
        next_scheduled_at: Candidate next occurrence
        max_occurrences: Explicit cap on total calls (None for no cap)
        repeat_until: Last allowed occurrence date
        default_max: Safety cap applied when no explicit max is set

    Returns:
        True if the reminder should be rescheduled
    """
    if max_occurrences is not None and completed_count >= max_occurrences:
        return False

    if repeat_until is not None:
        bound = end_of_day(repeat_until, next_scheduled_at.tzinfo)
        if next_scheduled_at > bound:
            return False

    if max_occurrences is None and completed_count >= default_max:
        return False

    return True


__all__ = [
    "FrequencyType",
    "EndType",
    "MonthlyType",
    "FrequencyConfig",
    "DAY_NAMES",
    "DAY_NAMES_FULL",
    "DEFAULT_MAX_OCCURRENCES",
    "config_to_db_fields",
    "db_fields_to_config",
    "js_weekday",
    "set_weekday",
    "nth_weekday_of_month",
    "ordinal",
    "get_preset_label",
    "get_recurrence_summary",
    "get_default_config",
    "calculate_next_occurrence",
    "end_of_day",
    "should_continue",
]
