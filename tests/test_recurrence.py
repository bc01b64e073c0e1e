# =============================================================================
# tests/test_recurrence.py - Recurrence Math Tests
# =============================================================================
# Unit tests for lib/recurrence.py:
# - Next occurrence for every frequency
# - Month-end clamping and leap years
# - End conditions (count, end date, safety cap)
# - Human-readable summaries and labels
# - Mapping to and from the reminders table columns
#
# Reference dates: 2026-03-02 is a Monday, 2026-03-31 is a Tuesday.
# =============================================================================

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from lib.recurrence import (
    EndType,
    FrequencyConfig,
    FrequencyType,
    MonthlyType,
    calculate_next_occurrence,
    config_to_db_fields,
    db_fields_to_config,
    get_default_config,
    get_preset_label,
    get_recurrence_summary,
    js_weekday,
    nth_weekday_of_month,
    ordinal,
    should_continue,
)


def at(year, month, day, hour=9, minute=0, tz=timezone.utc):
    return datetime(year, month, day, hour, minute, tzinfo=tz)


# =============================================================================
# Next Occurrence
# =============================================================================

class TestNextOccurrence:
    """Tests for calculate_next_occurrence()."""

    def test_once_has_no_next(self):
        config = FrequencyConfig(frequency=FrequencyType.ONCE)
        assert calculate_next_occurrence(at(2026, 3, 2), config) is None

    def test_daily(self):
        config = FrequencyConfig(frequency=FrequencyType.DAILY)
        assert calculate_next_occurrence(at(2026, 3, 2), config) == at(2026, 3, 3)

    def test_daily_with_interval(self):
        config = FrequencyConfig(frequency=FrequencyType.DAILY, interval=3)
        assert calculate_next_occurrence(at(2026, 3, 30), config) == at(2026, 4, 2)

    def test_every_two_weeks(self):
        config = FrequencyConfig(frequency=FrequencyType.WEEKLY, interval=2)
        assert calculate_next_occurrence(at(2026, 3, 3), config) == at(2026, 3, 17)

    def test_monthly_day_31_clamps_to_february(self):
        """Jan 31 + 1 month lands on Feb 28 in a non-leap year."""
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            monthly_type=MonthlyType.DAY_OF_MONTH,
            day_of_month=31,
        )
        assert calculate_next_occurrence(at(2026, 1, 31), config) == at(2026, 2, 28)

    def test_monthly_day_31_recovers_after_short_month(self):
        """The anchor day is kept, so Feb 28 moves on to Mar 31."""
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            monthly_type=MonthlyType.DAY_OF_MONTH,
            day_of_month=31,
        )
        assert calculate_next_occurrence(at(2026, 2, 28), config) == at(2026, 3, 31)

    def test_monthly_first_monday(self):
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            monthly_type=MonthlyType.WEEK_OF_MONTH,
            week_of_month=1,
            day_of_week_for_monthly=1,
        )
        assert calculate_next_occurrence(at(2026, 3, 2), config) == at(2026, 4, 6)

    def test_monthly_last_friday(self):
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            monthly_type=MonthlyType.WEEK_OF_MONTH,
            week_of_month=-1,
            day_of_week_for_monthly=5,
        )
        assert calculate_next_occurrence(at(2026, 3, 27), config) == at(2026, 4, 24)

    def test_yearly_from_leap_day(self):
        config = FrequencyConfig(frequency=FrequencyType.YEARLY)
        assert calculate_next_occurrence(at(2024, 2, 29), config) == at(2025, 2, 28)

    def test_weekdays_skip_weekend(self):
        """Friday moves to Monday."""
        config = FrequencyConfig(frequency=FrequencyType.WEEKDAYS)
        assert calculate_next_occurrence(at(2026, 3, 6), config) == at(2026, 3, 9)

    def test_weekends_saturday_to_sunday(self):
        config = FrequencyConfig(frequency=FrequencyType.WEEKENDS)
        assert calculate_next_occurrence(at(2026, 3, 7), config) == at(2026, 3, 8)

    def test_weekends_sunday_to_saturday(self):
        config = FrequencyConfig(frequency=FrequencyType.WEEKENDS)
        assert calculate_next_occurrence(at(2026, 3, 8), config) == at(2026, 3, 14)

    def test_custom_days_later_this_week(self):
        """Mon/Wed/Fri from Monday goes to Wednesday."""
        config = FrequencyConfig(frequency=FrequencyType.CUSTOM, days_of_week=[5, 1, 3])
        assert calculate_next_occurrence(at(2026, 3, 2), config) == at(2026, 3, 4)

    def test_custom_days_wraps_to_next_week(self):
        """Mon/Wed/Fri from Friday goes to the following Monday."""
        config = FrequencyConfig(frequency=FrequencyType.CUSTOM, days_of_week=[1, 3, 5])
        assert calculate_next_occurrence(at(2026, 3, 6), config) == at(2026, 3, 9)

    def test_custom_days_wrap_respects_interval(self):
        config = FrequencyConfig(frequency=FrequencyType.CUSTOM, interval=2, days_of_week=[1, 3, 5])
        assert calculate_next_occurrence(at(2026, 3, 6), config) == at(2026, 3, 16)

    def test_custom_without_days_acts_daily(self):
        config = FrequencyConfig(frequency=FrequencyType.CUSTOM, interval=2)
        assert calculate_next_occurrence(at(2026, 3, 2), config) == at(2026, 3, 4)

    def test_time_and_timezone_preserved(self):
        tz = ZoneInfo("America/New_York")
        config = FrequencyConfig(frequency=FrequencyType.DAILY)
        result = calculate_next_occurrence(at(2026, 3, 7, 8, 30, tz=tz), config)

        assert result.tzinfo is tz
        assert (result.hour, result.minute) == (8, 30)
        assert result.date() == date(2026, 3, 8)


# =============================================================================
# Next Occurrence Across a Month of Start Dates
# =============================================================================

JANUARY_2026 = [at(2026, 1, day) for day in range(1, 32)]

REPEATING_CONFIGS = {
    "daily": FrequencyConfig(frequency=FrequencyType.DAILY),
    "every_2_days": FrequencyConfig(frequency=FrequencyType.DAILY, interval=2),
    "weekly": FrequencyConfig(frequency=FrequencyType.WEEKLY),
    "every_2_weeks": FrequencyConfig(frequency=FrequencyType.WEEKLY, interval=2),
    "monthly_day_31": FrequencyConfig(
        frequency=FrequencyType.MONTHLY,
        monthly_type=MonthlyType.DAY_OF_MONTH,
        day_of_month=31,
    ),
    "monthly_last_friday": FrequencyConfig(
        frequency=FrequencyType.MONTHLY,
        monthly_type=MonthlyType.WEEK_OF_MONTH,
        week_of_month=-1,
        day_of_week_for_monthly=5,
    ),
    "every_2_months_first_sunday": FrequencyConfig(
        frequency=FrequencyType.MONTHLY,
        interval=2,
        monthly_type=MonthlyType.WEEK_OF_MONTH,
        week_of_month=1,
        day_of_week_for_monthly=0,
    ),
    "yearly": FrequencyConfig(frequency=FrequencyType.YEARLY),
    "weekdays": FrequencyConfig(frequency=FrequencyType.WEEKDAYS),
    "weekends": FrequencyConfig(frequency=FrequencyType.WEEKENDS),
    "custom_tue_sat": FrequencyConfig(frequency=FrequencyType.CUSTOM, days_of_week=[2, 6]),
    "custom_sunday_every_2_weeks": FrequencyConfig(
        frequency=FrequencyType.CUSTOM, interval=2, days_of_week=[0]
    ),
}


class TestNextOccurrenceAlwaysAdvances:
    """Every repeating rule moves forward from any start day in the month."""

    @pytest.mark.parametrize("start", JANUARY_2026, ids=lambda d: d.date().isoformat())
    @pytest.mark.parametrize("name", sorted(REPEATING_CONFIGS))
    def test_next_is_later(self, name, start):
        config = REPEATING_CONFIGS[name]
        result = calculate_next_occurrence(start, config)

        assert result is not None
        assert result > start
        assert (result.hour, result.minute) == (start.hour, start.minute)

    @pytest.mark.parametrize("start", JANUARY_2026, ids=lambda d: d.date().isoformat())
    def test_weekdays_land_on_monday_to_friday(self, start):
        result = calculate_next_occurrence(start, REPEATING_CONFIGS["weekdays"])
        assert result.weekday() < 5
        assert (result - start).days <= 3

    @pytest.mark.parametrize("start", JANUARY_2026, ids=lambda d: d.date().isoformat())
    def test_weekends_land_on_saturday_or_sunday(self, start):
        result = calculate_next_occurrence(start, REPEATING_CONFIGS["weekends"])
        assert result.weekday() >= 5
        assert (result - start).days <= 6

    @pytest.mark.parametrize("start", JANUARY_2026, ids=lambda d: d.date().isoformat())
    @pytest.mark.parametrize("name", ["custom_tue_sat", "custom_sunday_every_2_weeks"])
    def test_custom_lands_on_selected_days(self, name, start):
        config = REPEATING_CONFIGS[name]
        result = calculate_next_occurrence(start, config)
        assert js_weekday(result) in config.days_of_week

    @pytest.mark.parametrize("start", JANUARY_2026, ids=lambda d: d.date().isoformat())
    def test_monthly_last_friday_lands_in_last_week(self, start):
        result = calculate_next_occurrence(start, REPEATING_CONFIGS["monthly_last_friday"])
        assert js_weekday(result) == 5
        assert result.month == 2
        assert (result + timedelta(weeks=1)).month == 3


# =============================================================================
# Calendar Helpers
# =============================================================================

class TestCalendarHelpers:
    """Tests for weekday and ordinal helpers."""

    def test_js_weekday_sunday_is_zero(self):
        assert js_weekday(date(2026, 3, 1)) == 0
        assert js_weekday(date(2026, 3, 7)) == 6

    def test_nth_weekday(self):
        assert nth_weekday_of_month(2026, 3, 1, 1) == date(2026, 3, 2)
        assert nth_weekday_of_month(2026, 3, 5, -1) == date(2026, 3, 27)

    def test_missing_fifth_weekday_raises(self):
        with pytest.raises(ValueError):
            nth_weekday_of_month(2026, 2, 0, 5)

    @pytest.mark.parametrize("n,expected", [
        (1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"),
        (11, "11th"), (12, "12th"), (13, "13th"), (21, "21st"), (23, "23rd"),
    ])
    def test_ordinal(self, n, expected):
        assert ordinal(n) == expected


# =============================================================================
# End Conditions
# =============================================================================

class TestShouldContinue:
    """Tests for should_continue()."""

    def test_stops_at_max_occurrences(self):
        assert should_continue(3, at(2026, 3, 5), max_occurrences=3) is False
        assert should_continue(2, at(2026, 3, 5), max_occurrences=3) is True

    def test_end_date_includes_whole_day(self):
        until = date(2026, 3, 10)
        assert should_continue(1, at(2026, 3, 10, 21), repeat_until=until) is True
        assert should_continue(1, at(2026, 3, 11, 9), repeat_until=until) is False

    def test_end_datetime_compared_exactly(self):
        until = at(2026, 3, 10, 9)
        assert should_continue(1, at(2026, 3, 10, 9), repeat_until=until) is True
        assert should_continue(1, at(2026, 3, 10, 10), repeat_until=until) is False

    def test_default_cap_without_explicit_max(self):
        assert should_continue(29, at(2026, 3, 5)) is True
        assert should_continue(30, at(2026, 3, 5)) is False

    def test_explicit_max_overrides_default_cap(self):
        assert should_continue(45, at(2026, 3, 5), max_occurrences=100) is True


# =============================================================================
# Summaries & Labels
# =============================================================================

class TestSummaries:
    """Tests for get_recurrence_summary() and get_preset_label()."""

    def test_once(self):
        config = FrequencyConfig()
        assert get_recurrence_summary(config, date(2026, 3, 3)) == "Does not repeat"

    def test_every_two_weeks(self):
        config = FrequencyConfig(frequency=FrequencyType.WEEKLY, interval=2)
        assert get_recurrence_summary(config, date(2026, 3, 3)) == "Every 2 weeks on Tuesday"

    def test_monthly_last_friday_until(self):
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            monthly_type=MonthlyType.WEEK_OF_MONTH,
            week_of_month=-1,
            day_of_week_for_monthly=5,
            end_type=EndType.ON_DATE,
            end_date=date(2026, 3, 5),
        )
        summary = get_recurrence_summary(config, date(2026, 1, 30))
        assert summary == "Monthly on the last Friday until Mar 5, 2026"

    def test_custom_days_with_count(self):
        config = FrequencyConfig(
            frequency=FrequencyType.CUSTOM,
            days_of_week=[5, 1, 3],
            end_type=EndType.AFTER_COUNT,
            max_occurrences=10,
        )
        assert get_recurrence_summary(config, date(2026, 3, 2)) == "Weekly on Mon, Wed, Fri, 10 times"

    def test_single_occurrence_not_pluralized(self):
        config = FrequencyConfig(
            frequency=FrequencyType.DAILY,
            end_type=EndType.AFTER_COUNT,
            max_occurrences=1,
        )
        assert get_recurrence_summary(config, date(2026, 3, 2)) == "Daily, 1 time"

    def test_monthly_day_of_month(self):
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            interval=3,
            monthly_type=MonthlyType.DAY_OF_MONTH,
            day_of_month=22,
        )
        assert get_recurrence_summary(config, date(2026, 3, 2)) == "Every 3 months on the 22nd"

    def test_preset_labels(self):
        reference = date(2026, 3, 2)
        assert get_preset_label("weekly", reference) == "Weekly on Monday"
        assert get_preset_label("monthly", reference) == "Monthly on the 2nd"
        assert get_preset_label("yearly", reference) == "Annually on March 2"
        assert get_preset_label("once", reference) == "Does not repeat"


# =============================================================================
# FrequencyConfig
# =============================================================================

class TestFrequencyConfig:
    """Tests for FrequencyConfig validation and database mapping."""

    def test_invalid_day_of_week(self):
        with pytest.raises(ValueError):
            FrequencyConfig(frequency=FrequencyType.CUSTOM, days_of_week=[7])

    def test_invalid_week_of_month(self):
        with pytest.raises(ValueError):
            FrequencyConfig(frequency=FrequencyType.MONTHLY, week_of_month=5)

    def test_interval_below_one_coerced(self):
        assert FrequencyConfig(frequency=FrequencyType.DAILY, interval=0).interval == 1

    def test_to_db_fields_drops_irrelevant_values(self):
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            monthly_type=MonthlyType.DAY_OF_MONTH,
            day_of_month=15,
            week_of_month=2,
            day_of_week_for_monthly=3,
            end_type=EndType.NEVER,
            max_occurrences=5,
        )
        fields = config.to_db_fields()

        assert fields["frequency"] == "monthly"
        assert fields["recurrence_day_of_month"] == 15
        assert fields["recurrence_week_of_month"] is None
        assert fields["recurrence_day_of_week"] is None
        assert fields["max_occurrences"] is None
        assert fields["repeat_until"] is None

    def test_from_db_row_derives_types(self):
        row = {
            "frequency": "monthly",
            "recurrence_interval": 2,
            "recurrence_week_of_month": -1,
            "recurrence_day_of_week": 5,
            "repeat_until": "2026-06-30",
            "max_occurrences": 12,
        }
        config = FrequencyConfig.from_db_row(row)

        assert config.monthly_type == MonthlyType.WEEK_OF_MONTH
        assert config.end_type == EndType.ON_DATE
        assert config.end_date == date(2026, 6, 30)
        assert config.interval == 2

    def test_from_db_row_defaults_to_once(self):
        config = FrequencyConfig.from_db_row({})
        assert config.frequency == FrequencyType.ONCE
        assert config.end_type == EndType.NEVER

    def test_default_config_for_weekdays(self):
        config = get_default_config("weekdays", date(2026, 3, 2))
        assert config.days_of_week == [1, 2, 3, 4, 5]

    def test_default_config_for_monthly_uses_reference_day(self):
        config = get_default_config("monthly", date(2026, 3, 17))
        assert config.monthly_type == MonthlyType.DAY_OF_MONTH
        assert config.day_of_month == 17

    def test_db_fields_round_trip_keeps_rule(self):
        config = FrequencyConfig(
            frequency=FrequencyType.MONTHLY,
            monthly_type=MonthlyType.DAY_OF_MONTH,
            day_of_month=31,
            end_type=EndType.AFTER_COUNT,
            max_occurrences=6,
        )

        fields = config_to_db_fields(config)
        assert fields["recurrence_day_of_month"] == 31
        assert fields["recurrence_week_of_month"] is None
        assert fields["repeat_until"] is None

        restored = db_fields_to_config(fields)
        assert restored.monthly_type == MonthlyType.DAY_OF_MONTH
        assert restored.day_of_month == 31
        assert restored.end_type == EndType.AFTER_COUNT
        assert restored.max_occurrences == 6
