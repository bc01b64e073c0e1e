# =============================================================================
# agents/prompts/reminder_parser_system.py - Reminder Parser System Prompt
# =============================================================================
# This module contains the system prompt and tool schema for the reminder
# parser agent.
#
# The prompt carries today's date and weekday so relative phrases
# ("tomorrow", "next Monday") resolve against the user's calendar, plus the
# user's known contacts for phone number lookup.
#
# Usage:
#   prompt = build_reminder_parser_prompt(
#       today=date(2026, 3, 5),
#       timezone="Europe/London",
#       contacts=[{"name": "Mom", "phone_number": "+447700900123"}],
#   )
# =============================================================================

from __future__ import annotations

from datetime import date
from typing import Any

TOOL_NAME = "extract_reminder_data"

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# =============================================================================
# Tool Schema
# =============================================================================
# Mirrors agents.models.parsed_reminder.ParsedReminder

REMINDER_EXTRACTION_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Extract structured reminder data from a voice transcript",
        "parameters": {
            "type": "object",
            "properties": {
                "reminder_type": {
                    "type": "string",
                    "enum": ["quick", "medication", "unrelated", "unclear"],
                    "description": (
                        "'medication' for health/medicine reminders, 'quick' for general "
                        "reminders, 'unrelated' if not a reminder request, 'unclear' if "
                        "missing critical info"
                    ),
                },
                "recipient_name": {
                    "type": ["string", "null"],
                    "description": "The name of the person to remind (e.g., 'Grandma', 'Dad', 'Mom')",
                },
                "phone_number": {
                    "type": ["string", "null"],
                    "description": "Phone number if explicitly mentioned, in E.164 format",
                },
                "message": {
                    "type": ["string", "null"],
                    "description": (
                        "For quick reminders: the action or message "
                        "(e.g., 'call Mom', 'pick up groceries')"
                    ),
                },
                "medications": {
                    "type": ["array", "null"],
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {
                                "type": "string",
                                "description": (
                                    "Medication name, including any special instructions in "
                                    "parentheses (e.g., 'Calpol (crushed)')"
                                ),
                            },
                            "quantity": {
                                "type": "number",
                                "description": "Number of units to take, default to 1 if not specified",
                            },
                            "unit": {
                                "type": "string",
                                "enum": ["tablet", "capsule", "ml", "drops", "puff", "unit"],
                                "description": "Unit of measurement, default to 'tablet' if not specified",
                            },
                            "instruction": {
                                "type": "string",
                                "enum": [
                                    "none", "with_food", "with_water", "before_meal",
                                    "after_meal", "empty_stomach", "before_bed",
                                ],
                                "description": "Special instruction for taking the medication",
                            },
                        },
                        "required": ["name", "quantity", "unit", "instruction"],
                    },
                    "description": (
                        "For medication reminders: list of medications. Extract FIRST time "
                        "slot only if multiple times mentioned."
                    ),
                },
                "schedule": {
                    "type": ["object", "null"],
                    "properties": {
                        "start_date": {
                            "type": "string",
                            "description": "ISO date for when to start (YYYY-MM-DD)",
                        },
                        "time": {
                            "type": "string",
                            "description": "Time in HH:mm 24-hour format",
                        },
                        "frequency": {
                            "type": "string",
                            "enum": ["once", "daily", "weekly"],
                            "description": "How often to repeat",
                        },
                        "recurrence_days_of_week": {
                            "type": "array",
                            "items": {"type": "integer"},
                            "description": "Days of week (0=Sun...6=Sat) for weekly reminders",
                        },
                        "repeat_until": {
                            "type": "string",
                            "description": "ISO date for when to stop repeating",
                        },
                        "max_occurrences": {
                            "type": "integer",
                            "description": "Maximum number of times to repeat",
                        },
                    },
                    "required": ["start_date", "time", "frequency"],
                },
                "confidence_score": {
                    "type": "number",
                    "description": (
                        "Confidence in the extraction (0-1). High (0.8-1.0) if all info clear, "
                        "Medium (0.5-0.79) if some defaults applied, Low (0-0.49) if "
                        "significant uncertainty"
                    ),
                },
                "clarification_needed": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": (
                        "Items that need user attention (e.g., 'Phone number not provided', "
                        "'Dosage defaulted to 1 tablet')"
                    ),
                },
                "rejection_reason": {
                    "type": "string",
                    "description": "For unrelated/unclear: why it couldn't be parsed",
                },
                "additional_time_slots_count": {
                    "type": "integer",
                    "description": (
                        "Number of additional time slots mentioned beyond the first one "
                        "(0 if only one time mentioned)"
                    ),
                },
            },
            "required": [
                "reminder_type",
                "confidence_score",
                "clarification_needed",
                "additional_time_slots_count",
            ],
        },
    },
}

# =============================================================================
# Base System Prompt
# =============================================================================

REMINDER_PARSER_SYSTEM_PROMPT = """
<role>
You extract structured reminder data from voice transcripts. Today is {today} ({weekday}). User's timezone: {timezone}.

Always answer by calling the extract_reminder_data tool.
</role>

<classification>
1. medication: Contains medicine/drug names, dosages, health-related reminders (pills, tablets, capsules, injections, etc.)
2. quick: General reminders like calls, appointments, tasks, errands - anything without medication
3. unrelated: Not a reminder at all (questions, conversations, random speech)
4. unclear: Seems like a reminder attempt but missing critical info (no recipient name, no time, etc.)
</classification>

<time_parsing>
- "2pm" → "14:00"
- "morning" → "09:00"
- "afternoon" → "14:00"
- "evening" → "18:00"
- "night" or "bedtime" → "21:00"
- "noon" → "12:00"
- "midnight" → "00:00"
</time_parsing>

<date_parsing>
Relative to today {today}:
- "today" → {today}
- "tomorrow" → the next day
- "next Monday" → the upcoming Monday
- "starting Friday" → the upcoming Friday
- No date mentioned → today
</date_parsing>

<frequency_patterns>
- "every day" or "daily" → frequency: "daily"
- "every week" or "weekly" → frequency: "weekly"
- "weekdays only" → frequency: "weekly", recurrence_days_of_week: [1,2,3,4,5]
- "weekends" → frequency: "weekly", recurrence_days_of_week: [0,6]
- "every Tuesday and Thursday" → frequency: "weekly", recurrence_days_of_week: [2,4]
- "for 5 days" → calculate repeat_until
- "until Friday" → set repeat_until to that date
- No repetition mentioned → frequency: "once"
</frequency_patterns>

<medication_instructions>
- "with food" → "with_food"
- "with water" → "with_water"
- "before eating" or "before meal" → "before_meal"
- "after eating" or "after meal" → "after_meal"
- "empty stomach" → "empty_stomach"
- "before bed" or "at bedtime" → "before_bed"
- No instruction → "none"
</medication_instructions>

<special_cases>
1. Multiple time slots: If the user mentions multiple times (e.g., "at 9am and 2pm and 8pm"):
   - Extract ONLY the FIRST time slot for the schedule
   - Set additional_time_slots_count to the number of extra times (e.g., 2 if 3 times total)
   - Add clarification: "X additional time slots were mentioned. Please create separate reminders for those."

2. Special medication instructions: Merge into the name:
   - "Calpol crushed" → name: "Calpol (crushed)"
   - "NovoSys dissolved in water" → name: "NovoSys (dissolved in water)"

3. Preserve exact names: Keep medication names exactly as spoken. Do NOT correct spelling.

4. Default values when not specified:
   - quantity: 1
   - unit: "tablet"
   - instruction: "none"
   - Add these defaults to clarification_needed

5. Phone number lookup: If recipient name matches a known contact, use their phone number.
</special_cases>

<confidence_scoring>
- High (0.8-1.0): Recipient clear, time clear, action/medications clear
- Medium (0.5-0.79): Some ambiguity, defaults applied
- Low (0-0.49): Significant uncertainty
</confidence_scoring>

<rejection_reasons>
For unrelated/unclear:
- "This doesn't appear to be a reminder request. Try something like 'Remind [name] to [action] at [time]'"
- "I couldn't identify who this reminder is for. Please include a name."
- "I couldn't determine when this reminder should be sent. Please include a time."
</rejection_reasons>
"""


# =============================================================================
# Prompt Builder
# =============================================================================

def format_contacts(contacts: list[dict[str, Any]] | None) -> str:
    """
    Render known contacts as a prompt section.

    Returns an empty string when there are none.
    """
    if not contacts:
        return ""

    lines = [
        f"- {contact.get('name')}: {contact.get('phone_number')}"
        for contact in contacts
        if contact.get("name")
    ]
    if not lines:
        return ""

    return "<known_contacts>\n" + "\n".join(lines) + "\n</known_contacts>\n"


def build_reminder_parser_prompt(
    today: date,
    timezone: str,
    contacts: list[dict[str, Any]] | None = None,
) -> str:
    """
    Build the complete parser system prompt.

    Args:
        today: The user's current date
        timezone: IANA timezone name
        contacts: Known contacts ({"name", "phone_number"}) for lookup

    Returns:
        Complete system prompt string
    """
    # isoweekday: Monday=1 .. Sunday=7
    weekday = DAY_NAMES[today.isoweekday() % 7]

    prompt = REMINDER_PARSER_SYSTEM_PROMPT.format(
        today=today.isoformat(),
        weekday=weekday,
        timezone=timezone,
    )
    return prompt + format_contacts(contacts)
