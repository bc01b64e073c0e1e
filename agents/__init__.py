# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the voice reminder parser:
# - reminder_parser.py: Turns a dictated transcript into a ParsedReminder
#
# Models:
# - models/parsed_reminder.py: ParsedReminder schema (parser -> form service)
#
# Prompts:
# - prompts/reminder_parser_system.py: System prompt and extraction tool
# =============================================================================

from agents.reminder_parser import ReminderParserAgent, ParseError
from agents.models.parsed_reminder import (
    ParsedReminder,
    ParsedReminderType,
    ParsedMedication,
    ParsedSchedule,
)

__all__ = [
    # Agent
    "ReminderParserAgent",
    "ParseError",
    # Models
    "ParsedReminder",
    "ParsedReminderType",
    "ParsedMedication",
    "ParsedSchedule",
]
