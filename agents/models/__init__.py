# =============================================================================
# agents/models/ - Agent Output Schemas
# =============================================================================
# This package contains Pydantic models that define what the agents produce:
# - parsed_reminder.py: ParsedReminder schema (parser -> form service contract)
# =============================================================================

from agents.models.parsed_reminder import (
    ParsedReminderType,
    ParsedFrequency,
    MedicationUnit,
    MedicationInstruction,
    ParsedMedication,
    ParsedSchedule,
    ParsedReminder,
)

__all__ = [
    "ParsedReminderType",
    "ParsedFrequency",
    "MedicationUnit",
    "MedicationInstruction",
    "ParsedMedication",
    "ParsedSchedule",
    "ParsedReminder",
]
