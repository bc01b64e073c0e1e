# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# This package contains system prompts for each agent:
# - reminder_parser_system.py: Reminder parser prompt and extraction tool
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.reminder_parser_system import (
    REMINDER_EXTRACTION_TOOL,
    REMINDER_PARSER_SYSTEM_PROMPT,
    TOOL_NAME,
    build_reminder_parser_prompt,
)

__all__ = [
    "REMINDER_EXTRACTION_TOOL",
    "REMINDER_PARSER_SYSTEM_PROMPT",
    "TOOL_NAME",
    "build_reminder_parser_prompt",
]
