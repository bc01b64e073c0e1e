# =============================================================================
# agents/reminder_parser.py - Voice Reminder Parser Agent
# =============================================================================
# This module turns a dictated transcript into a structured ParsedReminder.
#
# The parser's job:
# 1. Build a system prompt with today's date, the user's timezone and their
#    known contacts
# 2. Ask OpenAI for exactly one extract_reminder_data tool call
# 3. Validate the tool arguments into a ParsedReminder, applying defaults
# 4. Fill the phone number from a matching contact when none was spoken
#
# Usage:
#   from agents.reminder_parser import ReminderParserAgent
#   agent = ReminderParserAgent()
#   parsed = agent.parse("Remind Mom to call the dentist tomorrow at 2pm",
#                        timezone="Europe/London", contacts=contacts)
# =============================================================================

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from openai import OpenAI
from pydantic import ValidationError

from app.config import settings
from agents.models.parsed_reminder import ParsedReminder
from agents.prompts.reminder_parser_system import (
    REMINDER_EXTRACTION_TOOL,
    TOOL_NAME,
    build_reminder_parser_prompt,
)

logger = logging.getLogger(__name__)

MAX_TOKENS = 1024


# =============================================================================
# Exceptions
# =============================================================================

class ParseError(Exception):
    """
    Error while parsing a transcript.

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        status_code: HTTP status the API should answer with
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "PARSE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


# =============================================================================
# Helpers
# =============================================================================

def find_contact_by_name(
    contacts: list[dict[str, Any]] | None,
    name: str | None,
) -> dict[str, Any] | None:
    """Case-insensitive exact match on contact name."""
    if not contacts or not name:
        return None
    wanted = name.strip().lower()
    for contact in contacts:
        if (contact.get("name") or "").strip().lower() == wanted:
            return contact
    return None


def today_in_timezone(timezone: str) -> date:
    """The current date for the user, UTC if the timezone is unknown."""
    try:
        return datetime.now(ZoneInfo(timezone)).date()
    except (ZoneInfoNotFoundError, ValueError):
        return datetime.now(ZoneInfo("UTC")).date()


def apply_defaults(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Fill the fields the model may leave out or null.

    Missing type → "unclear", confidence → 0.5, no clarifications,
    no extra time slots.
    """
    data = {key: value for key, value in arguments.items() if value is not None}
    data.setdefault("reminder_type", "unclear")
    data.setdefault("confidence_score", 0.5)
    data.setdefault("clarification_needed", [])
    data.setdefault("additional_time_slots_count", 0)
    return data


# =============================================================================
# Reminder Parser Agent
# =============================================================================

class ReminderParserAgent:
    """
    Extracts reminders from voice transcripts with a forced tool call.

    Example:
        agent = ReminderParserAgent()
        parsed = agent.parse(
            "Remind Grandma to take 2 Calpol with food every day at 9am",
            timezone="Europe/London",
        )
        print(parsed.reminder_type)  # "medication"
        print(parsed.schedule.time)  # "09:00"

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature (default 0 for consistency)
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        client: OpenAI | None = None,
    ):
        if client is None and not settings.OPENAI_API_KEY:
            raise ParseError(
                message="OPENAI_API_KEY is not configured",
                code="CONFIGURATION_ERROR",
                suggestion="Set OPENAI_API_KEY in the server environment",
            )
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.PARSER_TEMPERATURE

        logger.info(f"ReminderParserAgent initialized with model={self.model}, temp={self.temperature}")

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def parse(
        self,
        transcript: str,
        timezone: str = "UTC",
        contacts: list[dict[str, Any]] | None = None,
        today: date | None = None,
    ) -> ParsedReminder:
        """
        Parse a transcript into a ParsedReminder.

        Args:
            transcript: What the user said
            timezone: The user's IANA timezone
            contacts: Known contacts ({"name", "phone_number"})
            today: The user's current date (defaults to now in timezone)

        Returns:
            ParsedReminder; unrelated or unclear transcripts are returned
            with their rejection_reason, not raised

        Raises:
            ParseError: If the transcript is empty, the model call fails or
                the model does not call the extraction tool
        """
        if not transcript or not transcript.strip():
            raise ParseError(
                message="No transcript provided",
                code="EMPTY_TRANSCRIPT",
                status_code=400,
                suggestion="Record again and speak clearly",
            )

        transcript = transcript.strip()
        today = today or today_in_timezone(timezone)
        logger.info(
            f"Parsing transcript ({len(transcript)} chars, tz={timezone}, "
            f"contacts={len(contacts or [])})"
        )

        messages = self._build_messages(transcript, timezone, contacts, today)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                max_tokens=MAX_TOKENS,
                messages=messages,
                tools=[REMINDER_EXTRACTION_TOOL],
                tool_choice={"type": "function", "function": {"name": TOOL_NAME}},
            )
        except Exception as e:
            raise ParseError(
                message=f"OpenAI API call failed: {e}",
                code="OPENAI_ERROR",
                status_code=502,
                suggestion="Check your OPENAI_API_KEY and network connection",
                details={"model": self.model},
            )

        arguments = self._extract_tool_arguments(response)
        parsed = self._validate(arguments)
        parsed = self._lookup_phone_number(parsed, contacts)

        logger.info(
            f"Parsed reminder: type={parsed.reminder_type.value}, "
            f"confidence={parsed.confidence_score}"
        )
        return parsed

    # -------------------------------------------------------------------------
    # Message Building
    # -------------------------------------------------------------------------

    def _build_messages(
        self,
        transcript: str,
        timezone: str,
        contacts: list[dict[str, Any]] | None,
        today: date,
    ) -> list[dict[str, str]]:
        system_prompt = build_reminder_parser_prompt(today, timezone, contacts)
        return [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": f'Extract reminder data from this voice transcript:\n\n"{transcript}"',
            },
        ]

    # -------------------------------------------------------------------------
    # Response Parsing
    # -------------------------------------------------------------------------

    def _extract_tool_arguments(self, response: Any) -> dict[str, Any]:
        """
        Pull the extract_reminder_data arguments out of a completion.

        Raises:
            ParseError: If there is no such tool call or its arguments are not JSON
        """
        message = response.choices[0].message if response.choices else None
        tool_calls = getattr(message, "tool_calls", None) or []

        tool_call = next(
            (call for call in tool_calls if call.function.name == TOOL_NAME),
            None,
        )
        if tool_call is None:
            raise ParseError(
                message="No tool call in model response",
                code="NO_TOOL_CALL",
                status_code=502,
                suggestion="Try again; the model did not return structured data",
            )

        raw = tool_call.function.arguments or "{}"
        logger.debug(f"Tool arguments received ({len(raw)} chars)")
        try:
            arguments = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(
                message=f"Invalid JSON in tool arguments: {e}",
                code="JSON_PARSE_ERROR",
                status_code=502,
                details={"raw_arguments": raw[:500]},
            )

        if not isinstance(arguments, dict):
            raise ParseError(
                message="Tool arguments must be a JSON object",
                code="JSON_PARSE_ERROR",
                status_code=502,
                details={"raw_arguments": raw[:500]},
            )
        return arguments

    def _validate(self, arguments: dict[str, Any]) -> ParsedReminder:
        try:
            return ParsedReminder.model_validate(apply_defaults(arguments))
        except ValidationError as e:
            errors = [f"{err['loc']}: {err['msg']}" for err in e.errors()]
            raise ParseError(
                message=f"Invalid reminder structure: {'; '.join(errors)}",
                code="VALIDATION_ERROR",
                status_code=502,
                suggestion="Try rephrasing: 'Remind [name] to [action] at [time]'",
                details={"raw_data": arguments},
            )

    # -------------------------------------------------------------------------
    # Post-Processing
    # -------------------------------------------------------------------------

    def _lookup_phone_number(
        self,
        parsed: ParsedReminder,
        contacts: list[dict[str, Any]] | None,
    ) -> ParsedReminder:
        """Use a known contact's number when the transcript named them but gave none."""
        if parsed.phone_number or not parsed.recipient_name:
            return parsed

        contact = find_contact_by_name(contacts, parsed.recipient_name)
        if not contact or not contact.get("phone_number"):
            return parsed

        logger.debug(f"Matched recipient '{parsed.recipient_name}' to a known contact")
        return parsed.model_copy(update={"phone_number": contact["phone_number"]})
