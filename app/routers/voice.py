# =============================================================================
# app/routers/voice.py - Voice Dictation Endpoints
# =============================================================================
# Turns a dictated transcript into a reminder draft:
#
#   transcript -> ReminderParserAgent -> ParsedReminder
#              -> build_reminder_draft -> ReminderDraft (prefills the form)
#
# The transcript itself comes from the /ws/transcribe relay.
# Requires authentication.
# =============================================================================

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from agents.models.parsed_reminder import ParsedReminder
from app.auth import get_current_user, AuthUser
from app.dependencies import ParserDep
from core.models.reminder import ReminderDraft, validate_timezone
from core.services.contact_service import ContactService
from core.services.voice_form_service import build_reminder_draft

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class VoiceParseRequest(BaseModel):
    """Transcript to parse."""
    transcript: str = Field(
        ...,
        max_length=5000,
        example="Remind Grandma to take 2 Calpol with food every day at 9am",
    )
    timezone: str = Field(default="UTC", example="Europe/London")

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        return validate_timezone(v)


class VoiceParseResponse(BaseModel):
    """Parsed reminder plus the form draft built from it."""
    parsed: ParsedReminder
    draft: ReminderDraft
    raw_transcript: str


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/parse", response_model=VoiceParseResponse)
async def parse_voice_reminder(
    request: VoiceParseRequest,
    parser: ParserDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Parse a transcript into a reminder draft.

    The user's contacts are passed to the parser so "remind Mom" picks up
    Mom's saved number.

    Raises:
        400: Empty transcript
        422: Transcript is not a reminder, or is missing who/when
        502: The language model failed
    """
    logger.info(f"Parsing voice transcript for user {user.id} ({len(request.transcript)} chars)")
    contacts = ContactService.list_contacts(user.id)

    parsed = parser.parse(
        request.transcript,
        timezone=request.timezone,
        contacts=[
            {"name": c.get("name"), "phone_number": c.get("phone_number")}
            for c in contacts
        ],
    )

    draft = build_reminder_draft(parsed, request.timezone)

    return VoiceParseResponse(
        parsed=parsed,
        draft=draft,
        raw_transcript=request.transcript,
    )
