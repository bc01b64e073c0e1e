# =============================================================================
# core/models/voice.py - Custom Voice Schemas
# =============================================================================
# A user can clone one "familiar voice" from a short recording. The clone is
# created at ElevenLabs; the user_voices row tracks its state.
#
# Status flow:
#   processing -> ready
#   processing -> failed
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

PENDING_PROVIDER_VOICE_ID = "pending"

MAX_VOICE_NAME_LENGTH = 50


class VoiceStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class VoiceCreateBase64(BaseModel):
    """
    JSON alternative to the multipart upload.

    Example:
        {"name": "Grandma", "audio_base64": "GkXfo59ChoEBQveBAULy..."}
    """

    name: str = Field(..., min_length=1, max_length=MAX_VOICE_NAME_LENGTH)
    audio_base64: str = Field(..., min_length=1, description="Base64-encoded webm recording")


class UserVoiceResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    status: VoiceStatus
    elevenlabs_voice_id: str | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class VoicePreviewResponse(BaseModel):
    """Short sample rendered in the user's voice."""

    audio_base64: str
    content_type: str = "audio/mpeg"
    text: str
