# =============================================================================
# app/routers/voices.py - Custom Voice Endpoints
# =============================================================================
# One cloned "familiar voice" per user:
# - GET    /voices/me: the user's voice, if any
# - POST   /voices: clone from a multipart recording
# - POST   /voices/base64: clone from a base64 recording (JSON body)
# - DELETE /voices/{id}: delete; reminders fall back to a preset voice
# - POST   /voices/{id}/preview: hear a short sample
#
# All endpoints require authentication.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile

from app.auth import get_current_user, AuthUser
from app.config import settings
from app.exceptions import VoiceNotFoundError, VoiceSampleError
from core.models.voice import UserVoiceResponse, VoiceCreateBase64, VoicePreviewResponse
from core.services.voice_service import VoiceService, decode_audio_base64

logger = logging.getLogger(__name__)

router = APIRouter()

VoiceId = Annotated[UUID, Path(description="Voice UUID")]


@router.get("/me", response_model=UserVoiceResponse)
async def get_my_voice(user: AuthUser = Depends(get_current_user)):
    """
    Get the user's custom voice.

    Raises:
        404: If the user has not created one
    """
    voice = VoiceService.get_user_voice(user.id)
    if not voice:
        raise VoiceNotFoundError()
    return UserVoiceResponse(**voice)


@router.post("", response_model=UserVoiceResponse, status_code=201)
async def create_voice(
    name: Annotated[str, Form(description="Display name, 1-50 characters")],
    audio: Annotated[UploadFile, File(description="webm recording of the user's voice")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Clone a voice from a multipart upload.

    Cloning runs synchronously; the response has status "ready".
    """
    # Read one byte past the limit so oversized uploads are rejected without
    # buffering the whole file
    content = await audio.read(settings.max_voice_sample_bytes + 1)
    if not content:
        raise VoiceSampleError("Missing audio file")

    logger.info(f"Received voice sample: {len(content)} bytes, {audio.content_type}")
    voice = VoiceService.create_voice(user.id, content, name)
    return UserVoiceResponse(**voice)


@router.post("/base64", response_model=UserVoiceResponse, status_code=201)
async def create_voice_base64(
    request: VoiceCreateBase64,
    user: AuthUser = Depends(get_current_user),
):
    """
    Clone a voice from a base64-encoded recording.
    """
    content = decode_audio_base64(request.audio_base64)
    voice = VoiceService.create_voice(user.id, content, request.name)
    return UserVoiceResponse(**voice)


@router.delete("/{voice_id}", status_code=204)
async def delete_voice(
    voice_id: VoiceId,
    user: AuthUser = Depends(get_current_user),
):
    VoiceService.delete_voice(user.id, voice_id)


@router.post("/{voice_id}/preview", response_model=VoicePreviewResponse)
async def preview_voice(
    voice_id: VoiceId,
    user: AuthUser = Depends(get_current_user),
):
    """
    Render "This is a small reminder to smile today." in the voice.

    Returns base64 MP3 audio.
    """
    return VoiceService.preview_voice(user.id, voice_id)
