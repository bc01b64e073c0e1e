# =============================================================================
# core/services/voice_service.py - Custom Voice Business Logic
# =============================================================================
# Manages the user's cloned "familiar voice":
# - create_voice: record a processing row, clone at ElevenLabs, mark ready
# - delete_voice: remove at ElevenLabs, move reminders back to a preset voice
# - preview_voice: render a short sample sentence in the cloned voice
#
# A user has at most one custom voice.
# =============================================================================

import base64
import logging
from typing import Any
from uuid import UUID

from lib.speech import DEFAULT_VOICE, SpeechClientError
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid
from core.models.voice import (
    MAX_VOICE_NAME_LENGTH,
    PENDING_PROVIDER_VOICE_ID,
    VoicePreviewResponse,
    VoiceStatus,
)
from core.services.call_service import CallService
from app.config import settings
from app.exceptions import (
    ConfigurationError,
    SpeechSynthesisError,
    VoiceAlreadyExistsError,
    VoiceCloneError,
    VoiceNotFoundError,
    VoiceNotReadyError,
    VoiceSampleError,
)

logger = logging.getLogger(__name__)

PREVIEW_TEXT = "This is a small reminder to smile today."

CLONE_DESCRIPTION = "Yaad familiar voice"


def decode_audio_base64(audio_base64: str) -> bytes:
    """
    Decode a base64 sample, accepting data: URLs from the browser.

    Raises:
        VoiceSampleError: If the payload is not valid base64
    """
    if audio_base64.startswith("data:") and "," in audio_base64:
        audio_base64 = audio_base64.split(",", 1)[1]
    try:
        return base64.b64decode(audio_base64, validate=True)
    except ValueError:
        raise VoiceSampleError("Audio data is not valid base64")


class VoiceService:
    """
    Service for custom voice operations.
    """

    @staticmethod
    def get_user_voice(user_id: UUID | str) -> dict[str, Any] | None:
        """The user's voice row, or None if they have none."""
        client = SupabaseClient.get_client()
        response = (
            client.table("user_voices")
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    @staticmethod
    def _update_voice(voice_id: str, data: dict[str, Any]) -> None:
        client = SupabaseClient.get_client()
        client.table("user_voices").update(data).eq("id", voice_id).execute()

    @staticmethod
    def create_voice(user_id: UUID | str, audio: bytes, name: str) -> dict[str, Any]:
        """
        Clone a voice from a recorded sample.

        Args:
            user_id: Owner of the new voice
            audio: webm recording
            name: Display name (1-50 characters after trimming)

        Returns:
            The voice row, status "ready"

        Raises:
            VoiceSampleError: If the name or sample is invalid
            VoiceAlreadyExistsError: If the user already has a voice
            VoiceCloneError: If ElevenLabs cannot clone the sample
        """
        speech = CallService.get_speech_client()

        trimmed_name = (name or "").strip()
        if not 1 <= len(trimmed_name) <= MAX_VOICE_NAME_LENGTH:
            raise VoiceSampleError(
                f"Voice name must be 1-{MAX_VOICE_NAME_LENGTH} characters",
                details={"name": name},
            )
        if not audio:
            raise VoiceSampleError("Missing audio data")
        if len(audio) > settings.max_voice_sample_bytes:
            raise VoiceSampleError(
                f"Voice sample is larger than {settings.MAX_VOICE_SAMPLE_MB}MB",
                details={"size_bytes": len(audio)},
            )

        if VoiceService.get_user_voice(user_id):
            raise VoiceAlreadyExistsError()

        client = SupabaseClient.get_client()
        response = client.table("user_voices").insert({
            "user_id": normalize_uuid(user_id),
            "name": trimmed_name,
            "elevenlabs_voice_id": PENDING_PROVIDER_VOICE_ID,
            "status": VoiceStatus.PROCESSING.value,
        }).execute()

        if not response.data:
            raise SupabaseClientError(
                "Failed to create voice record",
                code="INSERT_FAILED",
                suggestion="Check that the user_voices table is accessible",
                details={"table": "user_voices"},
            )

        voice = response.data[0]
        voice_id = voice["id"]

        logger.info(f"Cloning voice for user {user_id}...")
        try:
            provider_voice_id = speech.add_voice(
                name=f"Yaad - {trimmed_name}",
                description=CLONE_DESCRIPTION,
                audio=audio,
            )
        except SpeechClientError as e:
            status = e.status_code if e.status_code is not None else e.message
            VoiceService._update_voice(voice_id, {
                "status": VoiceStatus.FAILED.value,
                "error_message": f"Voice cloning failed: {status}",
            })
            raise VoiceCloneError(str(status))

        ready = {
            "elevenlabs_voice_id": provider_voice_id,
            "status": VoiceStatus.READY.value,
            "error_message": None,
        }
        try:
            VoiceService._update_voice(voice_id, ready)
        except Exception as e:
            # The clone exists at ElevenLabs; the row can be repaired later
            logger.error(f"Error updating voice record {voice_id}: {e}")

        logger.info(f"Voice cloned successfully: {voice_id}")
        voice.update(ready)
        return voice

    @staticmethod
    def delete_voice(user_id: UUID | str, voice_id: UUID | str) -> None:
        """
        Delete a custom voice.

        Reminders that used it fall back to the default preset voice.
        Provider-side delete errors are logged and do not block removal.

        Raises:
            VoiceNotFoundError: If the voice doesn't exist or user doesn't own it
        """
        voice = SupabaseClient.fetch_by_id("user_voices", voice_id, user_id=user_id)
        if not voice:
            raise VoiceNotFoundError(str(voice_id))

        voice_id_str = normalize_uuid(voice_id)
        provider_voice_id = voice.get("elevenlabs_voice_id")

        if provider_voice_id and provider_voice_id != PENDING_PROVIDER_VOICE_ID:
            try:
                CallService.get_speech_client().delete_voice(provider_voice_id)
                logger.info("Voice deleted from ElevenLabs")
            except (SpeechClientError, ConfigurationError) as e:
                logger.error(f"ElevenLabs delete error: {e}")

        client = SupabaseClient.get_client()

        try:
            client.table("reminders").update({
                "voice": DEFAULT_VOICE,
                "custom_voice_id": None,
            }).eq("custom_voice_id", voice_id_str).execute()
        except Exception as e:
            logger.error(f"Error updating reminders: {e}")

        client.table("user_voices").delete().eq("id", voice_id_str).eq(
            "user_id", normalize_uuid(user_id)
        ).execute()
        logger.info(f"Voice deleted successfully: {voice_id_str}")

    @staticmethod
    def preview_voice(user_id: UUID | str, voice_id: UUID | str) -> VoicePreviewResponse:
        """
        Render the preview sentence in a ready voice.

        Raises:
            VoiceNotFoundError: If the voice doesn't exist or user doesn't own it
            VoiceNotReadyError: If the voice is not ready
            SpeechSynthesisError: If rendering fails
        """
        voice = SupabaseClient.fetch_by_id("user_voices", voice_id, user_id=user_id)
        if not voice:
            raise VoiceNotFoundError(str(voice_id))
        if voice.get("status") != VoiceStatus.READY.value:
            raise VoiceNotReadyError(str(voice_id), voice.get("status", "unknown"))

        speech = CallService.get_speech_client()
        try:
            audio = speech.text_to_speech(PREVIEW_TEXT, voice["elevenlabs_voice_id"])
        except SpeechClientError as e:
            raise SpeechSynthesisError(e.message)

        return VoicePreviewResponse(
            audio_base64=base64.b64encode(audio).decode("ascii"),
            text=PREVIEW_TEXT,
        )
