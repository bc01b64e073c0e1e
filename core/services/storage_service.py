# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles call audio in Supabase Storage. Twilio fetches the rendered MP3
# through a short-lived signed URL, so the bucket itself stays private.
# =============================================================================

import logging
import time

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.config import settings
from app.exceptions import StorageUploadError

logger = logging.getLogger(__name__)

# Storage bucket name
BUCKET_NAME = "call-audio"


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles uploading reminder audio and producing playable URLs.
    """

    @staticmethod
    def build_audio_path(user_id: str, reminder_id: str, timestamp_ms: int | None = None) -> str:
        """
        Storage path for one rendered call.

        Format: {user_id}/reminder-{reminder_id}-{epoch_ms}.mp3
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return f"{user_id}/reminder-{reminder_id}-{timestamp_ms}.mp3"

    @staticmethod
    def upload_call_audio(user_id: str, reminder_id: str, audio: bytes) -> str:
        """
        Upload rendered reminder audio.

        Args:
            user_id: Owner of the reminder (first path segment)
            reminder_id: Reminder being called
            audio: MP3 bytes

        Returns:
            Storage path where the audio was uploaded

        Raises:
            StorageUploadError: If upload fails
        """
        path = StorageService.build_audio_path(str(user_id), str(reminder_id))

        try:
            return SupabaseClient.upload_file(BUCKET_NAME, path, audio, "audio/mpeg")
        except SupabaseClientError as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(f"Audio upload failed: {e.message}")

    @staticmethod
    def create_audio_url(storage_path: str) -> str:
        """
        Signed URL Twilio can play.

        Lifetime is AUDIO_SIGNED_URL_TTL (default one hour), long enough
        for Twilio to fetch the file while the call connects.

        Raises:
            StorageUploadError: If the URL cannot be created
        """
        try:
            return SupabaseClient.create_signed_url(
                BUCKET_NAME, storage_path, settings.AUDIO_SIGNED_URL_TTL
            )
        except SupabaseClientError as e:
            logger.error(f"Signed URL generation failed: {e}")
            raise StorageUploadError("Audio URL generation failed")
