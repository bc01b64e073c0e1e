# =============================================================================
# lib/speech.py - ElevenLabs Client
# =============================================================================
# Thin wrapper around the ElevenLabs REST API:
# - text_to_speech: render a reminder script to MP3 bytes
# - add_voice: create an instant voice clone from a recorded sample
# - delete_voice: remove a cloned voice
#
# Usage:
#   from lib.speech import SpeechClient
#   client = SpeechClient(api_key=settings.ELEVENLABS_API_KEY)
#   audio = client.text_to_speech("Hello Mom. Take your pills.", PRESET_VOICES["friendly_female"])
# =============================================================================

import logging
from typing import Any

import httpx

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

ELEVENLABS_API_URL = "https://api.elevenlabs.io/v1"

# Provider voice ids behind the preset voice names users pick
PRESET_VOICES = {
    "friendly_female": "caMurMrvWp0v3NFJALhl",
    "friendly_male": "VR6AewLTigWG4xSOukaG",
}

DEFAULT_VOICE = "friendly_female"

# Low bitrate keeps phone-quality audio small
OUTPUT_FORMAT = "mp3_22050_32"

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
}


class SpeechClientError(ApplicationError):
    """Error returned by the speech synthesis provider."""

    def __init__(self, message: str, status_code: int | None = None, **kwargs):
        kwargs.setdefault("code", "SPEECH_PROVIDER_ERROR")
        super().__init__(message, **kwargs)
        self.status_code = status_code


class SpeechClient:
    """
    Synchronous ElevenLabs client.

    Example:
        client = SpeechClient(api_key="...")
        voice_id = client.add_voice("Yaad - Grandma", "Yaad familiar voice", sample_bytes)
    """

    def __init__(
        self,
        api_key: str,
        model_id: str = "eleven_turbo_v2_5",
        timeout: float = 60.0,
        base_url: str = ELEVENLABS_API_URL,
    ):
        self.api_key = api_key
        self.model_id = model_id
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {"xi-api-key": self.api_key}
        headers.update(extra)
        return headers

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        body = response.text[:500]
        logger.error(f"ElevenLabs {action} failed: {response.status_code} {body}")
        raise SpeechClientError(
            f"ElevenLabs {action} failed with status {response.status_code}",
            status_code=response.status_code,
            details={"response": body},
        )

    def text_to_speech(self, text: str, voice_id: str) -> bytes:
        """
        Render text to MP3 audio.

        Raises:
            SpeechClientError: On a provider error or network failure
        """
        url = f"{self.base_url}/text-to-speech/{voice_id}"
        payload: dict[str, Any] = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": VOICE_SETTINGS,
        }

        try:
            response = httpx.post(
                url,
                params={"output_format": OUTPUT_FORMAT},
                headers=self._headers(Accept="audio/mpeg"),
                json=payload,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise SpeechClientError(f"ElevenLabs request failed: {e}") from e

        self._raise_for_status(response, "text-to-speech")
        logger.info(f"Synthesized {len(response.content)} bytes of audio with voice {voice_id}")
        return response.content

    def add_voice(
        self,
        name: str,
        description: str,
        audio: bytes,
        filename: str = "voice_recording.webm",
        content_type: str = "audio/webm",
    ) -> str:
        """
        Create an instant voice clone.

        Returns:
            The provider's voice id

        Raises:
            SpeechClientError: On a provider error, or if no voice id comes back
        """
        try:
            response = httpx.post(
                f"{self.base_url}/voices/add",
                headers=self._headers(),
                data={"name": name, "description": description},
                files={"files": (filename, audio, content_type)},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise SpeechClientError(f"ElevenLabs request failed: {e}") from e

        self._raise_for_status(response, "voice clone")

        voice_id = response.json().get("voice_id")
        if not voice_id:
            raise SpeechClientError("ElevenLabs returned no voice_id")
        return voice_id

    def delete_voice(self, voice_id: str) -> None:
        """
        Delete a cloned voice.

        Raises:
            SpeechClientError: On a provider error or network failure
        """
        try:
            response = httpx.delete(
                f"{self.base_url}/voices/{voice_id}",
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise SpeechClientError(f"ElevenLabs request failed: {e}") from e

        self._raise_for_status(response, "voice delete")
