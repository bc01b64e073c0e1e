# =============================================================================
# core/services/call_service.py - Reminder Call Placement
# =============================================================================
# Places one reminder call end to end:
#
#   1. Check the caller may call for this user
#   2. Record a pending call_history row
#   3. Validate phone number, message, voice and recipient name
#   4. Resolve the voice (preset, or the user's ready custom voice)
#   5. Render "Hello {name}. {message}" to MP3 with ElevenLabs
#   6. Upload the MP3 and sign a URL for Twilio
#   7. Start the Twilio call and store its SID
#
# Any failure after step 2 leaves the history row "failed" with the reason.
# The final outcome (answered, voicemail, missed) arrives later through the
# Twilio status callback.
# =============================================================================

import logging
from uuid import UUID

from lib.speech import DEFAULT_VOICE, PRESET_VOICES, SpeechClient, SpeechClientError
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.telephony import TelephonyClient, TelephonyClientError
from lib.utils import mask_phone
from core.models.call_history import CallRequest, CallResult, CallStatus
from core.models.reminder import (
    E164_PHONE_PATTERN,
    MAX_MESSAGE_LENGTH,
    MAX_RECIPIENT_NAME_LENGTH,
    MIN_MESSAGE_LENGTH,
    MIN_RECIPIENT_NAME_LENGTH,
    VoiceType,
)
from core.models.voice import VoiceStatus
from core.services.call_history_service import CallHistoryService
from core.services.storage_service import StorageService
from app.config import settings
from app.exceptions import (
    CallValidationError,
    ConfigurationError,
    ForbiddenError,
    SpeechSynthesisError,
    TelephonyError,
    YaadException,
)

logger = logging.getLogger(__name__)

VALID_VOICES = {voice.value for voice in VoiceType}

INVALID_PHONE_MESSAGE = (
    "Invalid phone number format. Expected international format: +[country code][number]"
)


def personalize_message(recipient_name: str, message: str) -> str:
    """Prefix the script with a greeting."""
    return f"Hello {recipient_name}. {message}"


def validate_call_request(request: CallRequest) -> None:
    """
    Check the fields a call needs.

    Raises:
        CallValidationError: On the first invalid field
    """
    if not E164_PHONE_PATTERN.match(request.phone_number):
        raise CallValidationError(INVALID_PHONE_MESSAGE, field="phone_number")

    if not MIN_MESSAGE_LENGTH <= len(request.message) <= MAX_MESSAGE_LENGTH:
        raise CallValidationError(
            f"Message must be {MIN_MESSAGE_LENGTH}-{MAX_MESSAGE_LENGTH} characters",
            field="message",
        )

    if request.voice not in VALID_VOICES:
        raise CallValidationError("Invalid voice selection", field="voice")

    if not MIN_RECIPIENT_NAME_LENGTH <= len(request.recipient_name) <= MAX_RECIPIENT_NAME_LENGTH:
        raise CallValidationError(
            f"Recipient name must be {MIN_RECIPIENT_NAME_LENGTH}-{MAX_RECIPIENT_NAME_LENGTH} characters",
            field="recipient_name",
        )


class CallService:
    """
    Service for placing reminder calls.
    """

    @staticmethod
    def get_speech_client() -> SpeechClient:
        if not settings.ELEVENLABS_API_KEY:
            raise ConfigurationError("ELEVENLABS_API_KEY")
        return SpeechClient(
            api_key=settings.ELEVENLABS_API_KEY,
            model_id=settings.ELEVENLABS_MODEL_ID,
        )

    @staticmethod
    def get_telephony_client() -> TelephonyClient:
        for name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"):
            if not getattr(settings, name):
                raise ConfigurationError(name)
        return TelephonyClient(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            from_number=settings.TWILIO_PHONE_NUMBER,
        )

    @staticmethod
    def resolve_voice_id(voice: str, custom_voice_id: UUID | str | None) -> str:
        """
        Provider voice id for a reminder's voice choice.

        A custom voice is used only when its user_voices row exists and is
        ready; otherwise the call falls back to the default preset.
        """
        voice_id = PRESET_VOICES.get(voice, PRESET_VOICES[DEFAULT_VOICE])

        if voice != VoiceType.CUSTOM.value or not custom_voice_id:
            return voice_id

        try:
            row = SupabaseClient.fetch_by_id(
                "user_voices", custom_voice_id, columns="elevenlabs_voice_id, status"
            )
        except SupabaseClientError as e:
            logger.warning(f"Custom voice lookup failed, falling back to {DEFAULT_VOICE}: {e}")
            return PRESET_VOICES[DEFAULT_VOICE]

        if not row:
            logger.warning(f"Custom voice not found, falling back to {DEFAULT_VOICE}")
            return PRESET_VOICES[DEFAULT_VOICE]

        if row.get("status") != VoiceStatus.READY.value:
            logger.warning(f"Custom voice not ready, falling back to {DEFAULT_VOICE}")
            return PRESET_VOICES[DEFAULT_VOICE]

        logger.info("Using custom voice")
        return row["elevenlabs_voice_id"]

    @staticmethod
    def place_call(
        request: CallRequest,
        auth_user_id: UUID | str | None = None,
        service_call: bool = False,
    ) -> CallResult:
        """
        Place a reminder call.

        Args:
            request: Who to call and what to say
            auth_user_id: Authenticated user (ignored for service calls)
            service_call: True when the scheduler places the call

        Returns:
            CallResult with the Twilio SID and call history id

        Raises:
            ForbiddenError: If a user places a call for someone else
            ConfigurationError: If provider keys are missing
            CallValidationError: If a field is invalid
            SpeechSynthesisError: If audio rendering fails
            StorageUploadError: If the audio cannot be stored
            TelephonyError: If Twilio rejects the call
        """
        if not service_call and str(auth_user_id) != str(request.user_id):
            logger.error("User ID mismatch on call request")
            raise ForbiddenError()

        speech = CallService.get_speech_client()
        telephony = CallService.get_telephony_client()

        personalized = personalize_message(request.recipient_name, request.message)

        history = CallHistoryService.create_pending(
            user_id=request.user_id,
            reminder_id=request.reminder_id,
            recipient_name=request.recipient_name,
            phone_number=request.phone_number,
            message=personalized,
            voice=request.voice,
        )
        history_id = history["id"] if history else None

        try:
            try:
                validate_call_request(request)
            except CallValidationError as e:
                CallHistoryService.update_status(history_id, CallStatus.FAILED, e.message)
                raise

            voice_id = CallService.resolve_voice_id(request.voice, request.custom_voice_id)

            logger.info(f"Generating speech for reminder {request.reminder_id}")
            try:
                audio = speech.text_to_speech(personalized, voice_id)
            except SpeechClientError as e:
                status = e.status_code if e.status_code is not None else e.message
                CallHistoryService.update_status(
                    history_id, CallStatus.FAILED, f"Speech generation failed: {status}"
                )
                raise SpeechSynthesisError(str(status))

            try:
                path = StorageService.upload_call_audio(request.user_id, request.reminder_id, audio)
                audio_url = StorageService.create_audio_url(path)
            except YaadException as e:
                CallHistoryService.update_status(history_id, CallStatus.FAILED, e.message)
                raise

            CallHistoryService.update_status(history_id, CallStatus.IN_PROGRESS)

            try:
                call_sid = telephony.create_call(
                    to_number=request.phone_number,
                    audio_url=audio_url,
                    status_callback_url=settings.status_callback_url,
                )
            except TelephonyClientError as e:
                CallHistoryService.update_status(history_id, CallStatus.FAILED, e.message)
                raise TelephonyError(e.message)

            # Status stays in_progress until the status callback arrives
            CallHistoryService.update_status(history_id, CallStatus.IN_PROGRESS, call_sid=call_sid)

        except YaadException:
            raise

        except Exception as e:
            logger.error(f"Error placing call to {mask_phone(request.phone_number)}: {e}")
            CallHistoryService.mark_failed(history_id, str(e))
            raise

        logger.info("Call initiated successfully. Awaiting callback for final status.")
        return CallResult(
            success=True,
            call_sid=call_sid,
            call_history_id=history_id,
            message="Call initiated successfully",
        )
