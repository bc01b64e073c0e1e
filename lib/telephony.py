# =============================================================================
# lib/telephony.py - Twilio Client
# =============================================================================
# Thin wrapper around the Twilio REST API for outbound reminder calls.
# Each call plays a pre-rendered MP3, pauses, then says goodbye. Answering
# machine detection is enabled so the status callback can tell voicemail
# apart from a human pickup.
#
# Usage:
#   from lib.telephony import TelephonyClient
#   client = TelephonyClient(account_sid, auth_token, from_number)
#   sid = client.create_call("+447700900123", audio_url, status_callback_url)
# =============================================================================

import logging
from xml.sax.saxutils import escape

import httpx

from lib.utils import ApplicationError, mask_phone

logger = logging.getLogger(__name__)

TWILIO_API_URL = "https://api.twilio.com/2010-04-01"

MACHINE_DETECTION_TIMEOUT_SECONDS = 5


class TelephonyClientError(ApplicationError):
    """Error returned by the telephony provider."""

    def __init__(self, message: str, status_code: int | None = None, **kwargs):
        kwargs.setdefault("code", "TELEPHONY_PROVIDER_ERROR")
        super().__init__(message, **kwargs)
        self.status_code = status_code


def build_twiml(audio_url: str) -> str:
    """TwiML that plays the reminder audio, pauses one second and says goodbye."""
    return (
        "<Response>"
        f"<Play>{escape(audio_url)}</Play>"
        '<Pause length="1"/>'
        '<Say voice="alice">Goodbye.</Say>'
        "</Response>"
    )


class TelephonyClient:
    """Synchronous Twilio Calls API client (basic auth, form-encoded)."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout: float = 30.0,
        base_url: str = TWILIO_API_URL,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    @property
    def calls_url(self) -> str:
        return f"{self.base_url}/Accounts/{self.account_sid}/Calls.json"

    def create_call(self, to_number: str, audio_url: str, status_callback_url: str) -> str:
        """
        Start an outbound call.

        Returns:
            The Twilio call SID

        Raises:
            TelephonyClientError: If Twilio rejects the call or is unreachable
        """
        params = {
            "To": to_number,
            "From": self.from_number,
            "Twiml": build_twiml(audio_url),
            "StatusCallback": status_callback_url,
            "StatusCallbackEvent": "completed",
            "MachineDetection": "Enable",
            "MachineDetectionTimeout": str(MACHINE_DETECTION_TIMEOUT_SECONDS),
        }

        try:
            response = httpx.post(
                self.calls_url,
                data=params,
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise TelephonyClientError(f"Twilio request failed: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if not response.is_success:
            error_message = (
                result.get("message")
                or result.get("error_message")
                or f"Twilio error: {response.status_code}"
            )
            logger.error(f"Call to {mask_phone(to_number)} rejected: {response.status_code}")
            raise TelephonyClientError(
                error_message,
                status_code=response.status_code,
                details={"twilio_code": result.get("code")},
            )

        call_sid = result.get("sid")
        if not call_sid:
            raise TelephonyClientError("Twilio returned no call SID")

        logger.info(f"Call {call_sid} started to {mask_phone(to_number)}")
        return call_sid
