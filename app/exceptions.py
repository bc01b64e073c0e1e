# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class YaadException(Exception):
    """
    Base exception for the Yaad API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "YAAD_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Not Found Exceptions
# =============================================================================

class ReminderNotFoundError(YaadException):
    """Raised when a reminder ID doesn't exist or belongs to another user."""

    def __init__(self, reminder_id: str):
        super().__init__(
            message=f"Reminder not found: {reminder_id}",
            code="REMINDER_NOT_FOUND",
            status_code=404,
            suggestion="Check that the reminder_id is correct and hasn't been deleted",
            details={"reminder_id": reminder_id}
        )


class ContactNotFoundError(YaadException):
    """Raised when a contact ID doesn't exist or belongs to another user."""

    def __init__(self, contact_id: str):
        super().__init__(
            message=f"Contact not found: {contact_id}",
            code="CONTACT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the contact_id is correct",
            details={"contact_id": contact_id}
        )


class CallHistoryNotFoundError(YaadException):
    """Raised when a call history row doesn't exist."""

    def __init__(self, call_id: str):
        super().__init__(
            message=f"Call not found: {call_id}",
            code="CALL_NOT_FOUND",
            status_code=404,
            suggestion="Check that the call id is correct",
            details={"call_id": call_id}
        )


class VoiceNotFoundError(YaadException):
    """Raised when a custom voice doesn't exist or belongs to another user."""

    def __init__(self, voice_id: str | None = None):
        super().__init__(
            message=f"Voice not found: {voice_id}" if voice_id else "No custom voice found",
            code="VOICE_NOT_FOUND",
            status_code=404,
            suggestion="Create a voice first using POST /api/v1/voices",
            details={"voice_id": voice_id} if voice_id else None
        )


# =============================================================================
# Voice Exceptions
# =============================================================================

class VoiceNotReadyError(YaadException):
    """Raised when a voice is still processing or failed to clone."""

    def __init__(self, voice_id: str, status: str):
        super().__init__(
            message=f"Voice is not ready yet (status: {status})",
            code="VOICE_NOT_READY",
            status_code=400,
            suggestion="Wait for the voice to finish processing, or record a new sample",
            details={"voice_id": voice_id, "status": status}
        )


class VoiceAlreadyExistsError(YaadException):
    """Raised when a user already has a custom voice."""

    def __init__(self):
        super().__init__(
            message="You already have a custom voice. Delete it first to create a new one.",
            code="VOICE_ALREADY_EXISTS",
            status_code=400,
            suggestion="DELETE /api/v1/voices/{id} before recording a new sample"
        )


class VoiceCloneError(YaadException):
    """Raised when the speech provider cannot clone a voice sample."""

    def __init__(self, error: str):
        super().__init__(
            message="We couldn't create your voice. Please try again.",
            code="VOICE_CLONE_FAILED",
            status_code=502,
            suggestion="Record at least 30 seconds of clear speech in a quiet room",
            details={"error": error}
        )


class VoiceSampleError(YaadException):
    """Raised when a voice sample upload is missing, too large or badly named."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_VOICE_SAMPLE",
            status_code=400,
            suggestion="Record a clear sample and give the voice a 1-50 character name",
            details=details
        )


# =============================================================================
# Call Exceptions
# =============================================================================

class CallValidationError(YaadException):
    """Raised when a call request fails validation."""

    def __init__(self, message: str, field: str):
        super().__init__(
            message=message,
            code="INVALID_CALL_REQUEST",
            status_code=400,
            details={"field": field}
        )


class SpeechSynthesisError(YaadException):
    """Raised when the speech provider fails to produce audio."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Speech synthesis failed: {error}",
            code="SPEECH_SYNTHESIS_FAILED",
            status_code=502,
            suggestion="Try again later, or switch the reminder to a preset voice",
            details={"error": error}
        )


class TelephonyError(YaadException):
    """Raised when the telephony provider rejects a call."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to place call: {error}",
            code="TELEPHONY_FAILED",
            status_code=502,
            suggestion="Check the phone number and the Twilio account balance",
            details={"error": error}
        )


class StorageUploadError(YaadException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Voice Parsing Exceptions
# =============================================================================

class TranscriptParseError(YaadException):
    """Raised when a transcript cannot be turned into a reminder."""

    def __init__(self, message: str, status_code: int = 400, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="TRANSCRIPT_PARSE_FAILED",
            status_code=status_code,
            suggestion="Try again and mention who to call, what to say and when",
            details=details
        )


# =============================================================================
# Access Exceptions
# =============================================================================

class UnauthorizedError(YaadException):
    """Raised when a request carries no valid credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Send 'Authorization: Bearer <token>'"
        )


class ForbiddenError(YaadException):
    """Raised when a user acts on another user's data."""

    def __init__(self, message: str = "Cannot make calls for other users"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403
        )


class ConfigurationError(YaadException):
    """Raised when a provider key needed for a request is not configured."""

    def __init__(self, setting: str):
        super().__init__(
            message=f"{setting} is not configured",
            code="CONFIGURATION_ERROR",
            status_code=500,
            suggestion=f"Set {setting} in the server environment",
            details={"setting": setting}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def yaad_exception_handler(
    request: Request,
    exc: YaadException
) -> JSONResponse:
    """
    Convert YaadException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
