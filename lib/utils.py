# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        reminder_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        reminder_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Timestamp Utilities
# =============================================================================

def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a Supabase timestamp into an aware datetime.

    Supabase returns ISO strings with either a 'Z' suffix or an explicit
    offset. Naive values are assumed to be UTC.

    Example:
        parse_timestamp("2026-01-15T10:30:00Z")  # datetime(2026, 1, 15, 10, 30, tzinfo=UTC)
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    """Serialize an aware datetime as a UTC ISO string for Supabase."""
    return value.astimezone(timezone.utc).isoformat()


# =============================================================================
# Logging Helpers
# =============================================================================

def mask_phone(phone_number: str | None) -> str:
    """Keep only the last 4 digits of a phone number for log lines."""
    if not phone_number:
        return "<none>"
    return f"***{phone_number[-4:]}"


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class SpeechClientError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="SPEECH_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
