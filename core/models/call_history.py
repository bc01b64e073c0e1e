# =============================================================================
# core/models/call_history.py - Call Schemas
# =============================================================================
# These models define the API contract for placing calls and reading their
# outcomes:
# - CallRequest: Input for placing a call (make-call)
# - CallResult: Output after the call was handed to Twilio
# - CallHistoryResponse / CallHistoryList: Logged call attempts
# - CallStatus: Lifecycle of a call attempt
#
# Status flow:
#   pending -> in_progress -> completed | voicemail | missed | failed
#   pending -> failed (validation, speech or upload errors)
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class CallStatus(str, Enum):
    """
    States of a call attempt.

    - pending: history row created, nothing sent yet
    - in_progress: handed to Twilio, waiting for the status callback
    - completed: a person answered
    - voicemail: an answering machine answered
    - missed: busy or no answer
    - failed: rejected, canceled, or failed before dialing
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    VOICEMAIL = "voicemail"
    MISSED = "missed"
    FAILED = "failed"


FINAL_CALL_STATUSES = {
    CallStatus.COMPLETED,
    CallStatus.VOICEMAIL,
    CallStatus.MISSED,
    CallStatus.FAILED,
}


class CallRequest(BaseModel):
    """
    Schema for placing a call.

    Field contents are validated by CallService rather than here, so that
    a rejected request still leaves a failed row in the call history.

    Example:
        {
            "reminder_id": "550e8400-...",
            "user_id": "770e8400-...",
            "recipient_name": "Mom",
            "phone_number": "+447700900123",
            "message": "Take your evening pills.",
            "voice": "friendly_female"
        }
    """

    reminder_id: UUID = Field(..., description="Reminder the call belongs to")
    user_id: UUID = Field(..., description="Owner of the reminder")
    recipient_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    voice: str = Field(default="friendly_female")
    custom_voice_id: UUID | None = Field(default=None)


class CallResult(BaseModel):
    """
    Outcome of handing a call to Twilio.

    `success` means Twilio accepted the call; the final outcome arrives
    later through the status callback.
    """

    success: bool
    call_sid: str | None = None
    call_history_id: UUID | None = None
    message: str = ""


class CallHistoryResponse(BaseModel):
    id: UUID
    user_id: UUID
    reminder_id: UUID | None = None
    recipient_name: str
    phone_number: str
    message: str | None = None
    voice: str | None = None
    status: CallStatus
    error_message: str | None = None
    twilio_call_sid: str | None = None
    duration_seconds: int | None = None
    attempts: int | None = None
    attempted_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CallHistoryList(BaseModel):
    """
    Paginated call history, newest first.
    """

    calls: list[CallHistoryResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)
