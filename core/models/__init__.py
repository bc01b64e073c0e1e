# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - reminder.py: Reminder CRUD schemas, recurrence settings, voice drafts
# - contact.py: Contact CRUD schemas
# - call_history.py: Call requests, results and history
# - voice.py: Custom voice schemas
# - scheduler.py: Due-reminder sweep results
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Reminder Models
# -----------------------------------------------------------------------------
from .reminder import (
    E164_PHONE_PATTERN,
    RecurrenceSettings,
    ReminderBulkCreate,
    ReminderCreate,
    ReminderDraft,
    ReminderList,
    ReminderResponse,
    ReminderSummaryResponse,
    ReminderType,
    ReminderUpdate,
    VoiceType,
)

# -----------------------------------------------------------------------------
# Contact Models
# -----------------------------------------------------------------------------
from .contact import (
    ContactCreate,
    ContactList,
    ContactResponse,
    ContactUpdate,
)

# -----------------------------------------------------------------------------
# Call Models
# -----------------------------------------------------------------------------
from .call_history import (
    CallHistoryList,
    CallHistoryResponse,
    CallRequest,
    CallResult,
    CallStatus,
)

# -----------------------------------------------------------------------------
# Voice Models
# -----------------------------------------------------------------------------
from .voice import (
    UserVoiceResponse,
    VoiceCreateBase64,
    VoicePreviewResponse,
    VoiceStatus,
)

# -----------------------------------------------------------------------------
# Scheduler Models
# -----------------------------------------------------------------------------
from .scheduler import ReminderSweepOutcome, SweepResult

__all__ = [
    # Reminder
    "E164_PHONE_PATTERN",
    "RecurrenceSettings",
    "ReminderBulkCreate",
    "ReminderCreate",
    "ReminderDraft",
    "ReminderList",
    "ReminderResponse",
    "ReminderSummaryResponse",
    "ReminderType",
    "ReminderUpdate",
    "VoiceType",
    # Contact
    "ContactCreate",
    "ContactList",
    "ContactResponse",
    "ContactUpdate",
    # Call
    "CallHistoryList",
    "CallHistoryResponse",
    "CallRequest",
    "CallResult",
    "CallStatus",
    # Voice
    "UserVoiceResponse",
    "VoiceCreateBase64",
    "VoicePreviewResponse",
    "VoiceStatus",
    # Scheduler
    "ReminderSweepOutcome",
    "SweepResult",
]
