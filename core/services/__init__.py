# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .storage_service import StorageService
from .call_history_service import CallHistoryService
from .call_service import CallService
from .scheduler_service import SchedulerService
from .reminder_service import ReminderService
from .contact_service import ContactService
from .voice_service import VoiceService
from .voice_form_service import build_reminder_draft

__all__ = [
    "StorageService",
    "CallHistoryService",
    "CallService",
    "SchedulerService",
    "ReminderService",
    "ContactService",
    "VoiceService",
    "build_reminder_draft",
]
