# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - recurrence.py: Recurrence rules and next-occurrence date math
# - supabase_client.py: Typed Supabase wrapper for database and storage
# - speech.py / telephony.py / transcription.py: Provider clients
# - transcript.py / voice_capture.py: Dictation transcript handling
# - medication.py / summary.py / pricing.py: Reminder text and cost helpers
# - utils.py: Shared utilities (error handling, timestamps, UUIDs)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_uuid, parse_timestamp, utc_now

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "ApplicationError",
    "normalize_uuid",
    "parse_timestamp",
    "utc_now",
]
