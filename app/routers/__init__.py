# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - reminders.py: Reminder CRUD, bulk create, test call, summary
# - contacts.py: Saved recipients
# - history.py: Call history
# - voices.py: Custom voice clone, delete, preview
# - voice.py: Voice dictation parsing
# - calls.py: Make-call and the Twilio status callback
# - scheduler.py: On-demand due-reminder sweep
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import reminders
from . import contacts
from . import history
from . import voices
from . import voice
from . import calls
from . import scheduler

__all__ = [
    "health",
    "reminders",
    "contacts",
    "history",
    "voices",
    "voice",
    "calls",
    "scheduler",
]
