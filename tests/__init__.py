# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Yaad API:
# - test_recurrence.py / test_medication.py / test_lib_helpers.py: lib/ units
# - test_reminders.py / test_call_service.py / test_call_history.py: services
# - test_scheduler.py: Due-reminder sweep and Celery tasks
# - test_reminder_parser.py / test_voice_form.py: Voice dictation pipeline
# - test_api.py: Endpoint tests with services patched
#
# Run tests with: pytest
# =============================================================================
