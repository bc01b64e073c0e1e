# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the reminder business logic:
# - models/: Pydantic schemas for data validation
# - services/: Reminder, contact, call, voice and scheduling operations
#
# Services raise app.exceptions errors but never touch FastAPI request or
# response objects, so Celery tasks can call them directly.
# =============================================================================
