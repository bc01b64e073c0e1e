# =============================================================================
# core/models/scheduler.py - Due-Reminder Sweep Schemas
# =============================================================================
# Result of one pass of the reminder sweep. Returned by the HTTP trigger and
# by the Celery task (as a dict).
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class ReminderSweepOutcome(BaseModel):
    """What happened to one due reminder."""

    reminder_id: str
    success: bool = Field(..., description="Whether the call was handed to Twilio")
    next_scheduled_at: datetime | None = Field(
        default=None,
        description="New scheduled time, or None if the reminder was deactivated"
    )
    error: str | None = None


class SweepResult(BaseModel):
    """
    Totals for one sweep.

    Example:
        {"processed": 3, "succeeded": 2, "failed": 1,
         "rescheduled": 2, "deactivated": 1, "results": [...]}
    """

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    rescheduled: int = 0
    deactivated: int = 0
    results: list[ReminderSweepOutcome] = Field(default_factory=list)
