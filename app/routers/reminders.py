# =============================================================================
# app/routers/reminders.py - Reminder CRUD Endpoints
# =============================================================================
# Handles reminder creation and management, plus:
# - POST /reminders/bulk: one reminder per time slot (medication schedules)
# - POST /reminders/{id}/test-call: call the recipient right now
# - GET  /reminders/{id}/summary: title, recurrence summary and call cost
#
# All endpoints require authentication.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.call_history import CallResult
from core.models.reminder import (
    ReminderBulkCreate,
    ReminderCreate,
    ReminderList,
    ReminderResponse,
    ReminderSummaryResponse,
    ReminderUpdate,
)
from core.services.call_service import CallService
from core.services.reminder_service import ReminderService, recurrence_summary_for
from core.services.scheduler_service import build_call_request

router = APIRouter()

ReminderId = Annotated[UUID, Path(description="Reminder UUID")]


def to_response(reminder: dict[str, Any]) -> ReminderResponse:
    return ReminderResponse(**reminder, recurrence_summary=recurrence_summary_for(reminder))


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=ReminderList)
async def list_reminders(
    user: AuthUser = Depends(get_current_user),
    active_only: Annotated[bool, Query(description="Only reminders that will still fire")] = False,
):
    """
    List the user's reminders, soonest first.
    """
    reminders = ReminderService.list_reminders(user.id, active_only=active_only)
    return ReminderList(
        reminders=[to_response(r) for r in reminders],
        total=len(reminders),
    )


@router.post("", response_model=ReminderResponse, status_code=201)
async def create_reminder(
    request: ReminderCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a reminder.

    Naive `scheduled_at` values are read in the reminder's timezone.
    """
    reminder = ReminderService.create_reminder(user.id, request)
    return to_response(reminder)


@router.post("/bulk", response_model=ReminderList, status_code=201)
async def create_reminders_bulk(
    request: ReminderBulkCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create one reminder per time slot, sharing everything else.

    Used for medication schedules like "morning and evening".
    """
    reminders = ReminderService.create_reminders_bulk(user.id, request)
    return ReminderList(
        reminders=[to_response(r) for r in reminders],
        total=len(reminders),
    )


@router.get("/{reminder_id}", response_model=ReminderResponse)
async def get_reminder(
    reminder_id: ReminderId,
    user: AuthUser = Depends(get_current_user),
):
    reminder = ReminderService.get_reminder(reminder_id, user.id)
    return to_response(reminder)


@router.patch("/{reminder_id}", response_model=ReminderResponse)
async def update_reminder(
    reminder_id: ReminderId,
    request: ReminderUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update a reminder. Only provided fields change.

    A new `scheduled_at` or `recurrence` restarts the occurrence count.
    """
    reminder = ReminderService.update_reminder(reminder_id, user.id, request)
    return to_response(reminder)


@router.delete("/{reminder_id}", status_code=204)
async def delete_reminder(
    reminder_id: ReminderId,
    user: AuthUser = Depends(get_current_user),
):
    ReminderService.delete_reminder(reminder_id, user.id)


@router.get("/{reminder_id}/summary", response_model=ReminderSummaryResponse)
async def get_reminder_summary(
    reminder_id: ReminderId,
    user: AuthUser = Depends(get_current_user),
):
    """
    Short title, human recurrence summary and estimated cost per call.

    Example:
        {"title": "Medication", "recurrence_summary": "Weekly on Mon, Wed, Fri",
         "estimated_cost_per_call": 0.014, "currency": "USD"}
    """
    reminder = ReminderService.get_reminder(reminder_id, user.id)
    return ReminderService.summarize(reminder)


@router.post("/{reminder_id}/test-call", response_model=CallResult)
async def test_call(
    reminder_id: ReminderId,
    user: AuthUser = Depends(get_current_user),
):
    """
    Call the recipient now with this reminder's message.

    The reminder's schedule is not touched.
    """
    reminder = ReminderService.get_reminder(reminder_id, user.id)
    return CallService.place_call(build_call_request(reminder), auth_user_id=user.id)
