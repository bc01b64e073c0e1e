# =============================================================================
# app/routers/history.py - Call History Endpoints
# =============================================================================
# Read-only log of call attempts and their outcomes.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.call_history import CallHistoryList, CallHistoryResponse
from core.services.call_history_service import CallHistoryService

router = APIRouter()


@router.get("", response_model=CallHistoryList)
async def list_calls(
    user: AuthUser = Depends(get_current_user),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 20,
    reminder_id: Annotated[UUID | None, Query(description="Only calls for this reminder")] = None,
):
    """
    List calls with pagination, newest first.
    """
    rows, total = CallHistoryService.list_calls(
        user_id=user.id,
        page=page,
        page_size=page_size,
        reminder_id=reminder_id,
    )
    return CallHistoryList(
        calls=[CallHistoryResponse(**row) for row in rows],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{call_id}", response_model=CallHistoryResponse)
async def get_call(
    call_id: Annotated[UUID, Path(description="Call history UUID")],
    user: AuthUser = Depends(get_current_user),
):
    row = CallHistoryService.get_call(call_id, user.id)
    return CallHistoryResponse(**row)
