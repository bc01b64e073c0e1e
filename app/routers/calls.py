# =============================================================================
# app/routers/calls.py - Call Endpoints
# =============================================================================
# - POST /calls: place a reminder call now (user JWT or service key)
# - POST /calls/status-callback: Twilio's final call status (form post)
#
# The status callback always answers 200 "OK" once CallSid and CallStatus
# are present, so Twilio never retries because of our own errors.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from app.auth import get_caller, Caller
from app.websocket.broadcast import publish_call_status
from core.models.call_history import CallRequest, CallResult
from core.services.call_history_service import CallHistoryService
from core.services.call_service import CallService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=CallResult)
async def make_call(
    request: CallRequest,
    caller: Caller = Depends(get_caller),
):
    """
    Place a reminder call.

    Users may only call for their own reminders; the scheduler authenticates
    with the service key and may call for anyone.

    Raises:
        400: Invalid phone number, message, voice or recipient name
        403: user_id does not match the signed-in user
        502: Speech synthesis or Twilio failed
    """
    return CallService.place_call(
        request,
        auth_user_id=caller.user.id if caller.user else None,
        service_call=caller.is_service,
    )


@router.post("/status-callback", response_class=PlainTextResponse)
async def twilio_status_callback(request: Request):
    """
    Receive Twilio's status callback.

    Form fields: CallSid, CallStatus, AnsweredBy (answering machine
    detection), CallDuration.
    """
    form = await request.form()
    call_sid = form.get("CallSid")
    call_status = form.get("CallStatus")
    answered_by = form.get("AnsweredBy")
    duration = form.get("CallDuration")

    logger.info(
        f"Callback received: SID={call_sid}, Status={call_status}, "
        f"AnsweredBy={answered_by}, Duration={duration}"
    )

    if not call_sid or not call_status:
        logger.error("Missing required fields: CallSid or CallStatus")
        return PlainTextResponse("Bad Request", status_code=400)

    try:
        row = CallHistoryService.apply_status_callback(
            call_sid=call_sid,
            call_status=call_status,
            answered_by=answered_by,
            duration=duration,
        )
    except Exception as e:
        # Still 200 so Twilio does not retry
        logger.exception(f"Failed to update call history: {e}")
        return PlainTextResponse("OK")

    if row:
        publish_call_status(
            user_id=row["user_id"],
            call_history_id=row["id"],
            status=row["status"],
            reminder_id=row.get("reminder_id"),
            call_sid=call_sid,
            duration_seconds=row.get("duration_seconds"),
        )

    return PlainTextResponse("OK")
