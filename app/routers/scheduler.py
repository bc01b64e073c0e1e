# =============================================================================
# app/routers/scheduler.py - Scheduler Trigger Endpoint
# =============================================================================
# Runs one due-reminder sweep on demand. Celery beat runs the same sweep
# every minute; this endpoint lets an external cron (or an operator) trigger
# it too.
#
# Auth: "Authorization: Bearer <service key>" or "X-Cron-Secret: <secret>".
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Header

from app.exceptions import UnauthorizedError
from core.models.scheduler import SweepResult
from core.services.scheduler_service import SchedulerService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/check-reminders", response_model=SweepResult)
async def check_reminders(
    authorization: Annotated[str | None, Header()] = None,
    x_cron_secret: Annotated[str | None, Header()] = None,
):
    """
    Place calls for every reminder due now and advance their schedules.

    Returns per-reminder outcomes and totals.

    Raises:
        401: Missing or wrong credentials
    """
    if not SchedulerService.is_authorized_trigger(authorization, x_cron_secret):
        logger.warning("Unauthorized scheduler trigger")
        raise UnauthorizedError()

    return SchedulerService.run_sweep()
