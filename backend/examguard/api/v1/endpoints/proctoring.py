import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ....core.database import get_db
from ....core.security import ExamContext
from ....api.deps import get_exam_context, require_exam_context
from ....schemas.violation import (
    LedgerResponse,
    ViolationReport,
    ViolationEventOut,
    ViolationStatistics,
)
from ....services.violation_ledger import ViolationLedger, LedgerError, NoActiveSessionError
from ....utils.timezone import format_local_time

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure(error: str) -> LedgerResponse:
    return LedgerResponse(success=False, data=None, error=error)


@router.post("/log-event", response_model=LedgerResponse)
async def log_event(
    request: Request,
    context: Optional[ExamContext] = Depends(get_exam_context),
    db: Session = Depends(get_db)
):
    """Record one detected signal and return the escalation decision.

    Always answers 200; ``success`` carries the outcome so that the client can
    tell a refused report from a transport failure.
    """
    if context is None or context.user_id is None:
        return _failure("User not authenticated")
    if not context.session_id:
        return _failure("No active exam session")

    try:
        report = ViolationReport.model_validate_json(await request.body())
    except ValidationError:
        return _failure("Invalid request data")

    ledger = ViolationLedger(db)
    try:
        decision = await run_in_threadpool(
            ledger.record_violation, context, report.event_type, report.details
        )
    except NoActiveSessionError:
        return _failure("No active exam session")
    except LedgerError:
        return _failure("Internal server error")

    return LedgerResponse(success=True, data=decision, error=None)


@router.api_route("/log-event", methods=["GET", "PUT", "PATCH", "DELETE"], response_model=LedgerResponse)
async def log_event_invalid_method():
    return _failure("Invalid request method")


@router.get("/violations", response_model=List[ViolationEventOut])
def get_session_violations(
    context: ExamContext = Depends(require_exam_context),
    db: Session = Depends(get_db)
):
    """Events of the caller's latest attempt, newest first"""
    events = ViolationLedger(db).get_session_events(context)
    result = []
    for event in events:
        item = ViolationEventOut.model_validate(event)
        item.event_time_local = format_local_time(event.event_time)
        result.append(item)
    return result


@router.get("/statistics", response_model=ViolationStatistics)
def get_violation_statistics(
    context: ExamContext = Depends(require_exam_context),
    db: Session = Depends(get_db)
):
    return ViolationLedger(db).get_statistics(context)
