import logging
from collections import Counter
from typing import Optional, List

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.security import ExamContext
from ..models.exam_session import ExamSession
from ..models.violation_event import ViolationEvent
from ..schemas.violation import EscalationDecision, ViolationStatistics, TimelineEntry
from ..utils.timezone import get_server_now

logger = logging.getLogger(__name__)

MESSAGE_OK = "Violation logged"
MESSAGE_WARN = "Warning: Next violation will terminate the exam"
MESSAGE_END = "Exam terminated due to multiple violations"
MESSAGE_ALREADY_ENDED = "Exam session has already ended"

TERMINATED_REASON = "terminated"


class LedgerError(Exception):
    """The unit of work failed and was rolled back."""


class NoActiveSessionError(LedgerError):
    pass


def decide(violations: int) -> EscalationDecision:
    """Map an authoritative count onto the escalation table."""
    if violations >= settings.end_threshold:
        return EscalationDecision(violations=violations, action="end", message=MESSAGE_END)
    if violations == settings.warn_threshold:
        return EscalationDecision(violations=violations, action="warn", message=MESSAGE_WARN)
    return EscalationDecision(violations=violations, action="ok", message=MESSAGE_OK)


class ViolationLedger:
    def __init__(self, db: Session):
        self.db = db

    def _lock_session(self, context: ExamContext) -> Optional[ExamSession]:
        """Row-lock the attempt a report belongs to.

        The open attempt wins; if there is none the most recent one is used so
        that late reports against a terminated attempt are still recorded.
        """
        owner = (
            ExamSession.session_id == context.session_id,
            ExamSession.user_id == context.user_id,
        )
        current = self.db.execute(
            select(ExamSession)
            .where(*owner, ExamSession.ended_at.is_(None))
            .with_for_update()
        ).scalars().first()
        if current is not None:
            return current

        return self.db.execute(
            select(ExamSession)
            .where(*owner)
            .order_by(ExamSession.started_at.desc(), ExamSession.id.desc())
            .limit(1)
            .with_for_update()
        ).scalars().first()

    def _count_since(self, context: ExamContext, started_at) -> int:
        return self.db.execute(
            select(func.count(ViolationEvent.id)).where(
                ViolationEvent.session_id == context.session_id,
                ViolationEvent.user_id == context.user_id,
                ViolationEvent.event_time >= started_at
            )
        ).scalar_one()

    def record_violation(self, context: ExamContext, event_type: str, details: Optional[str] = None) -> EscalationDecision:
        """Append one event and return the authoritative decision.

        Runs as a single transaction: lock the attempt, insert, count, close
        the attempt when the end threshold is reached, commit.
        """
        try:
            exam_session = self._lock_session(context)
            if exam_session is None:
                raise NoActiveSessionError("No active exam session")

            now = get_server_now()
            self.db.add(ViolationEvent(
                session_id=context.session_id,
                user_id=context.user_id,
                event_type=event_type[:settings.max_event_type_length],
                event_time=now,
                details=details[:settings.max_details_length] if details is not None else None
            ))
            self.db.flush()

            violations = self._count_since(context, exam_session.started_at)

            if exam_session.ended_at is not None:
                message = MESSAGE_END if exam_session.ended_reason == TERMINATED_REASON else MESSAGE_ALREADY_ENDED
                decision = EscalationDecision(violations=violations, action="end", message=message)
            else:
                decision = decide(violations)
                if decision.action == "end":
                    closed = self.db.execute(
                        update(ExamSession)
                        .where(ExamSession.id == exam_session.id, ExamSession.ended_at.is_(None))
                        .values(ended_at=now, ended_reason=TERMINATED_REASON)
                        .execution_options(synchronize_session=False)
                    )
                    if closed.rowcount:
                        logger.warning(
                            f"Exam session {context.session_id} terminated for user {context.user_id} "
                            f"after {violations} violations"
                        )

            self.db.commit()
        except NoActiveSessionError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to record violation for session {context.session_id}: {e}", exc_info=True)
            raise LedgerError("Internal server error") from e

        logger.info(
            f"Violation {event_type} recorded for session {context.session_id} "
            f"user {context.user_id}: count={decision.violations} action={decision.action}"
        )
        return decision

    def get_session_events(self, context: ExamContext) -> List[ViolationEvent]:
        exam_session = self._latest_session(context)
        if exam_session is None:
            return []
        return list(self.db.execute(
            select(ViolationEvent)
            .where(
                ViolationEvent.session_id == context.session_id,
                ViolationEvent.user_id == context.user_id,
                ViolationEvent.event_time >= exam_session.started_at
            )
            .order_by(ViolationEvent.event_time.desc(), ViolationEvent.id.desc())
        ).scalars().all())

    def get_statistics(self, context: ExamContext) -> ViolationStatistics:
        events = sorted(self.get_session_events(context), key=lambda e: (e.event_time, e.id))
        return ViolationStatistics(
            session_id=context.session_id,
            total_violations=len(events),
            by_type=dict(Counter(e.event_type for e in events)),
            timeline=[TimelineEntry(event_time=e.event_time, event_type=e.event_type) for e in events]
        )

    def _latest_session(self, context: ExamContext) -> Optional[ExamSession]:
        return self.db.execute(
            select(ExamSession)
            .where(ExamSession.session_id == context.session_id, ExamSession.user_id == context.user_id)
            .order_by(ExamSession.started_at.desc(), ExamSession.id.desc())
            .limit(1)
        ).scalars().first()
