import logging
from typing import Optional, List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models.exam_session import ExamSession
from ..utils.timezone import get_server_now

logger = logging.getLogger(__name__)


class ExamSessionService:
    """Lifecycle of exam attempts.

    Opening an attempt is owned by the exam flow; the ledger only ever closes
    one, with reason ``terminated``.
    """

    def __init__(self, db: Session):
        self.db = db

    def start_session(self, user_id: int, session_id: str) -> ExamSession:
        now = get_server_now()
        stale = self.db.execute(
            update(ExamSession)
            .where(
                ExamSession.session_id == session_id,
                ExamSession.user_id == user_id,
                ExamSession.ended_at.is_(None)
            )
            .values(ended_at=now, ended_reason="restarted")
        )
        if stale.rowcount:
            logger.info(f"Closed {stale.rowcount} stale attempt(s) for session {session_id} user {user_id}")

        exam_session = ExamSession(session_id=session_id, user_id=user_id, started_at=now)
        self.db.add(exam_session)
        self.db.commit()
        self.db.refresh(exam_session)
        logger.info(f"Exam session {session_id} started for user {user_id}")
        return exam_session

    def get_current_session(self, user_id: int, session_id: str) -> Optional[ExamSession]:
        return self.db.execute(
            select(ExamSession).where(
                ExamSession.session_id == session_id,
                ExamSession.user_id == user_id,
                ExamSession.ended_at.is_(None)
            )
        ).scalars().first()

    def get_latest_session(self, user_id: int, session_id: str) -> Optional[ExamSession]:
        return self.db.execute(
            select(ExamSession)
            .where(ExamSession.session_id == session_id, ExamSession.user_id == user_id)
            .order_by(ExamSession.started_at.desc(), ExamSession.id.desc())
            .limit(1)
        ).scalars().first()

    def end_session(self, user_id: int, session_id: str, reason: str = "submitted") -> Optional[ExamSession]:
        """Close the open attempt; returns ``None`` if nothing was open."""
        current = self.get_current_session(user_id, session_id)
        if current is None:
            self.db.rollback()
            return None

        result = self.db.execute(
            update(ExamSession)
            .where(ExamSession.id == current.id, ExamSession.ended_at.is_(None))
            .values(ended_at=get_server_now(), ended_reason=reason)
        )
        self.db.commit()
        if not result.rowcount:
            return None
        self.db.refresh(current)
        logger.info(f"Exam session {session_id} for user {user_id} ended: {reason}")
        return current

    def list_sessions(self, user_id: Optional[int] = None, session_id: Optional[str] = None) -> List[ExamSession]:
        query = select(ExamSession).order_by(ExamSession.started_at.desc())
        if user_id is not None:
            query = query.where(ExamSession.user_id == user_id)
        if session_id is not None:
            query = query.where(ExamSession.session_id == session_id)
        return list(self.db.execute(query).scalars().all())
