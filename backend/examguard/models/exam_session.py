from sqlalchemy import Column, String, DateTime, Integer, Index

from ..core.database import Base
from ..utils.timezone import get_server_now


class ExamSession(Base):
    """One exam attempt. At most one row per (user_id, session_id) is open."""
    __tablename__ = "exam_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), nullable=False)
    user_id = Column(Integer, nullable=False)
    started_at = Column(DateTime, nullable=False, default=get_server_now)
    ended_at = Column(DateTime, nullable=True)
    ended_reason = Column(String(32), nullable=True)

    __table_args__ = (
        Index("ix_exam_sessions_owner", "session_id", "user_id"),
    )

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def __repr__(self):
        return f"<ExamSession {self.session_id} user={self.user_id} ended={self.ended_reason}>"
