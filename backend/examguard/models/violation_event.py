from sqlalchemy import Column, Integer, String, DateTime, Index

from ..core.database import Base
from ..utils.timezone import get_server_now


class ViolationEvent(Base):
    __tablename__ = "exam_violations"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), nullable=False)
    user_id = Column(Integer, nullable=False)
    event_type = Column(String(50), nullable=False)
    event_time = Column(DateTime, nullable=False, default=get_server_now)
    details = Column(String(1000), nullable=True)

    __table_args__ = (
        Index("ix_exam_violations_owner_time", "session_id", "user_id", "event_time"),
    )

    def __repr__(self):
        return f"<ViolationEvent {self.event_type} for session {self.session_id}>"
