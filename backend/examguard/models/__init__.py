from .exam_session import ExamSession
from .violation_event import ViolationEvent

__all__ = [
    "ExamSession",
    "ViolationEvent",
]
