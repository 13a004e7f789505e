from .violation import (
    ViolationReport,
    EscalationDecision,
    LedgerResponse,
    ViolationEventOut,
    ViolationStatistics,
    TimelineEntry,
)
from .exam_session import ExamStartRequest, ExamSessionOut

__all__ = [
    "ViolationReport",
    "EscalationDecision",
    "LedgerResponse",
    "ViolationEventOut",
    "ViolationStatistics",
    "TimelineEntry",
    "ExamStartRequest",
    "ExamSessionOut",
]
