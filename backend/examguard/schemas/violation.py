from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional, Literal, Dict, List

from ..core.config import settings


class ViolationReport(BaseModel):
    """Body of a client report. Over-long values are clipped, not refused."""
    event_type: str
    details: Optional[str] = None

    @field_validator("event_type")
    @classmethod
    def clip_event_type(cls, value: str) -> str:
        value = value.strip()[:settings.max_event_type_length]
        if not value:
            raise ValueError("event_type must not be empty")
        return value

    @field_validator("details")
    @classmethod
    def clip_details(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip()[:settings.max_details_length]


class EscalationDecision(BaseModel):
    violations: int
    action: Literal["ok", "warn", "end"]
    message: str


class LedgerResponse(BaseModel):
    success: bool
    data: Optional[EscalationDecision] = None
    error: Optional[str] = None


class ViolationEventOut(BaseModel):
    id: int
    session_id: str
    user_id: int
    event_type: str
    event_time: datetime
    event_time_local: Optional[str] = None
    details: Optional[str] = None

    class Config:
        from_attributes = True


class TimelineEntry(BaseModel):
    event_time: datetime
    event_type: str


class ViolationStatistics(BaseModel):
    session_id: str
    total_violations: int
    by_type: Dict[str, int]
    timeline: List[TimelineEntry]
