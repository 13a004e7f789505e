from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ExamStartRequest(BaseModel):
    user_id: int = Field(..., ge=1)
    session_id: str = Field(..., min_length=1, max_length=64)


class ExamSessionOut(BaseModel):
    id: int
    session_id: str
    user_id: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    ended_reason: Optional[str] = None

    class Config:
        from_attributes = True
