from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from ..core.config import settings
from ..core.security import ExamContext, verify_session_token


def get_exam_context(request: Request) -> Optional[ExamContext]:
    """Identity carried by the ambient session cookie, if any."""
    token = request.cookies.get(settings.session_cookie_name)
    return verify_session_token(token) if token else None


def require_exam_context(
    context: Optional[ExamContext] = Depends(get_exam_context)
) -> ExamContext:
    if context is None or context.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    if not context.session_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No active exam session",
        )
    return context
