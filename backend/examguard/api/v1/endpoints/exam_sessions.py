from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from ....core.config import settings
from ....core.database import get_db
from ....core.security import ExamContext, create_session_token
from ....api.deps import require_exam_context
from ....schemas.exam_session import ExamStartRequest, ExamSessionOut
from ....services.exam_session_service import ExamSessionService

router = APIRouter()


@router.post("/start", response_model=ExamSessionOut)
def start_exam_session(
    payload: ExamStartRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """Open a fresh attempt and bind it to the session cookie"""
    exam_session = ExamSessionService(db).start_session(payload.user_id, payload.session_id)
    token = create_session_token(payload.user_id, payload.session_id)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.session_expire_minutes * 60,
    )
    return exam_session


@router.get("/current", response_model=ExamSessionOut)
def get_current_exam_session(
    context: ExamContext = Depends(require_exam_context),
    db: Session = Depends(get_db)
):
    exam_session = ExamSessionService(db).get_current_session(context.user_id, context.session_id)
    if exam_session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active exam session")
    return exam_session


@router.post("/finish", response_model=ExamSessionOut)
def finish_exam_session(
    context: ExamContext = Depends(require_exam_context),
    db: Session = Depends(get_db)
):
    exam_session = ExamSessionService(db).end_session(context.user_id, context.session_id, reason="submitted")
    if exam_session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active exam session")
    return exam_session
