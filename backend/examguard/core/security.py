from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from .config import settings


@dataclass(frozen=True)
class ExamContext:
    """Identity bound to the request's session credential."""
    user_id: Optional[int]
    session_id: Optional[str]


def create_session_token(user_id: int, session_id: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.session_expire_minutes))
    payload = {
        "user_id": user_id,
        "session_id": session_id,
        "type": "exam_session",
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def verify_session_token(token: str) -> Optional[ExamContext]:
    """Decode a session cookie; ``None`` when it is missing, expired or forged.

    A valid token without an exam session claim still yields a context so
    that callers can tell "not logged in" apart from "no exam running".
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.PyJWTError:
        return None

    if payload.get("type") != "exam_session":
        return None

    user_id = payload.get("user_id")
    session_id = payload.get("session_id")
    return ExamContext(
        user_id=int(user_id) if user_id is not None else None,
        session_id=str(session_id) if session_id else None,
    )
