"""
Tests for the signed exam session credential
"""
from datetime import timedelta

import jwt

from examguard.core.config import settings
from examguard.core.security import ExamContext, create_session_token, verify_session_token


def test_round_trip():
    token = create_session_token(42, "midterm")

    assert verify_session_token(token) == ExamContext(user_id=42, session_id="midterm")


def test_blank_session_claim_keeps_user():
    context = verify_session_token(create_session_token(42, ""))

    assert context.user_id == 42
    assert context.session_id is None


def test_expired_token_rejected():
    token = create_session_token(42, "midterm", expires_delta=timedelta(seconds=-5))

    assert verify_session_token(token) is None


def test_foreign_signature_rejected():
    token = jwt.encode({"user_id": 42, "session_id": "midterm", "type": "exam_session"}, "other-key", algorithm="HS256")

    assert verify_session_token(token) is None


def test_other_token_type_rejected():
    token = jwt.encode({"user_id": 42, "session_id": "midterm", "type": "access"}, settings.secret_key,
                       algorithm=settings.algorithm)

    assert verify_session_token(token) is None


def test_missing_token():
    assert verify_session_token("") is None
