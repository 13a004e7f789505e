"""
Pytest configuration for examguard tests
"""
import os
import tempfile

import pytest

_db_dir = tempfile.mkdtemp(prefix="examguard-tests-")
os.environ["SQLITE_PATH"] = os.path.join(_db_dir, "examguard-test.db")
os.environ.pop("POSTGRES_HOST", None)
os.environ["SECRET_KEY"] = "test-secret-key-examguard-32-chars-min"

from fastapi.testclient import TestClient  # noqa: E402

from examguard.core.config import settings  # noqa: E402
from examguard.core.database import Base, SessionLocal, engine, create_db_and_tables  # noqa: E402
from examguard.core.security import ExamContext, create_session_token  # noqa: E402
from examguard.services.exam_session_service import ExamSessionService  # noqa: E402


@pytest.fixture(autouse=True)
def clean_database():
    """Fresh tables for every test"""
    Base.metadata.drop_all(engine)
    create_db_and_tables()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def start_exam():
    """Open an attempt in its own short-lived database session"""
    def _start(user_id: int = 1, session_id: str = "exam-1"):
        session = SessionLocal()
        try:
            exam_session = ExamSessionService(session).start_session(user_id, session_id)
            return exam_session.id
        finally:
            session.close()
    return _start


@pytest.fixture
def context():
    return ExamContext(user_id=1, session_id="exam-1")


@pytest.fixture
def app():
    from examguard.main import app
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_client(client):
    """Client carrying the session cookie for user 1 / exam-1"""
    client.cookies.set(settings.session_cookie_name, create_session_token(1, "exam-1"))
    return client
