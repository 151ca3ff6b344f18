"""
Pytest fixtures for testing
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

import taskboard.infrastructure.db.models  # noqa: F401
from taskboard.api.deps import get_db
from taskboard.application.lists import CreateDefaultListUseCase
from taskboard.config import Settings
from taskboard.domain import clock
from taskboard.domain.ids import new_id
from taskboard.infrastructure.db.models import UserModel
from taskboard.infrastructure.db.session import Base
from taskboard.infrastructure.repositories.statuses import ensure_statuses
from taskboard.main import create_app


TODAY = date(2024, 1, 10)


@pytest.fixture
def db_engine():
    """In-memory SQLite shared by every session of a test (foreign keys enforced)"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    with SessionLocal() as session:
        ensure_statuses(session)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for tests"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def today(monkeypatch):
    """Pin the application clock to TODAY"""
    monkeypatch.setattr(clock, "utc_today", lambda: TODAY)
    return TODAY


def _make_user(db: Session, email: str = "user@example.com") -> str:
    """Insert a user with its Inbox and return the user id"""
    now = clock.utc_now()
    user = UserModel(id=new_id(), email=email, password_hash="x", created_at=now, updated_at=now)
    db.add(user)
    db.commit()
    CreateDefaultListUseCase(db).execute(user.id)
    return user.id


@pytest.fixture
def user_id(db_session) -> str:
    """Sample user (with Inbox) for tests"""
    return _make_user(db_session)


@pytest.fixture
def other_user_id(db_session) -> str:
    return _make_user(db_session, email="other@example.com")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ENV="local",
        DATABASE_URL="sqlite://",
        JWT_SIGN_KEY="test-sign-key",
        HTTP_REQUEST_LIMIT_BY_IP=10_000,
    )


@pytest.fixture
def client(settings, session_factory):
    """TestClient wired to the in-memory database"""
    app = create_app(settings)

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app) as test_client:
        yield test_client


def _register(client: TestClient, email: str = "user@example.com", password: str = "secret123",
              user_agent: str = "pytest") -> dict:
    """Register through the API and return the token payload"""
    response = client.post(
        "/register",
        json={"email": email, "password": password},
        headers={"User-Agent": user_agent},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def auth_headers(client) -> dict:
    """Authorization header of a freshly registered user"""
    data = _register(client)
    return {"Authorization": f"Bearer {data['access_token']}", "User-Agent": "pytest"}


@pytest.fixture
def register_user(client):
    """Factory: register another user through the API"""
    def _factory(email: str, password: str = "secret123", user_agent: str = "pytest") -> dict:
        return _register(client, email, password, user_agent)
    return _factory


@pytest.fixture
def make_user(db_session):
    """Factory: insert another user (with Inbox)"""
    def _factory(email: str) -> str:
        return _make_user(db_session, email)
    return _factory
