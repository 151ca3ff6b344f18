"""
Database session management (SQLAlchemy)
"""
from contextlib import contextmanager
from typing import Iterator

import psycopg
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from taskboard.config import Settings, get_settings


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all ORM models
    """
    pass


# Singleton engine and session factory
_engine = None
_SessionLocal = None


def build_engine(settings: Settings):
    """
    Create an engine from settings

    PostgreSQL connections get `statement_timeout = HTTP_TIMEOUT`, so SQL
    belonging to a request that ran out of time is cancelled by the server.
    """
    url = settings.get_sqlalchemy_url()
    if not url.startswith("postgresql"):
        return create_engine(url, pool_pre_ping=True)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        pool_recycle=settings.DB_IDLE_TIMEOUT,
        pool_timeout=settings.DB_DIAL_TIMEOUT,
        connect_args={
            "connect_timeout": settings.DB_DIAL_TIMEOUT,
            "options": f"-c statement_timeout={settings.HTTP_TIMEOUT * 1000}",
        },
    )


def get_engine():
    """Get or create SQLAlchemy engine (singleton)"""
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings())
    return _engine


def get_session_factory():
    """Get or create session factory (singleton)"""
    global _SessionLocal
    if _SessionLocal is None:
        engine = get_engine()
        _SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency - opens a session and always closes it

    Usage:
        @router.get("/user/lists")
        def get_lists(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Unit of work: commit on success, roll back on any failure

    Nested blocks join the outermost one, so use cases can call each other
    and still commit exactly once.

    Usage:
        with transaction(self.db):
            repo.create_list(...)
            repo.create_heading(...)
    """
    depth = db.info.get("tx_depth", 0)
    db.info["tx_depth"] = depth + 1
    try:
        yield db
        if depth == 0:
            db.commit()
    except Exception:
        if depth == 0:
            db.rollback()
        raise
    finally:
        db.info["tx_depth"] = depth


def check_db_connection() -> None:
    """
    Readiness check - PostgreSQL answers SELECT 1 (raw psycopg)

    Raises:
        psycopg.OperationalError: database is unreachable
    """
    settings = get_settings()
    with psycopg.connect(settings.DATABASE_URL, connect_timeout=settings.DB_DIAL_TIMEOUT) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
