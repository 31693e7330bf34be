"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session, sessionmaker

from siteops.db.session import SessionLocal


def get_db_session() -> Generator[Session, None, None]:
    """Yield a request-scoped SQLAlchemy session."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_session_factory() -> sessionmaker:
    """Session factory used by report fan-out tasks (one session per task)."""

    return SessionLocal
