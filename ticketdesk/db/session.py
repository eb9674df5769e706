from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ticketdesk.settings import get_settings


_settings = get_settings()

engine = create_engine(
    _settings.resolved_db_url(),
    connect_args={"check_same_thread": False} if _settings.resolved_db_url().startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """
    One session per request.

    Nothing role-related is cached on the session across requests: every
    authorization decision re-reads the role table, so concurrent
    administrators see each other's writes on their next request.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
