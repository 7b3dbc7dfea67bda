"""
Engine, session factory and declarative base.

``get_db`` is the request-scoped unit of work: commit when the request
finishes cleanly, roll back otherwise.
"""

import logging
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from swimdesk.core.config import settings

logger = logging.getLogger(__name__)

POSTGRES_POOL: Dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 5,  # seconds; exhaustion surfaces as STORE_UNAVAILABLE
    "pool_recycle": 300,
    "pool_pre_ping": True,
}


def _sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_url: str) -> Engine:
    """Engine for ``db_url``; SQLite gets cross-thread access and enforced foreign keys."""
    if db_url.startswith("sqlite"):
        built = create_engine(db_url, echo=settings.database_echo, connect_args={"check_same_thread": False})
        event.listen(built, "connect", _sqlite_foreign_keys)
    else:
        built = create_engine(db_url, echo=settings.database_echo, **POSTGRES_POOL)
    logger.debug("Database engine created for dialect %s", built.dialect.name)
    return built


engine: Engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db"]
