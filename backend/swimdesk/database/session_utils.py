"""
Dialect checks for code that behaves differently on PostgreSQL and SQLite.

Production runs on PostgreSQL with row locks and ON CONFLICT upserts;
local development and the test suite run on SQLite, which serializes
writers and spells the upsert ``INSERT OR IGNORE``.
"""

from sqlalchemy.orm import Session

POSTGRESQL = "postgresql"
SQLITE = "sqlite"


def get_dialect_name(session: Session, default: str = SQLITE) -> str:
    """Name of the dialect the session is bound to, lower-cased."""
    bind = session.get_bind()
    name = getattr(getattr(bind, "dialect", None), "name", None)
    return (name or default).lower()


def supports_row_locks(session: Session) -> bool:
    """True when ``SELECT ... FOR UPDATE`` actually locks (PostgreSQL only)."""
    return get_dialect_name(session) == POSTGRESQL
