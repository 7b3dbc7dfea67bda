"""Request-scoped database session."""

from typing import Iterator

from sqlalchemy.orm import Session

from ...database import get_db as _session_scope


def get_db() -> Iterator[Session]:
    """
    One session per request.

    Overridden in tests to hand every request the test's own session.
    """
    yield from _session_scope()
