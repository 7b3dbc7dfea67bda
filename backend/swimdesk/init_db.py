# backend/swimdesk/init_db.py
"""Create all tables from the ORM metadata."""

import logging

from sqlalchemy.engine import Engine

from swimdesk import models  # noqa: F401  registers every table on Base.metadata
from swimdesk.database import Base, engine

logger = logging.getLogger(__name__)


def init_db(bind: Engine | None = None) -> None:
    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Database tables ensured on %s", target.url.render_as_string(hide_password=True))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
