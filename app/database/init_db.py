"""Create the application tables on the configured database."""

from __future__ import annotations

import logging

import app.database.db as db_module
from app.core.logging_config import configure_logging
from app.database.models import Base

logger = logging.getLogger(__name__)


def init_db(database_url: str | None = None) -> list[str]:
    """Create any missing tables and return the table names now present."""
    if database_url:
        db_module.reset_engine(database_url)
    engine = db_module.get_engine()
    Base.metadata.create_all(bind=engine)
    tables = sorted(Base.metadata.tables.keys())
    logger.info(
        "database.init.completed",
        extra={
            "event": "database.init.completed",
            "database_url_scheme": db_module.get_active_database_url().split("://", 1)[0],
            "tables": tables,
        },
    )
    return tables


if __name__ == "__main__":
    configure_logging()
    init_db()
