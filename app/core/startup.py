"""Process bootstrap: logging, schema and connectivity checks."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from app.core.config import get_config
from app.core.exceptions import ConfigurationError
from app.core.logging_config import configure_logging
from app.database.db import list_tables, verify_database_connection
from app.database.init_db import init_db

logger = logging.getLogger(__name__)

CONVERSION_TABLES = ("leads", "customers", "properties", "proposals", "activity_logs")


def missing_tables() -> list[str]:
    """Conversion tables not present on the bound database."""
    present = set(list_tables())
    return [name for name in CONVERSION_TABLES if name not in present]


def validate_startup_config() -> None:
    """Check the database is reachable and carries every conversion table.

    An unreachable database only aborts startup when
    ``DB_CONNECTIVITY_REQUIRED`` is set. Missing tables abort in production
    and are reported as a warning elsewhere.
    """
    config = get_config()
    if not verify_database_connection():
        if config.DB_CONNECTIVITY_REQUIRED:
            raise RuntimeError("Database connectivity check failed.")
        logger.warning(
            "startup.database.unreachable",
            extra={"event": "startup.database.unreachable"},
        )
        return

    missing = missing_tables()
    if missing and config.is_production:
        raise ConfigurationError(
            f"Database is missing tables: {', '.join(missing)}. Run `python -m app.database.init_db`."
        )
    if missing:
        logger.warning(
            "startup.database.tables_missing",
            extra={"event": "startup.database.tables_missing", "tables": missing},
        )

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": config.ENV,
            "existing_customer_policy": config.EXISTING_CUSTOMER_POLICY,
            "dsny_host": urlparse(config.DSNY_API_URL).hostname,
            "dsny_timeout_seconds": config.DSNY_TIMEOUT_SECONDS,
        },
    )


def bootstrap(create_tables: bool = False) -> None:
    configure_logging()
    if create_tables:
        init_db()
    validate_startup_config()
