"""Engine and session factory for the FieldOps tables."""

from __future__ import annotations

import logging
from collections.abc import Generator

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import get_config

logger = logging.getLogger(__name__)

config = get_config()
DATABASE_URL = config.DATABASE_URL


def _build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        # Sessions are handed to FastAPI's threadpool.
        return create_engine(
            database_url,
            echo=config.DEBUG,
            connect_args={"check_same_thread": False},
        )
    return create_engine(database_url, echo=config.DEBUG, pool_pre_ping=True)


def _configure_engine(database_url: str) -> None:
    global DATABASE_URL, engine, SessionLocal
    DATABASE_URL = database_url
    engine = _build_engine(database_url)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


_configure_engine(DATABASE_URL)

Base = declarative_base()


def get_engine():
    return engine


def get_active_database_url() -> str:
    return DATABASE_URL


def reset_engine(database_url: str | None = None) -> None:
    """Rebind the engine and session factory, e.g. for ``init_db`` on another URL."""
    engine.dispose()
    _configure_engine(database_url or DATABASE_URL)


def new_session() -> Session:
    """Open a session on the currently configured engine."""
    return SessionLocal()


def get_db() -> Generator[Session, None, None]:
    """Yield a session for FastAPI dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def list_tables() -> list[str]:
    return inspect(engine).get_table_names()


def verify_database_connection() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception(
            "database.connection_failed",
            extra={
                "event": "database.connection_failed",
                "database_url_scheme": DATABASE_URL.split("://", 1)[0],
            },
        )
        return False
    return True
