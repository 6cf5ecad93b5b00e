"""Session-owning base for the table services."""

from __future__ import annotations

from typing import TypeVar

from sqlalchemy.orm import Session

from app.database.db import new_session

T = TypeVar("T")


class BaseService:
    """Base class for services that operate on a SQLAlchemy session.

    Services own the session they open themselves; an injected session is
    shared with the caller, who stays responsible for closing it.
    """

    def __init__(self, db: Session | None = None) -> None:
        self._owns_session = db is None
        self.db = db or new_session()

    def commit(self) -> None:
        """Commit current transaction and rollback on failure."""
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def save(self, instance: T) -> T:
        """Add, commit and refresh a single row."""
        self.db.add(instance)
        self.commit()
        self.db.refresh(instance)
        return instance

    def rollback(self) -> None:
        self.db.rollback()

    def close(self) -> None:
        if self._owns_session:
            self.db.close()

    def __enter__(self) -> "BaseService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type:
            self.rollback()
        self.close()
