"""Activity log writes and reads for the entity timelines."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.core.enums import ActivityType, EntityType
from app.database.models import ActivityLog
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)


def _value(item: Any) -> str:
    return item.value if hasattr(item, "value") else str(item)


class ActivityService(BaseService):
    """Best-effort activity logging; failures are logged, never raised."""

    def log_activity(
        self,
        activity_type: ActivityType | str,
        entity_type: EntityType | str,
        entity_id: str,
        description: str,
        metadata: dict[str, Any] | None = None,
        created_by: str | None = None,
    ) -> ActivityLog | None:
        activity = ActivityLog(
            activity_type=_value(activity_type),
            entity_type=EntityType(_value(entity_type)).value,
            entity_id=entity_id,
            description=description,
            details=metadata,
            created_by=created_by,
        )
        try:
            return self.save(activity)
        except SQLAlchemyError as exc:
            logger.error(
                "activity.log.failed",
                extra={
                    "event": "activity.log.failed",
                    "activity_type": activity.activity_type,
                    "entity_type": activity.entity_type,
                    "entity_id": entity_id,
                    "error": str(exc),
                },
            )
            return None

    def get_entity_activities(self, entity_type: EntityType | str, entity_id: str) -> list[ActivityLog]:
        try:
            return (
                self.db.query(ActivityLog)
                .filter(
                    ActivityLog.entity_type == _value(entity_type),
                    ActivityLog.entity_id == entity_id,
                )
                .order_by(ActivityLog.created_at.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error(
                "activity.fetch.failed",
                extra={"event": "activity.fetch.failed", "entity_id": entity_id, "error": str(exc)},
            )
            return []
