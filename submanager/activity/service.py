"""Activity log: best-effort audit appends and the admin listing."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from submanager.activity.dao import ActivityLogDAO
from submanager.activity.models import ActionType, ActivityLog, ObjectType
from submanager.activity.schemas import ActivityLogRead, Actor
from submanager.query.table import SortConfig, apply_table_query

logger = logging.getLogger(__name__)

ACTIVITY_SEARCH_FIELDS = ["user_name", "object_name", "details", "action_type", "object_type"]


class ActivityLogger:
    """Appends immutable activity rows.

    Runs after the primary commit, so a failure here never undoes the
    operation being audited. Errors are rolled back and logged, not raised.
    """

    def __init__(self, db: Session):
        self.db = db
        self.dao = ActivityLogDAO(db)

    def record(
        self,
        actor_id: str,
        actor_name: str,
        actor_role: str,
        action: ActionType,
        object_type: ObjectType,
        object_id: Optional[str] = None,
        object_name: Optional[str] = None,
        details: Optional[str] = None,
    ) -> Optional[ActivityLog]:
        try:
            entry = self.dao.add(
                user_id=actor_id,
                user_name=actor_name,
                user_role=actor_role,
                action_type=ActionType(action).value,
                object_type=ObjectType(object_type).value,
                object_id=object_id,
                object_name=object_name,
                details=details,
            )
            self.db.commit()
            return entry
        except Exception:
            self.db.rollback()
            logger.exception(
                "Failed to record %s activity on %s %s", action, object_type, object_id
            )
            return None

    def record_for(
        self,
        actor: Optional[Actor],
        action: ActionType,
        object_type: ObjectType,
        object_id: Optional[str] = None,
        object_name: Optional[str] = None,
        details: Optional[str] = None,
    ) -> Optional[ActivityLog]:
        """Record on behalf of an actor snapshot; anonymous calls are not audited."""
        if actor is None:
            return None
        return self.record(
            actor.id, actor.name, actor.role, action, object_type, object_id, object_name, details
        )


class ActivityService:
    """Read side of the activity log."""

    def __init__(self, dao: ActivityLogDAO):
        self.dao = dao

    def list_activity(
        self,
        search: str = "",
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[SortConfig] = None,
    ) -> List[ActivityLogRead]:
        columns = set(ActivityLogRead.model_fields)
        filters = {k: v for k, v in (filters or {}).items() if k in columns}
        if sort is not None and sort.key not in columns:
            sort = None

        rows = [ActivityLogRead.model_validate(row).model_dump() for row in self.dao.get_all()]
        rows = apply_table_query(rows, search, ACTIVITY_SEARCH_FIELDS, filters, sort)
        return [ActivityLogRead.model_validate(row) for row in rows]

    def get_recent(self, limit: int = 10) -> List[ActivityLogRead]:
        return [ActivityLogRead.model_validate(row) for row in self.dao.get_recent(limit)]
