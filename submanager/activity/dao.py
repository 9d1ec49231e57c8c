"""Data Access Object for the activity log."""

from typing import List

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from submanager.activity.models import ActivityLog
from submanager.core.base_dao import BaseDAO


class ActivityLogDAO(BaseDAO[ActivityLog]):
    """Activity rows are only ever appended and read."""

    def __init__(self, db_session: Session):
        super().__init__(ActivityLog, db_session)

    def get_all(self, **filters) -> List[ActivityLog]:
        """Override base method to order by timestamp (most recent first)."""
        query = select(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key) and value is not None:
                query = query.where(getattr(self.model, key) == value)

        query = query.order_by(desc(self.model.timestamp))
        return list(self.db.execute(query).scalars().all())

    def get_recent(self, limit: int = 10) -> List[ActivityLog]:
        query = select(self.model).order_by(desc(self.model.timestamp)).limit(limit)
        return list(self.db.execute(query).scalars().all())
