"""Service layer for the request log."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from submanager.core.database import SessionLocal
from submanager.logging.dao import RequestLogDAO
from submanager.logging.models import RequestLog
from submanager.logging.schemas import RequestLogRead

logger = logging.getLogger(__name__)


class RequestLogService:
    def __init__(self, dao: RequestLogDAO):
        self.dao = dao

    def get_logs(
        self,
        limit: int = 50,
        offset: int = 0,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[RequestLogRead], int]:
        """One page of logs, newest first, with the total matching count."""
        rows = self.dao.get_logs_with_filters(limit, offset, status_min, status_max, search)
        total = self.dao.count_logs_with_filters(status_min, status_max, search)
        return [RequestLogRead.model_validate(row) for row in rows], total


def write_request_log(session_factory, **fields) -> None:
    """Persist one request log row; failures are logged and swallowed."""
    try:
        with session_factory() as session:
            session.add(RequestLog(**fields))
            session.commit()
    except SQLAlchemyError:
        logger.exception("Failed to write request log for %s %s", fields.get("method"), fields.get("path"))


def get_session_factory(app):
    """Session factory the app was built with (tests swap in their own)."""
    return getattr(app.state, "session_factory", None) or SessionLocal
