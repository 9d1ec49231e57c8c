# submanager/core/base_service.py
"""Generic base service for business logic orchestration."""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from submanager.activity.models import ActionType, ObjectType
from submanager.activity.schemas import Actor
from submanager.activity.service import ActivityLogger
from submanager.core.base_dao import BaseDAO
from submanager.core.exceptions import DuplicateEntity, NotFound, StorageError
from submanager.query.table import SortConfig, apply_table_query

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Commit everything staged inside the block, or nothing.

    Integrity violations surface as DuplicateEntity, any other database
    failure as StorageError. Either way the session is rolled back first.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity violation, transaction rolled back: %s", exc.orig)
        raise DuplicateEntity() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure, transaction rolled back")
        raise StorageError() from exc
    except Exception:
        db.rollback()
        raise


class BaseService(Generic[ModelType, CreateSchemaType, UpdateSchemaType, ResponseSchemaType], ABC):
    """Generic service for business logic orchestration.

    Each mutation runs validation first, then the write and its side effects
    in one unit of work, then a best-effort activity record.
    """

    response_model: Type[ResponseSchemaType]
    object_type: ObjectType
    object_label: str = "record"
    search_fields: List[str] = ["id", "name"]
    composite_filters: List[str] = []

    def __init__(self, dao: BaseDAO[ModelType], actor: Optional[Actor] = None):
        self.dao = dao
        self.db: Session = dao.db
        self.actor = actor
        self.activity = ActivityLogger(dao.db)

    def get_all(self, **filters) -> List[ResponseSchemaType]:
        """Get all records, newest first."""
        return [self._to_response(record) for record in self.dao.get_all(**filters)]

    def list_records(
        self,
        search: str = "",
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[SortConfig] = None,
    ) -> List[ResponseSchemaType]:
        """Newest-first rows narrowed by search and column filters, then sorted.

        Filters on names that are neither a response column nor a composite
        filter are ignored, as is a sort on an unknown column.
        """
        columns = set(self.response_model.model_fields)
        allowed = columns | set(self.composite_filters)
        filters = {k: v for k, v in (filters or {}).items() if k in allowed}
        if sort is not None and sort.key not in columns:
            sort = None

        rows = [response.model_dump() for response in self.get_all()]
        rows = apply_table_query(
            rows, search, self.search_fields, filters, sort, **self._query_context()
        )
        return [self.response_model.model_validate(row) for row in rows]

    def get_by_id(self, id: str) -> ResponseSchemaType:
        return self._to_response(self._get_or_404(id))

    def create(self, create_data: CreateSchemaType) -> ResponseSchemaType:
        """Create new record with validation and business logic."""
        self._validate_create(create_data)

        with unit_of_work(self.db):
            record = self._create_record(create_data)
            self._post_create(record, create_data)

        self._record_activity(ActionType.CREATE, record, self._create_details(record))
        return self._to_response(record)

    def update(self, id: str, update_data: UpdateSchemaType) -> ResponseSchemaType:
        """Apply a partial patch; NotFound when the id does not exist."""
        record = self._get_or_404(id)
        self._validate_update(record, update_data)

        with unit_of_work(self.db):
            self._pre_update(record, update_data)
            data = self._update_values(record, update_data)
            record = self.dao.update(record, **data)
            self._post_update(record, update_data)

        self._record_activity(ActionType.UPDATE, record, self._update_details(record))
        return self._to_response(record)

    def delete(self, id: str) -> None:
        """Delete a record and its dependents. Deleting a missing id is a no-op."""
        record = self.dao.get_by_id(id)
        if record is None:
            return
        self._validate_delete(record)

        record_id, record_name = record.id, self._object_name(record)
        with unit_of_work(self.db):
            self._pre_delete(record)
            self.dao.delete(record)
            self._post_delete(record)

        self._log(
            ActionType.DELETE, record_id, record_name,
            f"Deleted {self.object_label}: {record_name}",
        )

    def count(self, **filters) -> int:
        return self.dao.count(**filters)

    # ===== HELPERS =====

    def _get_or_404(self, id: str) -> ModelType:
        record = self.dao.get_by_id(id)
        if record is None:
            raise NotFound(f"{self.object_label.capitalize()} not found")
        return record

    def _record_activity(self, action: ActionType, record: ModelType, details: str) -> None:
        self._log(action, record.id, self._object_name(record), details)

    def _log(
        self, action: ActionType, object_id: Optional[str], object_name: Optional[str], details: str
    ) -> None:
        self.activity.record_for(
            self.actor, action, self.object_type, object_id, object_name, details
        )

    # ===== HOOKS (OVERRIDE IN SUBCLASSES) =====

    def _to_response(self, record: ModelType) -> ResponseSchemaType:
        """Convert database model to response schema."""
        return self.response_model.model_validate(record)

    def _query_context(self) -> Dict[str, Any]:
        """Extra keyword arguments for apply_table_query (e.g. package names)."""
        return {}

    def _object_name(self, record: ModelType) -> str:
        return getattr(record, "name", None) or record.id

    def _create_details(self, record: ModelType) -> str:
        return f"Created new {self.object_label}: {self._object_name(record)}"

    def _update_details(self, record: ModelType) -> str:
        return f"Updated {self.object_label}: {self._object_name(record)}"

    def _create_record(self, create_data: CreateSchemaType) -> ModelType:
        return self.dao.add(**create_data.model_dump(exclude_none=True))

    def _update_values(self, record: ModelType, update_data: UpdateSchemaType) -> Dict[str, Any]:
        """Column values to patch, by default the fields the client sent."""
        return self._patch(update_data.model_dump(exclude_unset=True))

    def _patch(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Drop explicit nulls aimed at columns that cannot hold them."""
        columns = self.dao.model.__table__.columns
        return {
            key: value
            for key, value in data.items()
            if value is not None or (key in columns and columns[key].nullable)
        }

    def _validate_create(self, create_data: CreateSchemaType) -> None:
        """Validate data before creation. Override for custom validation."""
        pass

    def _validate_update(self, record: ModelType, update_data: UpdateSchemaType) -> None:
        """Validate data before update. Override for custom validation."""
        pass

    def _validate_delete(self, record: ModelType) -> None:
        """Validate before deletion. Override for custom validation."""
        pass

    def _post_create(self, record: ModelType, create_data: CreateSchemaType) -> None:
        """Side effects inside the creating transaction (counters)."""
        pass

    def _pre_update(self, record: ModelType, update_data: UpdateSchemaType) -> None:
        """Side effects that need the record's values before the patch."""
        pass

    def _post_update(self, record: ModelType, update_data: UpdateSchemaType) -> None:
        pass

    def _pre_delete(self, record: ModelType) -> None:
        """Cascades and counter adjustments before the row goes away."""
        pass

    def _post_delete(self, record: ModelType) -> None:
        pass
