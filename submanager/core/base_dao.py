# submanager/core/base_dao.py
"""Generic base DAO for common database operations."""

from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import and_, desc, func, select
from sqlalchemy.orm import Session

from submanager.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType], ABC):
    """Generic DAO for common database operations.

    Write methods only flush. Committing or rolling back is the job of the
    service's unit of work so several writes land in one transaction.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def get_all(self, **filters) -> List[ModelType]:
        """Get all records, newest first, with optional equality filtering."""
        query = select(self.model)

        if filters:
            filter_conditions = []
            for key, value in filters.items():
                if hasattr(self.model, key) and value is not None:
                    filter_conditions.append(getattr(self.model, key) == value)
            if filter_conditions:
                query = query.where(and_(*filter_conditions))

        if hasattr(self.model, "created_at"):
            query = query.order_by(desc(self.model.created_at))

        result = self.db.execute(query)
        return list(result.scalars().all())

    def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get record by ID."""
        return self.db.get(self.model, id)

    def get_by_field(self, field_name: str, value: Any) -> Optional[ModelType]:
        """Get single record by field value."""
        if not hasattr(self.model, field_name):
            return None

        query = select(self.model).where(getattr(self.model, field_name) == value)
        result = self.db.execute(query)
        return result.scalars().first()

    def get_all_by_field(self, field_name: str, value: Any) -> List[ModelType]:
        """Get all records by field value."""
        if not hasattr(self.model, field_name):
            return []

        query = select(self.model).where(getattr(self.model, field_name) == value)
        result = self.db.execute(query)
        return list(result.scalars().all())

    def exists_case_insensitive(
        self, field_name: str, value: str, exclude_id: Optional[str] = None
    ) -> bool:
        """Check whether another record already uses value (ignoring case)."""
        column = getattr(self.model, field_name)
        query = select(func.count()).select_from(self.model).where(
            func.lower(column) == value.strip().lower()
        )
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        return self.db.execute(query).scalar_one() > 0

    def add(self, **data) -> ModelType:
        """Stage a new record and flush it so defaults and ids are populated."""
        db_obj = self.model(**data)
        self.db.add(db_obj)
        self.db.flush()
        return db_obj

    def update(self, db_obj: ModelType, **data) -> ModelType:
        """Apply a partial patch to an existing record."""
        for field, value in data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.db.flush()
        return db_obj

    def delete(self, db_obj: ModelType) -> None:
        self.db.delete(db_obj)
        self.db.flush()

    def count(self, **filters) -> int:
        """Count records with optional filtering."""
        query = select(func.count()).select_from(self.model)

        if filters:
            filter_conditions = []
            for key, value in filters.items():
                if hasattr(self.model, key) and value is not None:
                    filter_conditions.append(getattr(self.model, key) == value)
            if filter_conditions:
                query = query.where(and_(*filter_conditions))

        return self.db.execute(query).scalar_one()
