"""
Base service class with common CRUD operations
"""

from abc import ABC, abstractmethod
from datetime import datetime, UTC
from typing import Generic, TypeVar
from uuid import UUID

from sqlmodel import Session, SQLModel, select

from lvlai_api.common.error_handlers import (
    ResourceNotFoundError,
    safe_execute,
    validate_uuid,
)

T = TypeVar("T", bound=SQLModel)
CreateT = TypeVar("CreateT")
UpdateT = TypeVar("UpdateT")


class BaseService(ABC, Generic[T, CreateT, UpdateT]):
    """Base service class with common CRUD operations scoped to an owner"""

    def __init__(self, model: type[T]):
        self.model = model

    @abstractmethod
    def _create_instance(self, data: CreateT, **kwargs) -> T:
        """Create a new model instance. Must be implemented by subclasses."""
        pass

    @abstractmethod
    def _get_user_filter(self, user_id: UUID):
        """Get the filter condition for user ownership. Must be implemented by subclasses."""
        pass

    def create(self, session: Session, data: CreateT, user_id: str | UUID, **kwargs) -> T:
        """Create a new entity"""
        user_id = validate_uuid(user_id, "user_id")

        def create_operation():
            instance = self._create_instance(data, user_id=user_id, **kwargs)
            session.add(instance)
            session.flush()
            return instance

        return safe_execute(session, create_operation)

    def get_by_id(
        self, session: Session, entity_id: str | UUID, user_id: str | UUID
    ) -> T:
        """Get entity by ID for specific user"""
        entity_id = validate_uuid(entity_id, "entity_id")
        user_id = validate_uuid(user_id, "user_id")

        statement = select(self.model).where(
            self.model.id == entity_id,  # type: ignore[attr-defined]
            self._get_user_filter(user_id),
        )

        result = session.exec(statement).first()
        if not result:
            raise ResourceNotFoundError(self.model.__name__, entity_id)

        return result

    def get_all(
        self,
        session: Session,
        user_id: str | UUID,
        skip: int = 0,
        limit: int | None = None,
        **filters,
    ) -> list[T]:
        """Get all entities for specific user with optional filters"""
        user_id = validate_uuid(user_id, "user_id")
        statement = select(self.model).where(self._get_user_filter(user_id))

        for key, value in filters.items():
            if hasattr(self.model, key) and value is not None:
                statement = statement.where(getattr(self.model, key) == value)

        # Newest first, matching what the organizer shows to the model
        if hasattr(self.model, "created_at"):
            statement = statement.order_by(self.model.created_at.desc())  # type: ignore[attr-defined]

        statement = statement.offset(skip)
        if limit is not None:
            statement = statement.limit(limit)
        return list(session.exec(statement).all())

    def update(
        self,
        session: Session,
        entity_id: str | UUID,
        data: UpdateT,
        user_id: str | UUID,
    ) -> T:
        """Partially update entity; only fields set on ``data`` are written"""
        # This will raise ResourceNotFoundError if not found
        entity = self.get_by_id(session, entity_id, user_id)

        def update_operation():
            update_data = data.model_dump(exclude_unset=True)  # type: ignore[attr-defined]
            for field, value in update_data.items():
                if hasattr(entity, field):
                    setattr(entity, field, value)

            if hasattr(entity, "updated_at"):
                entity.updated_at = datetime.now(UTC)

            session.add(entity)
            session.flush()
            return entity

        result = safe_execute(session, update_operation)
        session.refresh(result)
        return result
