"""Base repository class with common CRUD operations.

Repositories only flush; committing is the caller's decision. A mutation
and the backup that makes it revertible must land in the same transaction,
so no repository method commits on its own.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from planet.db.models import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations."""

    def __init__(self, model: type[ModelType]):
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def get_by_id(self, db: Session, id: str) -> ModelType | None:
        """Get entity by ID.

        Args:
            db: Database session
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        return db.get(self.model, id)

    def count(self, db: Session) -> int:
        """Count all rows of this entity."""
        return db.execute(select(func.count()).select_from(self.model)).scalar_one()

    def create(self, db: Session, obj_in: dict[str, Any]) -> ModelType:
        """Add a new entity and flush it.

        Args:
            db: Database session
            obj_in: Entity data as dict

        Returns:
            Created entity

        Raises:
            sqlalchemy.exc.IntegrityError: If a constraint rejects the row
        """
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        db.flush()
        return db_obj

    def update(
        self,
        db: Session,
        db_obj: ModelType,
        obj_in: dict[str, Any],
    ) -> ModelType:
        """Set fields on an existing entity and flush.

        Unknown keys are ignored.
        """
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        db.add(db_obj)
        db.flush()
        return db_obj

    def delete(self, db: Session, id: str) -> bool:
        """Delete an entity by ID.

        Returns:
            True if deleted, False if not found
        """
        obj = db.get(self.model, id)
        if obj is None:
            return False
        db.delete(obj)
        db.flush()
        return True

    def exists(self, db: Session, id: str) -> bool:
        """Check if entity exists."""
        return db.get(self.model, id) is not None
