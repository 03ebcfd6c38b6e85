"""Base repository pattern implementation."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar, List, Optional, Dict, Any, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError as SQLAlchemyIntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ..models.database import Base
from ..core.exceptions import DatabaseError, IntegrityError

T = TypeVar('T', bound=Base)


class BaseRepository(Generic[T], ABC):
    """Base repository class with common CRUD operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self.model_class = self.get_model_class()

    @abstractmethod
    def get_model_class(self) -> type[T]:
        """Return the model class this repository handles."""
        pass

    async def create(self, data: Dict[str, Any]) -> T:
        """Insert a new record and return it with generated columns loaded."""
        try:
            instance = self.model_class(**data)
            self.session.add(instance)
            await self.session.flush()
            await self.session.refresh(instance)
            return instance
        except SQLAlchemyIntegrityError as e:
            raise IntegrityError(f"Failed to create {self.model_class.__name__}: {e.orig}")
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to create {self.model_class.__name__}: {str(e)}")

    async def get_by_id(self, id: int) -> Optional[T]:
        """Get a record by ID."""
        try:
            result = await self.session.execute(
                select(self.model_class).where(self.model_class.id == id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get {self.model_class.__name__} by ID: {str(e)}")

    async def exists(self, id: int) -> bool:
        """Check if a record exists by ID."""
        try:
            result = await self.session.execute(
                select(func.count()).select_from(self.model_class).where(self.model_class.id == id)
            )
            return result.scalar() > 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to check existence of {self.model_class.__name__}: {str(e)}")

    async def count(self, conditions: Sequence[ColumnElement] = ()) -> int:
        """Count records matching all ``conditions``."""
        try:
            query = select(func.count()).select_from(self.model_class)
            if conditions:
                query = query.where(*conditions)
            result = await self.session.execute(query)
            return result.scalar() or 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count {self.model_class.__name__}s: {str(e)}")

    async def find_all(self, conditions: Sequence[ColumnElement] = (), order_by: Sequence = ()) -> List[T]:
        """List records matching all ``conditions``."""
        try:
            query = select(self.model_class)
            if conditions:
                query = query.where(*conditions)
            if order_by:
                query = query.order_by(*order_by)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list {self.model_class.__name__}s: {str(e)}")
