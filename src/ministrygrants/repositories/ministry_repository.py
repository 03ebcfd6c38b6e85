"""Ministry repository implementation."""

from typing import Optional, List, Dict, Any

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError as SQLAlchemyIntegrityError, SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from ..models.database import Ministry
from ..core.exceptions import DatabaseError, ReferentialIntegrityError
from ..schemas.ministry_schemas import MinistryFilter
from .base_repository import BaseRepository


def ministry_filter_conditions(filter: Optional[MinistryFilter]) -> List[ColumnElement]:
    """Translate the fields present on ``filter`` into SQL predicates.

    Absent fields contribute nothing; present ones are ANDed together.
    """
    if filter is None:
        return []

    conditions: List[ColumnElement] = []
    if filter.category is not None:
        conditions.append(Ministry.category == filter.category)
    if filter.verified is not None:
        conditions.append(Ministry.verified == filter.verified)
    if filter.active is not None:
        conditions.append(Ministry.active == filter.active)
    if filter.state:
        conditions.append(Ministry.state == filter.state)
    if filter.search:
        conditions.append(Ministry.name.icontains(filter.search, autoescape=True))
    return conditions


class MinistryRepository(BaseRepository[Ministry]):
    """Repository for ministry operations."""

    def get_model_class(self):
        """Return the Ministry model class."""
        return Ministry

    async def get_by_ein(self, ein: str) -> Optional[Ministry]:
        """Get ministry by EIN."""
        try:
            result = await self.session.execute(
                select(Ministry).where(Ministry.ein == ein)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get ministry by EIN: {str(e)}")

    async def list_after(
        self,
        conditions: List[ColumnElement],
        after_id: Optional[int],
        take: int,
    ) -> List[Ministry]:
        """Up to ``take`` ministries matching ``conditions`` with id > ``after_id``, ascending."""
        try:
            query = select(Ministry)
            if conditions:
                query = query.where(*conditions)
            if after_id is not None:
                query = query.where(Ministry.id > after_id)
            query = query.order_by(Ministry.id.asc()).limit(take)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list ministries: {str(e)}")

    async def update_fields(self, ministry: Ministry, data: Dict[str, Any]) -> Ministry:
        """Apply ``data`` to ``ministry`` and flush."""
        try:
            for key, value in data.items():
                setattr(ministry, key, value)
            await self.session.flush()
            await self.session.refresh(ministry)
            return ministry
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to update ministry: {str(e)}")

    async def delete_by_id(self, ministry_id: int) -> bool:
        """Hard delete a ministry; grants referencing it block the delete."""
        try:
            result = await self.session.execute(
                delete(Ministry).where(Ministry.id == ministry_id)
            )
            return result.rowcount > 0
        except SQLAlchemyIntegrityError:
            raise ReferentialIntegrityError(
                "Cannot delete ministry with existing grants. Remove or reassign grants first.",
                details={"ministry_id": ministry_id},
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to delete ministry: {str(e)}")
