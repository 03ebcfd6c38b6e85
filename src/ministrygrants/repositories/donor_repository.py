"""Donor repository implementation."""

from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..models.database import Donor
from ..core.exceptions import DatabaseError
from .base_repository import BaseRepository


class DonorRepository(BaseRepository[Donor]):
    """Repository for donor operations."""

    def get_model_class(self):
        """Return the Donor model class."""
        return Donor

    async def get_by_email(self, email: str) -> Optional[Donor]:
        """Get donor by (normalized) email."""
        try:
            result = await self.session.execute(
                select(Donor).where(Donor.email == email)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get donor by email: {str(e)}")

    async def list_by_name(self) -> List[Donor]:
        """All donors ordered by last name, then first name."""
        return await self.find_all(order_by=(Donor.last_name.asc(), Donor.first_name.asc(), Donor.id.asc()))
