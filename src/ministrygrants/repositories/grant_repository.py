"""Grant repository implementation."""

from typing import Optional, List, Dict, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from ..core.exceptions import DatabaseError
from ..core.locking import OptimisticLockManager
from ..core.money import Money
from ..models.database import Grant, GrantStatus
from .base_repository import BaseRepository


class GrantRepository(BaseRepository[Grant]):
    """Repository for grant operations."""

    def get_model_class(self):
        """Return the Grant model class."""
        return Grant

    async def get_for_update(self, grant_id: int) -> Optional[Grant]:
        """Re-read a grant inside the current transaction, holding its row lock."""
        return await OptimisticLockManager(self.session).get_for_update(Grant, grant_id)

    async def transition(self, grant: Grant, expected_status: GrantStatus, values: Dict) -> Grant:
        """Write ``values`` only while the row is still at ``expected_status`` and unchanged."""
        lock_manager = OptimisticLockManager(self.session)
        return await lock_manager.compare_and_set(grant, values, Grant.status == expected_status)

    async def list_filtered(
        self,
        status: Optional[GrantStatus] = None,
        ministry_id: Optional[int] = None,
        giving_fund_id: Optional[int] = None,
    ) -> List[Grant]:
        """Grants matching every given filter, most recently requested first."""
        conditions = []
        if status is not None:
            conditions.append(Grant.status == status)
        if ministry_id is not None:
            conditions.append(Grant.ministry_id == ministry_id)
        if giving_fund_id is not None:
            conditions.append(Grant.giving_fund_id == giving_fund_id)
        return await self.find_all(conditions, order_by=(Grant.requested_at.desc(), Grant.id.desc()))

    async def count_by_status(self, conditions: Sequence[ColumnElement] = ()) -> Dict[GrantStatus, int]:
        """Grant counts grouped by status; statuses with no grants are absent."""
        try:
            query = select(Grant.status, func.count()).group_by(Grant.status)
            if conditions:
                query = query.where(*conditions)
            result = await self.session.execute(query)
            return {status: count for status, count in result.all()}
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count grants by status: {str(e)}")

    async def sum_amount(self, conditions: Sequence[ColumnElement] = ()) -> Money:
        """Sum of grant amounts across matching grants."""
        try:
            query = select(func.sum(Grant.amount))
            if conditions:
                query = query.where(*conditions)
            result = await self.session.execute(query)
            return result.scalar() or Money.zero()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to sum grant amounts: {str(e)}")
