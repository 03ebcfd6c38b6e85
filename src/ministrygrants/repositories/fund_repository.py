"""Giving fund repository implementation."""

from typing import Optional, List, Sequence

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from ..core.exceptions import DatabaseError
from ..core.locking import OptimisticLockManager
from ..core.money import Money
from ..models.database import GivingFund
from .base_repository import BaseRepository


class GivingFundRepository(BaseRepository[GivingFund]):
    """Repository for giving fund balances."""

    def get_model_class(self):
        """Return the GivingFund model class."""
        return GivingFund

    async def get_for_update(self, fund_id: int) -> Optional[GivingFund]:
        """Re-read a fund inside the current transaction, holding its row lock."""
        return await OptimisticLockManager(self.session).get_for_update(GivingFund, fund_id)

    async def list_for_donor(self, donor_id: Optional[int] = None) -> List[GivingFund]:
        """Funds newest first, optionally limited to one donor."""
        conditions = [GivingFund.donor_id == donor_id] if donor_id is not None else []
        return await self.find_all(conditions, order_by=(GivingFund.created_at.desc(), GivingFund.id.desc()))

    async def increment_balance(self, fund: GivingFund, amount: Money) -> GivingFund:
        """Add ``amount`` to the balance in a single UPDATE."""
        try:
            await self.session.execute(
                update(GivingFund)
                .where(GivingFund.id == fund.id)
                .values(balance=GivingFund.balance + amount, version=GivingFund.version + 1)
                .execution_options(synchronize_session=False)
            )
            await self.session.refresh(fund)
            return fund
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to increment fund balance: {str(e)}")

    async def decrement_balance(self, fund: GivingFund, amount: Money) -> GivingFund:
        """Subtract ``amount``; only valid at the version ``fund`` was read at and while it covers ``amount``."""
        lock_manager = OptimisticLockManager(self.session)
        return await lock_manager.compare_and_set(
            fund,
            {"balance": GivingFund.balance - amount},
            GivingFund.balance >= amount,
        )

    async def sum_balance(self, conditions: Sequence[ColumnElement] = ()) -> Money:
        """Sum of balances across matching funds."""
        try:
            query = select(func.sum(GivingFund.balance))
            if conditions:
                query = query.where(*conditions)
            result = await self.session.execute(query)
            return result.scalar() or Money.zero()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to sum fund balances: {str(e)}")
