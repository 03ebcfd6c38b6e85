"""Giving fund ledger.

Balances only ever change in two places: ``contribute`` here, and the
disbursement performed by ``GrantService.fund_grant``. Both are single
UPDATE statements inside a transaction, never read-modify-write in Python.
"""

from typing import List, Optional

import structlog

from ..core.database_manager import DatabaseManager
from ..core.exceptions import DonorNotFoundError, FundInactiveError, FundNotFoundError, InvalidAmountError
from ..core.money import Money, MoneyLike
from ..models.database import GivingFund, Grant, GrantStatus
from ..repositories.donor_repository import DonorRepository
from ..repositories.fund_repository import GivingFundRepository
from ..repositories.grant_repository import GrantRepository
from ..schemas.grant_schemas import GrantRollup, GrantStatusCounts

logger = structlog.get_logger(__name__)


class LedgerService:
    """Giving fund creation, contributions and per-fund rollups."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_fund(
        self,
        donor_id: int,
        name: str,
        description: Optional[str] = None,
        initial_balance: Optional[MoneyLike] = None,
    ) -> GivingFund:
        balance = Money.parse(initial_balance) if initial_balance is not None else Money.zero()
        if balance.is_negative():
            raise InvalidAmountError("Initial balance cannot be negative", value=balance.to_fixed())

        async with self.db.transaction() as session:
            if not await DonorRepository(session).exists(donor_id):
                raise DonorNotFoundError(donor_id)
            fund = await GivingFundRepository(session).create({
                "donor_id": donor_id,
                "name": name.strip(),
                "description": description,
                "balance": balance,
                "active": True,
            })

        logger.info("Giving fund created", fund_id=fund.id, donor_id=donor_id, balance=balance.to_fixed())
        return fund

    async def get_fund(self, fund_id: int) -> GivingFund:
        async with self.db.read_only_transaction() as session:
            fund = await GivingFundRepository(session).get_by_id(fund_id)
        if fund is None:
            raise FundNotFoundError(fund_id)
        return fund

    async def list_funds(self, donor_id: Optional[int] = None) -> List[GivingFund]:
        """Funds newest first, optionally for one donor."""
        async with self.db.read_only_transaction() as session:
            return await GivingFundRepository(session).list_for_donor(donor_id)

    async def contribute(self, fund_id: int, amount: MoneyLike) -> GivingFund:
        """Add a positive ``amount`` to an active fund's balance."""
        contribution = Money.parse(amount)
        if not contribution.is_positive():
            raise InvalidAmountError("Contribution amount must be positive", value=contribution.to_fixed())

        async with self.db.transaction() as session:
            funds = GivingFundRepository(session)
            fund = await funds.get_for_update(fund_id)
            if fund is None:
                raise FundNotFoundError(fund_id)
            if not fund.active:
                raise FundInactiveError(fund_id, "Cannot add funds to an inactive giving fund")

            balance_before = fund.balance
            fund = await funds.increment_balance(fund, contribution)

        logger.info(
            "Contribution recorded",
            fund_id=fund_id,
            amount=contribution.to_fixed(),
            balance_before=balance_before.to_fixed(),
            balance_after=fund.balance.to_fixed(),
        )
        return fund

    async def total_disbursed(self, fund_id: int) -> Money:
        return (await self.rollup(fund_id)).total_funded

    async def grant_counts(self, fund_id: int) -> GrantStatusCounts:
        return (await self.rollup(fund_id)).grant_counts

    async def rollup(self, fund_id: int) -> GrantRollup:
        """Amount paid out and zero-filled status counts for one fund's grants."""
        async with self.db.read_only_transaction() as session:
            if not await GivingFundRepository(session).exists(fund_id):
                raise FundNotFoundError(fund_id)
            grants = GrantRepository(session)
            condition = Grant.giving_fund_id == fund_id
            disbursed = await grants.sum_amount([condition, Grant.status == GrantStatus.FUNDED])
            counts = await grants.count_by_status([condition])

        return GrantRollup(total_funded=disbursed, grant_counts=GrantStatusCounts.from_counts(counts))
