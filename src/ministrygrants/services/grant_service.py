"""Grant lifecycle service.

Grants move through a small state machine::

    PENDING --approve--> APPROVED --fund--> FUNDED
       |                    |
       +------reject--------+--reject--> REJECTED

FUNDED and REJECTED are terminal and nothing re-enters PENDING. Funding is
the only operation that touches two aggregates: the giving fund balance is
decremented and the grant marked FUNDED in one transaction, or neither
happens.
"""

from typing import Any, Dict, FrozenSet, List, Optional

import structlog

from ..core.database_manager import DatabaseManager
from ..core.exceptions import (
    AlreadyFundedError,
    AlreadyRejectedError,
    FundInactiveError,
    FundNotFoundError,
    GrantNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidTransitionError,
    MinistryInactiveError,
    MinistryNotFoundError,
    MinistryNotVerifiedError,
)
from ..core.money import Money, MoneyLike
from ..models.database import Grant, GrantStatus, utcnow
from ..repositories.fund_repository import GivingFundRepository
from ..repositories.grant_repository import GrantRepository
from ..repositories.ministry_repository import MinistryRepository

logger = structlog.get_logger(__name__)


ALLOWED_TRANSITIONS: Dict[GrantStatus, FrozenSet[GrantStatus]] = {
    GrantStatus.PENDING: frozenset({GrantStatus.APPROVED, GrantStatus.REJECTED}),
    GrantStatus.APPROVED: frozenset({GrantStatus.FUNDED, GrantStatus.REJECTED}),
    GrantStatus.FUNDED: frozenset(),
    GrantStatus.REJECTED: frozenset(),
}

_TRANSITION_MESSAGES = {
    GrantStatus.APPROVED: "Cannot approve grant in {status} status. Only PENDING grants can be approved.",
    GrantStatus.FUNDED: "Cannot fund grant in {status} status. Grant must be APPROVED first.",
    GrantStatus.REJECTED: "Cannot reject grant in {status} status.",
}


def can_transition(current: GrantStatus, target: GrantStatus) -> bool:
    """Whether the lifecycle has an edge from ``current`` to ``target``."""
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(grant: Grant, target: GrantStatus) -> None:
    """Raise the matching InvalidTransitionError unless ``grant`` may move to ``target``."""
    current = GrantStatus(grant.status)
    if can_transition(current, target):
        return
    if target == GrantStatus.REJECTED:
        if current == GrantStatus.FUNDED:
            raise AlreadyFundedError(grant.id)
        if current == GrantStatus.REJECTED:
            raise AlreadyRejectedError(grant.id)
    raise InvalidTransitionError(
        grant.id,
        current.value,
        target.value,
        message=_TRANSITION_MESSAGES[target].format(status=current.value),
    )


def append_note(notes: Optional[str], line: str) -> str:
    """Append ``line`` to existing notes on its own line."""
    if notes:
        return f"{notes}\n{line}"
    return line


class GrantService:
    """Creates grants and drives them through approval, rejection and funding."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_grant_request(
        self,
        amount: MoneyLike,
        giving_fund_id: int,
        ministry_id: int,
        purpose: Optional[str] = None,
    ) -> Grant:
        """Create a PENDING grant.

        Checks run in a fixed order and the first failure wins: positive
        amount, ministry exists, ministry verified, ministry active, fund
        exists, fund active. The fund balance is not consulted here.
        """
        grant_amount = Money.parse(amount)
        if not grant_amount.is_positive():
            raise InvalidAmountError("Grant amount must be positive", value=grant_amount.to_fixed())

        async with self.db.transaction() as session:
            ministry = await MinistryRepository(session).get_by_id(ministry_id)
            if ministry is None:
                raise MinistryNotFoundError(ministry_id)
            if not ministry.verified:
                raise MinistryNotVerifiedError(ministry_id)
            if not ministry.active:
                raise MinistryInactiveError(ministry_id)

            fund = await GivingFundRepository(session).get_by_id(giving_fund_id)
            if fund is None:
                raise FundNotFoundError(giving_fund_id)
            if not fund.active:
                raise FundInactiveError(giving_fund_id, "Cannot create grant from inactive giving fund")

            purpose = purpose.strip() if purpose else None
            grant = await GrantRepository(session).create({
                "amount": grant_amount,
                "purpose": purpose or None,
                "status": GrantStatus.PENDING,
                "giving_fund_id": giving_fund_id,
                "ministry_id": ministry_id,
                "requested_at": utcnow(),
            })

        logger.info(
            "Grant requested",
            grant_id=grant.id,
            amount=grant_amount.to_fixed(),
            giving_fund_id=giving_fund_id,
            ministry_id=ministry_id,
        )
        return grant

    async def approve_grant(self, grant_id: int) -> Grant:
        """PENDING -> APPROVED. Approving twice fails."""
        async with self.db.transaction() as session:
            grants = GrantRepository(session)
            grant = await grants.get_for_update(grant_id)
            if grant is None:
                raise GrantNotFoundError(grant_id)

            ensure_transition(grant, GrantStatus.APPROVED)
            grant = await grants.transition(grant, GrantStatus.PENDING, {
                "status": GrantStatus.APPROVED,
                "approved_at": utcnow(),
            })

        logger.info("Grant approved", grant_id=grant_id)
        return grant

    async def reject_grant(self, grant_id: int, reason: Optional[str] = None) -> Grant:
        """PENDING or APPROVED -> REJECTED, appending the reason to the notes."""
        async with self.db.transaction() as session:
            grants = GrantRepository(session)
            grant = await grants.get_for_update(grant_id)
            if grant is None:
                raise GrantNotFoundError(grant_id)

            previous_status = GrantStatus(grant.status)
            ensure_transition(grant, GrantStatus.REJECTED)

            values: Dict[str, Any] = {
                "status": GrantStatus.REJECTED,
                "rejected_at": utcnow(),
            }
            reason = reason.strip() if reason else None
            if reason:
                values["notes"] = append_note(grant.notes, f"Rejection reason: {reason}")

            grant = await grants.transition(grant, previous_status, values)

        logger.info("Grant rejected", grant_id=grant_id, previous_status=previous_status.value, has_reason=bool(reason))
        return grant

    async def fund_grant(self, grant_id: int) -> Grant:
        """APPROVED -> FUNDED, paying the grant amount out of its giving fund.

        Both rows are re-read under lock inside one transaction. The balance
        decrement and the status change are version-checked writes that
        commit together; any failure rolls both back.
        """
        async with self.db.transaction() as session:
            grants = GrantRepository(session)
            funds = GivingFundRepository(session)

            grant = await grants.get_for_update(grant_id)
            if grant is None:
                raise GrantNotFoundError(grant_id)
            ensure_transition(grant, GrantStatus.FUNDED)

            fund = await funds.get_for_update(grant.giving_fund_id)
            if fund is None:
                raise FundNotFoundError(grant.giving_fund_id)

            balance_before = fund.balance
            if balance_before < grant.amount:
                raise InsufficientBalanceError(fund.id, available=balance_before, required=grant.amount)

            fund = await funds.decrement_balance(fund, grant.amount)
            grant = await grants.transition(grant, GrantStatus.APPROVED, {
                "status": GrantStatus.FUNDED,
                "funded_at": utcnow(),
            })

        logger.info(
            "Grant funded",
            grant_id=grant_id,
            giving_fund_id=fund.id,
            amount=grant.amount.to_fixed(),
            balance_before=balance_before.to_fixed(),
            balance_after=fund.balance.to_fixed(),
        )
        return grant

    async def get_grant(self, grant_id: int) -> Grant:
        """Fetch one grant."""
        async with self.db.read_only_transaction() as session:
            grant = await GrantRepository(session).get_by_id(grant_id)
        if grant is None:
            raise GrantNotFoundError(grant_id)
        return grant

    async def list_grants(
        self,
        status: Optional[GrantStatus] = None,
        ministry_id: Optional[int] = None,
        giving_fund_id: Optional[int] = None,
    ) -> List[Grant]:
        """Grants matching every given filter, most recently requested first."""
        async with self.db.read_only_transaction() as session:
            return await GrantRepository(session).list_filtered(
                status=status,
                ministry_id=ministry_id,
                giving_fund_id=giving_fund_id,
            )
