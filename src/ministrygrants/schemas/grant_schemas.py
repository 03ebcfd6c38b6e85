"""Grant DTOs and schemas for Ministry-Grants."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.money import Money
from ..models.database import MAX_ENTITY_ID, GrantStatus
from .common import CamelModel


class GrantCreate(CamelModel):
    """Schema for requesting a new grant."""
    amount: Money = Field(..., description="Grant amount as a decimal string")
    purpose: Optional[str] = Field(None, description="Purpose of the grant")
    giving_fund_id: int = Field(..., le=MAX_ENTITY_ID, description="Giving fund the grant is paid from")
    ministry_id: int = Field(..., le=MAX_ENTITY_ID, description="Ministry receiving the grant")


class GrantRejectRequest(CamelModel):
    """Schema for rejecting a grant."""
    reason: Optional[str] = Field(None, description="Appended to the grant notes")


class GrantResponse(CamelModel):
    """Schema for grant response."""
    id: int
    amount: Money
    status: GrantStatus
    purpose: Optional[str] = None
    notes: Optional[str] = None
    giving_fund_id: int
    ministry_id: int
    requested_at: datetime
    approved_at: Optional[datetime] = None
    funded_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    updated_at: datetime


class GrantStatusCounts(CamelModel):
    """Grant counts per status; every bucket present even when zero."""
    pending: int = 0
    approved: int = 0
    funded: int = 0
    rejected: int = 0
    total: int = 0

    @classmethod
    def from_counts(cls, counts) -> "GrantStatusCounts":
        """Build from a ``{GrantStatus: count}`` mapping, zero-filling missing buckets."""
        buckets = {status: 0 for status in GrantStatus}
        for status, count in counts.items():
            buckets[GrantStatus(status)] = count
        return cls(
            pending=buckets[GrantStatus.PENDING],
            approved=buckets[GrantStatus.APPROVED],
            funded=buckets[GrantStatus.FUNDED],
            rejected=buckets[GrantStatus.REJECTED],
            total=sum(buckets.values()),
        )


class GrantRollup(CamelModel):
    """Funded total and status counts for one ministry or fund."""
    total_funded: Money
    grant_counts: GrantStatusCounts
