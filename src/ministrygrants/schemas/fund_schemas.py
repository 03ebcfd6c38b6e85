"""Giving fund and donor DTOs for Ministry-Grants."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..core.money import Money
from ..models.database import MAX_ENTITY_ID
from .common import CamelModel


class DonorCreate(CamelModel):
    """Schema for creating a donor."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class DonorResponse(CamelModel):
    """Schema for donor response."""
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime


class DonorSummaryResponse(DonorResponse):
    """Donor with the sum of all their fund balances."""
    total_balance: Money


class GivingFundCreate(CamelModel):
    """Schema for opening a giving fund."""
    donor_id: int = Field(..., le=MAX_ENTITY_ID)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    initial_balance: Optional[Money] = Field(None, description="Opening balance, defaults to 0.00")


class ContributionRequest(CamelModel):
    """Schema for adding funds to a giving fund."""
    amount: Money = Field(..., description="Contribution amount as a decimal string")


class GivingFundResponse(CamelModel):
    """Schema for giving fund response."""
    id: int
    name: str
    description: Optional[str] = None
    balance: Money
    active: bool
    donor_id: int
    created_at: datetime
    updated_at: datetime
