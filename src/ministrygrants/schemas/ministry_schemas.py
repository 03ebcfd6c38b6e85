"""Ministry DTOs and schemas for Ministry-Grants."""

from datetime import datetime
from typing import Optional, List

from pydantic import Field, field_validator

from ..models.database import MinistryCategory
from .common import CamelModel


class MinistryBase(CamelModel):
    """Base ministry schema."""
    name: str = Field(..., min_length=1, max_length=255, description="Ministry name")
    ein: Optional[str] = Field(None, description="Employer Identification Number (XX-XXXXXXX)")
    category: MinistryCategory = Field(..., description="Ministry category")
    description: Optional[str] = Field(None, description="Description")
    mission: Optional[str] = Field(None, description="Mission statement")
    website: Optional[str] = Field(None, max_length=255, description="Website URL")
    city: Optional[str] = Field(None, max_length=100, description="City")
    state: Optional[str] = Field(None, max_length=50, description="State")


class MinistryCreate(MinistryBase):
    """Schema for creating a new ministry."""
    country: Optional[str] = Field(None, max_length=50, description="Country, defaults to USA")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class MinistryUpdate(CamelModel):
    """Schema for updating a ministry; only provided fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    ein: Optional[str] = None
    category: Optional[MinistryCategory] = None
    description: Optional[str] = None
    mission: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    country: Optional[str] = Field(None, max_length=50)
    verified: Optional[bool] = None
    active: Optional[bool] = None


class MinistryResponse(MinistryBase):
    """Schema for ministry response."""
    id: int = Field(..., description="Ministry ID")
    country: str = Field(..., description="Country")
    verified: bool = Field(..., description="Eligible to receive grants once true")
    active: bool = Field(..., description="Is ministry active")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class MinistryFilter(CamelModel):
    """Optional, conjunctive filters for listing ministries."""
    category: Optional[MinistryCategory] = Field(None, description="Exact category match")
    verified: Optional[bool] = Field(None, description="Exact verification match")
    active: Optional[bool] = Field(None, description="Exact active match")
    state: Optional[str] = Field(None, description="Exact state match")
    search: Optional[str] = Field(None, description="Case-insensitive substring of name")


class PageInfo(CamelModel):
    """Cursor pagination metadata."""
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None
    total_count: int


class MinistryEdge(CamelModel):
    node: MinistryResponse
    cursor: str


class MinistryConnection(CamelModel):
    """A page of ministries."""
    edges: List[MinistryEdge]
    page_info: PageInfo

