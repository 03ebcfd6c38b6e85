"""Schemas and DTOs for Ministry-Grants API."""

from .common import CamelModel, ErrorResponse

from .ministry_schemas import (
    MinistryBase, MinistryCreate, MinistryUpdate, MinistryResponse, MinistryFilter,
    PageInfo, MinistryEdge, MinistryConnection
)

from .grant_schemas import (
    GrantCreate, GrantRejectRequest, GrantResponse, GrantStatusCounts, GrantRollup
)

from .fund_schemas import (
    DonorCreate, DonorResponse, DonorSummaryResponse,
    GivingFundCreate, ContributionRequest, GivingFundResponse
)

from .dashboard_schemas import DashboardStats

__all__ = [
    "CamelModel", "ErrorResponse",

    # Ministry schemas
    "MinistryBase", "MinistryCreate", "MinistryUpdate", "MinistryResponse", "MinistryFilter",
    "PageInfo", "MinistryEdge", "MinistryConnection",

    # Grant schemas
    "GrantCreate", "GrantRejectRequest", "GrantResponse", "GrantStatusCounts", "GrantRollup",

    # Donor and fund schemas
    "DonorCreate", "DonorResponse", "DonorSummaryResponse",
    "GivingFundCreate", "ContributionRequest", "GivingFundResponse",

    # Dashboard
    "DashboardStats",
]
