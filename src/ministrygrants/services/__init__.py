"""Service layer for Ministry-Grants."""

from .dashboard_service import DashboardService
from .donor_service import DonorService
from .grant_service import GrantService
from .ledger_service import LedgerService
from .ministry_service import MinistryService

__all__ = [
    "DashboardService",
    "DonorService",
    "GrantService",
    "LedgerService",
    "MinistryService",
]
