"""FastAPI dependencies for Ministry-Grants.

The application lifespan stores one ``DatabaseManager`` on ``app.state``;
every request builds its services around that shared manager.
"""

from fastapi import Depends, Request

from .config import Settings
from .database_manager import DatabaseManager
from ..services.dashboard_service import DashboardService
from ..services.donor_service import DonorService
from ..services.grant_service import GrantService
from ..services.ledger_service import LedgerService
from ..services.ministry_service import MinistryService


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency for the application settings."""
    return request.app.state.settings


def get_db_manager(request: Request) -> DatabaseManager:
    """FastAPI dependency for the process-wide database manager."""
    return request.app.state.db_manager


def get_ministry_service(
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_app_settings),
) -> MinistryService:
    return MinistryService(db, settings)


def get_donor_service(db: DatabaseManager = Depends(get_db_manager)) -> DonorService:
    return DonorService(db)


def get_ledger_service(db: DatabaseManager = Depends(get_db_manager)) -> LedgerService:
    return LedgerService(db)


def get_grant_service(db: DatabaseManager = Depends(get_db_manager)) -> GrantService:
    return GrantService(db)


def get_dashboard_service(db: DatabaseManager = Depends(get_db_manager)) -> DashboardService:
    return DashboardService(db)
