"""Pytest configuration and fixtures for Ministry-Grants tests."""

import itertools
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient
from sqlalchemy import update

# Ensure the src directory is on sys.path for imports like `import ministrygrants`
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from ministrygrants.core.config import Settings
from ministrygrants.core.database_manager import DatabaseManager
from ministrygrants.models.database import GivingFund, MinistryCategory
from ministrygrants.schemas import MinistryCreate, MinistryUpdate
from ministrygrants.services.dashboard_service import DashboardService
from ministrygrants.services.donor_service import DonorService
from ministrygrants.services.grant_service import GrantService
from ministrygrants.services.ledger_service import LedgerService
from ministrygrants.services.ministry_service import MinistryService
from ministrygrants.web.app import create_app


@pytest.fixture
def database_url(tmp_path):
    """URL of a throwaway SQLite file database."""
    return f"sqlite+aiosqlite:///{tmp_path / 'ministrygrants-test.db'}"


@pytest.fixture
def settings(database_url):
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        database_url=database_url,
        structured_logging=False,
        log_level="WARNING",
    )


@pytest.fixture
async def db(settings):
    """Initialized database manager with an empty schema."""
    manager = DatabaseManager(settings)
    await manager.create_all(drop_existing=True)
    yield manager
    await manager.shutdown()


@pytest.fixture
def ministry_service(db, settings):
    return MinistryService(db, settings)


@pytest.fixture
def donor_service(db):
    return DonorService(db)


@pytest.fixture
def ledger_service(db):
    return LedgerService(db)


@pytest.fixture
def grant_service(db):
    return GrantService(db)


@pytest.fixture
def dashboard_service(db):
    return DashboardService(db)


@pytest.fixture
def make_ministry(ministry_service):
    """Factory creating a ministry, verified and active unless told otherwise."""
    counter = itertools.count(1)

    async def factory(name=None, verified=True, active=True, category=MinistryCategory.MISSIONS, **fields):
        n = next(counter)
        ministry = await ministry_service.create_ministry(
            MinistryCreate(name=name or f"Ministry {n}", category=category, **fields)
        )
        if verified:
            ministry = await ministry_service.verify_ministry(ministry.id)
        if not active:
            ministry = await ministry_service.update_ministry(ministry.id, MinistryUpdate(active=False))
        return ministry

    return factory


@pytest.fixture
def make_fund(db, donor_service, ledger_service):
    """Factory creating a donor and a giving fund holding ``balance``."""
    counter = itertools.count(1)

    async def factory(balance="50000.00", active=True):
        n = next(counter)
        donor = await donor_service.create_donor("Test", f"Donor{n}", f"donor{n}@example.com")
        fund = await ledger_service.create_fund(donor.id, f"Donor{n} Family Fund", initial_balance=balance)
        if not active:
            async with db.transaction() as session:
                await session.execute(update(GivingFund).where(GivingFund.id == fund.id).values(active=False))
            fund = await ledger_service.get_fund(fund.id)
        return fund

    return factory


@pytest.fixture
def client(settings):
    """FastAPI test client fixture."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def cli_runner(monkeypatch, database_url):
    """CLI test runner fixture pointed at the test database."""
    monkeypatch.setenv("MINISTRYGRANTS_DATABASE_URL", database_url)
    monkeypatch.setenv("MINISTRYGRANTS_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("MINISTRYGRANTS_STRUCTURED_LOGGING", "false")
    return CliRunner()
