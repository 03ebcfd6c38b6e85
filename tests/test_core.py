"""Tests for Ministry-Grants configuration, errors and the database manager."""

import pytest
from sqlalchemy import select

from ministrygrants.core.config import Settings
from ministrygrants.core.database_manager import DatabaseManager
from ministrygrants.core.exceptions import (
    AlreadyFundedError,
    BaseMinistryGrantsException,
    InsufficientBalanceError,
    InvalidTransitionError,
    MinistryNotFoundError,
    TransactionError,
)
from ministrygrants.core.money import Money
from ministrygrants.models.database import Donor


def test_settings():
    """Test settings configuration."""
    settings = Settings(_env_file=None)
    assert settings.app_name == "Ministry-Grants"
    assert settings.version == "1.0.0"
    assert settings.database_url.startswith("sqlite+aiosqlite")
    assert settings.is_sqlite
    assert settings.max_page_size == 100


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("MINISTRYGRANTS_DEBUG", "yes")
    monkeypatch.setenv("MINISTRYGRANTS_LOG_LEVEL", "debug")
    monkeypatch.setenv("MINISTRYGRANTS_DATABASE_URL", "postgresql+asyncpg://localhost/grants")

    settings = Settings(_env_file=None)

    assert settings.debug is True
    assert settings.log_level == "DEBUG"
    assert not settings.is_sqlite


def test_exception_to_dict():
    error = MinistryNotFoundError(42)

    assert error.status_code == 404
    assert error.to_dict() == {
        "error": {
            "code": "MINISTRY_NOT_FOUND",
            "message": "Ministry with ID 42 not found",
            "details": {"resource": "Ministry", "id": 42},
        }
    }


def test_transition_errors_carry_current_status():
    error = AlreadyFundedError(7)

    assert isinstance(error, InvalidTransitionError)
    assert error.current_status == "FUNDED"
    assert error.status_code == 409
    assert error.error_code == "ALREADY_FUNDED"


def test_insufficient_balance_message():
    error = InsufficientBalanceError(3, available=Money.parse("5000"), required=Money.parse("10000"))

    assert error.message == "Insufficient fund balance. Available: $5000.00, Required: $10000.00"
    assert error.details["available"] == "5000.00"
    assert error.required == Money.parse("10000")


async def test_database_health_check(db):
    health = await db.health_check()

    assert health["status"] == "healthy"
    assert health["dialect"] == "sqlite"


async def test_transaction_rolls_back_on_domain_error(db):
    with pytest.raises(MinistryNotFoundError):
        async with db.transaction() as session:
            session.add(Donor(first_name="Ada", last_name="Lovelace", email="ada@example.com"))
            await session.flush()
            raise MinistryNotFoundError(1)

    async with db.read_only_transaction() as session:
        result = await session.execute(select(Donor))
        assert result.scalars().all() == []


async def test_transaction_wraps_integrity_errors(db):
    async with db.transaction() as session:
        session.add(Donor(first_name="Ada", last_name="Lovelace", email="ada@example.com"))

    with pytest.raises(BaseMinistryGrantsException) as exc_info:
        async with db.transaction() as session:
            session.add(Donor(first_name="Ada", last_name="Byron", email="ada@example.com"))

    assert exc_info.value.error_code == "INTEGRITY_ERROR"
    assert not isinstance(exc_info.value, TransactionError)


async def test_uninitialized_manager_has_no_engine(settings):
    manager = DatabaseManager(settings)

    with pytest.raises(BaseMinistryGrantsException):
        manager.engine
