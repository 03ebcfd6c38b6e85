"""Database manager: connection pool ownership and transaction scopes."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Dict, Any
from datetime import datetime, timezone

from sqlalchemy import event, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
import structlog

from .config import Settings, get_settings
from .exceptions import BaseMinistryGrantsException, ConnectionError, DatabaseError, TransactionError, IntegrityError as CustomIntegrityError
from ..models.database import Base

logger = structlog.get_logger(__name__)


def _install_sqlite_listeners(engine: AsyncEngine) -> None:
    """Enforce foreign keys and take the write lock when a transaction begins.

    pysqlite's implicit BEGIN is disabled so every transaction starts with
    BEGIN IMMEDIATE; concurrent writers queue on the database lock instead of
    reading stale rows and failing at commit.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class DatabaseManager:
    """Owns the async engine and hands out transactional sessions."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize database manager."""
        self.settings = settings or get_settings()
        self._engine: Optional[AsyncEngine] = None
        self._session_factory = None
        self._initialized = False

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise ConnectionError("Database manager is not initialized")
        return self._engine

    async def initialize(self) -> None:
        """Initialize database engine and session factory."""
        if self._initialized:
            return

        try:
            url = self.settings.database_url
            if self.settings.is_sqlite:
                self._ensure_sqlite_directory(url)
                self._engine = create_async_engine(
                    url,
                    echo=self.settings.debug,
                    connect_args={
                        "check_same_thread": False,
                        "timeout": self.settings.database_busy_timeout,
                    },
                )
                _install_sqlite_listeners(self._engine)
            else:
                self._engine = create_async_engine(
                    url,
                    echo=self.settings.debug,
                    pool_size=self.settings.database_pool_size,
                    max_overflow=self.settings.database_max_overflow,
                    pool_pre_ping=True,
                    pool_recycle=3600,
                    pool_use_lifo=True,
                )

            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            self._initialized = True
            logger.info("Database manager initialized", dialect=self._engine.dialect.name)

        except SQLAlchemyError as e:
            logger.error("Failed to initialize database manager", error=str(e))
            raise ConnectionError(f"Database initialization failed: {str(e)}")

    @staticmethod
    def _ensure_sqlite_directory(url: str) -> None:
        from pathlib import Path
        from sqlalchemy.engine import make_url

        database = make_url(url).database
        if database and database != ":memory:" and not database.startswith("file:"):
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    async def shutdown(self) -> None:
        """Shutdown database connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._initialized = False
            logger.info("Database manager shutdown complete")

    async def create_all(self, drop_existing: bool = False) -> None:
        """Create all tables, optionally dropping them first."""
        await self.initialize()
        async with self.engine.begin() as conn:
            if drop_existing:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready", dropped=drop_existing)

    async def get_session(self) -> AsyncSession:
        """Get a database session."""
        if not self._initialized:
            await self.initialize()

        return self._session_factory()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Run the enclosed block as one transaction.

        Commits when the block exits normally; any exception rolls back every
        write made in the block. Domain errors propagate unchanged, driver
        errors are wrapped in DatabaseError subclasses.
        """
        session = await self.get_session()
        transaction = None

        try:
            transaction = await session.begin()
            logger.debug("Transaction started")

            yield session

            await transaction.commit()
            logger.debug("Transaction committed successfully")

        except BaseMinistryGrantsException as e:
            if transaction and transaction.is_active:
                await transaction.rollback()
            logger.debug("Transaction rolled back", error_code=e.error_code)
            raise
        except IntegrityError as e:
            if transaction and transaction.is_active:
                await transaction.rollback()
            logger.warning("Transaction rolled back on integrity error", error=str(e.orig))
            raise CustomIntegrityError(f"Data integrity constraint violated: {e.orig}")
        except SQLAlchemyError as e:
            if transaction and transaction.is_active:
                await transaction.rollback()
            logger.warning("Transaction rolled back due to error", error=str(e))
            raise TransactionError(f"Transaction failed: {str(e)}")
        except BaseException:
            if transaction and transaction.is_active:
                await transaction.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def read_only_transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Transaction for reads; closed without commit so nothing is written."""
        session = await self.get_session()

        try:
            await session.begin()
            yield session
        except BaseMinistryGrantsException:
            raise
        except SQLAlchemyError as e:
            logger.error("Read-only transaction failed", error=str(e))
            raise DatabaseError(f"Read-only transaction failed: {str(e)}")
        finally:
            await session.close()

    async def health_check(self) -> Dict[str, Any]:
        """Perform database health check."""
        try:
            async with self.read_only_transaction() as session:
                result = await session.execute(text("SELECT 1 as health_check"))
                row = result.fetchone()

                if not row or row[0] != 1:
                    return {
                        "status": "unhealthy",
                        "database": "disconnected",
                        "error": "Health check query failed"
                    }

                return {
                    "status": "healthy",
                    "database": "connected",
                    "dialect": self.engine.dialect.name,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }

        except (DatabaseError, SQLAlchemyError) as e:
            return {
                "status": "unhealthy",
                "database": "error",
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
