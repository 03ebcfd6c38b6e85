"""Row locking and optimistic compare-and-set updates."""

from typing import Optional, Dict, Any, TypeVar, Type

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from .exceptions import ConcurrentModificationError

logger = structlog.get_logger(__name__)

T = TypeVar('T')


class OptimisticLockManager:
    """Version-checked writes for models carrying a ``version`` column."""

    def __init__(self, session: AsyncSession):
        """Initialize optimistic lock manager."""
        self.session = session

    async def get_for_update(self, model_class: Type[T], resource_id: int) -> Optional[T]:
        """Load a row with a write lock, bypassing any stale identity-map copy.

        Dialects without SELECT ... FOR UPDATE (SQLite) ignore the lock clause;
        there the transaction itself already holds the database write lock.
        """
        stmt = (
            select(model_class)
            .where(model_class.id == resource_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def compare_and_set(self, instance: T, values: Dict[str, Any], *guards) -> T:
        """Write ``values`` only if the row still has the version ``instance`` was read at.

        Extra ``guards`` are SQL conditions that must also hold at write time.
        On success the version is bumped and ``instance`` is refreshed; when no
        row matches, ConcurrentModificationError is raised and nothing is written.
        """
        model_class = type(instance)
        expected_version = instance.version

        stmt = (
            update(model_class)
            .where(
                model_class.id == instance.id,
                model_class.version == expected_version,
                *guards
            )
            .values(**values, version=model_class.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        if result.rowcount != 1:
            logger.warning(
                "Optimistic lock conflict",
                resource_type=model_class.__name__,
                resource_id=instance.id,
                expected_version=expected_version,
            )
            raise ConcurrentModificationError(model_class.__name__, instance.id, expected_version)

        await self.session.refresh(instance)

        logger.debug(
            "Optimistic lock update successful",
            resource_type=model_class.__name__,
            resource_id=instance.id,
            new_version=instance.version,
        )
        return instance
