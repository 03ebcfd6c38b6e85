"""Ministry directory: registration, verification and cursor-paginated search."""

import re
from typing import Optional

import structlog

from ..core.config import Settings, get_settings
from ..core.cursor import decode_cursor, encode_cursor
from ..core.database_manager import DatabaseManager
from ..core.exceptions import InvalidEINError, MinistryNotFoundError, ResourceAlreadyExistsError
from ..core.money import Money
from ..models.database import Grant, GrantStatus, Ministry
from ..repositories.grant_repository import GrantRepository
from ..repositories.ministry_repository import MinistryRepository, ministry_filter_conditions
from ..schemas.grant_schemas import GrantRollup, GrantStatusCounts
from ..schemas.ministry_schemas import (
    MinistryConnection,
    MinistryCreate,
    MinistryEdge,
    MinistryFilter,
    MinistryResponse,
    MinistryUpdate,
    PageInfo,
)

logger = structlog.get_logger(__name__)

EIN_PATTERN = re.compile(r"[0-9]{2}-[0-9]{7}")
DEFAULT_COUNTRY = "USA"

# Columns an explicit null in an update leaves untouched
REQUIRED_FIELDS = frozenset({"name", "category", "country", "verified", "active"})


def validate_ein(ein: Optional[str]) -> Optional[str]:
    """Return a trimmed EIN, or None when absent; raise InvalidEINError if malformed."""
    if ein is None:
        return None
    ein = ein.strip()
    if not ein:
        return None
    if not EIN_PATTERN.fullmatch(ein):
        raise InvalidEINError(ein)
    return ein


class MinistryService:
    """Ministry Directory operations."""

    def __init__(self, db: DatabaseManager, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()

    def clamp_limit(self, limit: Optional[int]) -> int:
        """Clamp a page size into ``[1, max_page_size]``; None means the default."""
        if limit is None:
            limit = self.settings.default_page_size
        return max(1, min(limit, self.settings.max_page_size))

    async def list_ministries(
        self,
        filter: Optional[MinistryFilter] = None,
        limit: Optional[int] = None,
        after: Optional[str] = None,
    ) -> MinistryConnection:
        """One page of ministries in ascending id order.

        ``after`` is an opaque cursor from a previous page's edges; a cursor
        that does not decode raises InvalidCursorError. One extra row is read
        to decide ``has_next_page``.
        """
        take = self.clamp_limit(limit)
        after_id = decode_cursor(after) if after is not None else None
        conditions = ministry_filter_conditions(filter)

        async with self.db.read_only_transaction() as session:
            repository = MinistryRepository(session)
            rows = await repository.list_after(conditions, after_id, take + 1)
            total_count = await repository.count(conditions)

        has_next_page = len(rows) > take
        rows = rows[:take]
        edges = [
            MinistryEdge(node=MinistryResponse.model_validate(row), cursor=encode_cursor(row.id))
            for row in rows
        ]

        return MinistryConnection(
            edges=edges,
            page_info=PageInfo(
                has_next_page=has_next_page,
                has_previous_page=after is not None,
                start_cursor=edges[0].cursor if edges else None,
                end_cursor=edges[-1].cursor if edges else None,
                total_count=total_count,
            ),
        )

    async def get_ministry(self, ministry_id: int) -> Ministry:
        async with self.db.read_only_transaction() as session:
            ministry = await MinistryRepository(session).get_by_id(ministry_id)
        if ministry is None:
            raise MinistryNotFoundError(ministry_id)
        return ministry

    async def create_ministry(self, data: MinistryCreate) -> Ministry:
        """Register a ministry. New ministries start unverified and active."""
        values = data.model_dump()
        values["ein"] = validate_ein(data.ein)
        values["country"] = (data.country or "").strip() or DEFAULT_COUNTRY
        values["verified"] = False
        values["active"] = True

        async with self.db.transaction() as session:
            repository = MinistryRepository(session)
            if values["ein"] and await repository.get_by_ein(values["ein"]):
                raise ResourceAlreadyExistsError("Ministry", values["ein"])
            ministry = await repository.create(values)

        logger.info("Ministry created", ministry_id=ministry.id, category=ministry.category.value)
        return ministry

    async def update_ministry(self, ministry_id: int, data: MinistryUpdate) -> Ministry:
        """Change only the fields present in ``data``."""
        values = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key not in REQUIRED_FIELDS
        }
        if "ein" in values:
            values["ein"] = validate_ein(values["ein"])

        async with self.db.transaction() as session:
            repository = MinistryRepository(session)
            ministry = await repository.get_by_id(ministry_id)
            if ministry is None:
                raise MinistryNotFoundError(ministry_id)
            if values.get("ein") and values["ein"] != ministry.ein:
                if await repository.get_by_ein(values["ein"]):
                    raise ResourceAlreadyExistsError("Ministry", values["ein"])
            ministry = await repository.update_fields(ministry, values)

        logger.info("Ministry updated", ministry_id=ministry_id, fields=sorted(values))
        return ministry

    async def verify_ministry(self, ministry_id: int) -> Ministry:
        """Mark a ministry verified so it can receive grants."""
        async with self.db.transaction() as session:
            repository = MinistryRepository(session)
            ministry = await repository.get_by_id(ministry_id)
            if ministry is None:
                raise MinistryNotFoundError(ministry_id)
            ministry = await repository.update_fields(ministry, {"verified": True})

        logger.info("Ministry verified", ministry_id=ministry_id)
        return ministry

    async def delete_ministry(self, ministry_id: int) -> None:
        """Delete a ministry. Fails with ReferentialIntegrityError while grants reference it."""
        async with self.db.transaction() as session:
            repository = MinistryRepository(session)
            if not await repository.exists(ministry_id):
                raise MinistryNotFoundError(ministry_id)
            await repository.delete_by_id(ministry_id)

        logger.info("Ministry deleted", ministry_id=ministry_id)

    async def total_funded(self, ministry_id: int) -> Money:
        return (await self.rollup(ministry_id)).total_funded

    async def grant_counts(self, ministry_id: int) -> GrantStatusCounts:
        return (await self.rollup(ministry_id)).grant_counts

    async def rollup(self, ministry_id: int) -> GrantRollup:
        """Funded total and zero-filled status counts for one ministry's grants."""
        async with self.db.read_only_transaction() as session:
            if not await MinistryRepository(session).exists(ministry_id):
                raise MinistryNotFoundError(ministry_id)
            grants = GrantRepository(session)
            condition = Grant.ministry_id == ministry_id
            total_funded = await grants.sum_amount([condition, Grant.status == GrantStatus.FUNDED])
            counts = await grants.count_by_status([condition])

        return GrantRollup(total_funded=total_funded, grant_counts=GrantStatusCounts.from_counts(counts))
