"""Donor registry."""

import re
from typing import List, Optional

import structlog

from ..core.database_manager import DatabaseManager
from ..core.exceptions import DonorNotFoundError, InvalidEmailError, ResourceAlreadyExistsError
from ..core.money import Money
from ..models.database import Donor, GivingFund
from ..repositories.donor_repository import DonorRepository
from ..repositories.fund_repository import GivingFundRepository

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def normalize_email(email: str) -> str:
    """Trim and lower-case ``email``, raising InvalidEmailError if it is not address-shaped."""
    normalized = (email or "").strip().lower()
    if not EMAIL_PATTERN.fullmatch(normalized):
        raise InvalidEmailError(email)
    return normalized


class DonorService:
    """Create and look up donors."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def create_donor(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone: Optional[str] = None,
    ) -> Donor:
        email = normalize_email(email)

        async with self.db.transaction() as session:
            repository = DonorRepository(session)
            if await repository.get_by_email(email):
                raise ResourceAlreadyExistsError("Donor", email)
            donor = await repository.create({
                "first_name": first_name.strip(),
                "last_name": last_name.strip(),
                "email": email,
                "phone": phone.strip() if phone else None,
            })

        logger.info("Donor created", donor_id=donor.id)
        return donor

    async def get_donor(self, donor_id: int) -> Donor:
        async with self.db.read_only_transaction() as session:
            donor = await DonorRepository(session).get_by_id(donor_id)
        if donor is None:
            raise DonorNotFoundError(donor_id)
        return donor

    async def list_donors(self) -> List[Donor]:
        """All donors by last name, then first name."""
        async with self.db.read_only_transaction() as session:
            return await DonorRepository(session).list_by_name()

    async def total_balance(self, donor_id: int) -> Money:
        """Sum of the balances of every fund the donor owns."""
        async with self.db.read_only_transaction() as session:
            if not await DonorRepository(session).exists(donor_id):
                raise DonorNotFoundError(donor_id)
            return await GivingFundRepository(session).sum_balance([GivingFund.donor_id == donor_id])
