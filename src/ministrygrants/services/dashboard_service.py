"""Dashboard aggregates."""

from ..core.database_manager import DatabaseManager
from ..models.database import Grant, GrantStatus, Ministry
from ..repositories.donor_repository import DonorRepository
from ..repositories.fund_repository import GivingFundRepository
from ..repositories.grant_repository import GrantRepository
from ..repositories.ministry_repository import MinistryRepository
from ..schemas.dashboard_schemas import DashboardStats
from ..schemas.grant_schemas import GrantStatusCounts


class DashboardService:
    """Point-in-time totals across the whole system."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_stats(self) -> DashboardStats:
        """Counts and money sums read in a single transaction."""
        async with self.db.read_only_transaction() as session:
            ministries = MinistryRepository(session)
            funds = GivingFundRepository(session)
            grants = GrantRepository(session)

            total_ministries = await ministries.count()
            verified_ministries = await ministries.count([Ministry.verified.is_(True)])
            total_donors = await DonorRepository(session).count()
            total_funds = await funds.count()
            total_balance = await funds.sum_balance()
            total_disbursed = await grants.sum_amount([Grant.status == GrantStatus.FUNDED])
            pending_amount = await grants.sum_amount([Grant.status == GrantStatus.PENDING])
            counts = await grants.count_by_status()

        return DashboardStats(
            total_ministries=total_ministries,
            verified_ministries=verified_ministries,
            total_donors=total_donors,
            total_funds=total_funds,
            total_balance=total_balance,
            total_disbursed=total_disbursed,
            pending_amount=pending_amount,
            grants_by_status=GrantStatusCounts.from_counts(counts),
        )
