"""Dashboard DTOs for Ministry-Grants."""

from ..core.money import Money
from .common import CamelModel
from .grant_schemas import GrantStatusCounts


class DashboardStats(CamelModel):
    """Point-in-time rollup across ministries, donors, funds and grants."""
    total_ministries: int
    verified_ministries: int
    total_donors: int
    total_funds: int
    total_balance: Money
    total_disbursed: Money
    pending_amount: Money
    grants_by_status: GrantStatusCounts
