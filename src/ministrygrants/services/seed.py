"""Demo data for local development.

``seed_demo_data`` wipes every table and loads a small, realistic data set:
eleven ministries (one unverified), four donors with six giving funds, and
grants in every lifecycle status.
"""

from datetime import timedelta
from typing import Dict

from sqlalchemy import delete
import structlog

from ..core.database_manager import DatabaseManager
from ..core.money import Money
from ..models.database import Donor, GivingFund, Grant, GrantStatus, Ministry, MinistryCategory, utcnow
from ..repositories.donor_repository import DonorRepository
from ..repositories.fund_repository import GivingFundRepository
from ..repositories.grant_repository import GrantRepository
from ..repositories.ministry_repository import MinistryRepository

logger = structlog.get_logger(__name__)


MINISTRIES = [
    {
        "name": "Samaritan's Purse",
        "ein": "58-1437002",
        "category": MinistryCategory.HUMANITARIAN,
        "description": "International relief and evangelism organization providing spiritual and physical aid to hurting people around the world.",
        "mission": "Following the example of Christ by helping those in need and sharing the Good News of salvation.",
        "website": "https://www.samaritanspurse.org",
        "city": "Boone",
        "state": "NC",
    },
    {
        "name": "Compassion International",
        "ein": "36-2423707",
        "category": MinistryCategory.HUMANITARIAN,
        "description": "Child sponsorship organization dedicated to the long-term development of children living in poverty.",
        "mission": "Releasing children from poverty in Jesus name.",
        "website": "https://www.compassion.com",
        "city": "Colorado Springs",
        "state": "CO",
    },
    {
        "name": "Cru (Campus Crusade for Christ)",
        "ein": "95-6006173",
        "category": MinistryCategory.MISSIONS,
        "description": "Interdenominational Christian parachurch organization for evangelism and discipleship.",
        "mission": "Helping to fulfill the Great Commission in the power of the Holy Spirit.",
        "website": "https://www.cru.org",
        "city": "Orlando",
        "state": "FL",
    },
    {
        "name": "Young Life",
        "ein": "84-0385934",
        "category": MinistryCategory.YOUTH,
        "description": "Youth outreach ministry reaching middle school, high school, and college students.",
        "mission": "Introducing adolescents to Jesus Christ and helping them grow in their faith.",
        "website": "https://www.younglife.org",
        "city": "Colorado Springs",
        "state": "CO",
    },
    {
        "name": "Focus on the Family",
        "ein": "95-3188150",
        "category": MinistryCategory.MEDIA,
        "description": "Christian ministry providing family advice from a biblical perspective through radio, publications, and counseling.",
        "mission": "Helping families thrive in Christ.",
        "website": "https://www.focusonthefamily.com",
        "city": "Colorado Springs",
        "state": "CO",
    },
    {
        "name": "Wheaton College",
        "ein": "36-2167892",
        "category": MinistryCategory.EDUCATION,
        "description": "Private Christian liberal arts college committed to academic excellence and spiritual growth.",
        "mission": "For Christ and His Kingdom.",
        "website": "https://www.wheaton.edu",
        "city": "Wheaton",
        "state": "IL",
    },
    {
        "name": "Fellowship of Christian Athletes",
        "ein": "44-0610626",
        "category": MinistryCategory.YOUTH,
        "description": "Sports ministry reaching coaches and athletes on the professional, college, high school, and youth levels.",
        "mission": "To lead every coach and athlete into a growing relationship with Jesus Christ.",
        "website": "https://www.fca.org",
        "city": "Kansas City",
        "state": "MO",
    },
    {
        "name": "World Vision",
        "ein": "95-1922279",
        "category": MinistryCategory.HUMANITARIAN,
        "description": "Christian humanitarian organization dedicated to working with children, families, and communities to overcome poverty and injustice.",
        "mission": "Following Jesus Christ in working with the poor and oppressed.",
        "website": "https://www.worldvision.org",
        "city": "Federal Way",
        "state": "WA",
    },
    {
        "name": "The Navigators",
        "ein": "84-0402270",
        "category": MinistryCategory.MISSIONS,
        "description": "International, interdenominational Christian ministry focused on discipleship and spiritual formation.",
        "mission": "To know Christ, make Him known, and help others do the same.",
        "website": "https://www.navigators.org",
        "city": "Colorado Springs",
        "state": "CO",
    },
    {
        "name": "First Baptist Church Atlanta",
        "ein": "58-0566194",
        "category": MinistryCategory.CHURCH,
        "description": "Historic Southern Baptist church in downtown Atlanta with global missions reach.",
        "mission": "Glorifying God by making disciples of all nations.",
        "website": "https://www.fba.org",
        "city": "Atlanta",
        "state": "GA",
    },
    {
        "name": "New Hope Community Church",
        "ein": "12-3456789",
        "category": MinistryCategory.CHURCH,
        "description": "Growing community church focused on reaching the unchurched in suburban areas.",
        "mission": "Connecting people to Jesus and each other.",
        "website": "https://www.newhopecommunity.org",
        "city": "Phoenix",
        "state": "AZ",
        "verified": False,
    },
]

DONORS = [
    ("Robert", "Thompson", "robert.thompson@example.com", "555-123-4567"),
    ("Sarah", "Mitchell", "sarah.mitchell@example.com", "555-234-5678"),
    ("David", "Anderson", "david.anderson@example.com", "555-345-6789"),
    ("Jennifer", "Williams", "jennifer.williams@example.com", "555-456-7890"),
]

# (amount, status, purpose, fund index, ministry index, days since approval, days since funding/rejection)
GRANTS = [
    ("5000", GrantStatus.PENDING, "Support for disaster relief efforts", 0, 0, None, None),
    ("2500", GrantStatus.PENDING, "Child sponsorship program", 1, 1, None, None),
    ("10000", GrantStatus.APPROVED, "Campus ministry expansion", 0, 2, 0, None),
    ("7500", GrantStatus.APPROVED, "Summer camp scholarships", 2, 3, 0, None),
    ("15000", GrantStatus.FUNDED, "Annual operating support", 0, 4, 7, 3),
    ("25000", GrantStatus.FUNDED, "Scholarship endowment", 3, 5, 14, 10),
    ("3000", GrantStatus.FUNDED, "Athletes Bible study materials", 1, 6, 21, 18),
    ("50000", GrantStatus.REJECTED, "Building expansion project", 2, 7, None, 5),
]

REJECTION_NOTE = "Rejection reason: Amount exceeds fund advisor recommended limit for single grants"


async def seed_demo_data(db: DatabaseManager) -> Dict[str, int]:
    """Replace all data with the demo set and return row counts per table."""
    now = utcnow()

    async with db.transaction() as session:
        for model in (Grant, GivingFund, Donor, Ministry):
            await session.execute(delete(model))

        ministry_repository = MinistryRepository(session)
        ministries = []
        for data in MINISTRIES:
            values = {"verified": True, "active": True, "country": "USA", **data}
            ministries.append(await ministry_repository.create(values))

        donor_repository = DonorRepository(session)
        fund_repository = GivingFundRepository(session)
        funds = []
        for index, (first_name, last_name, email, phone) in enumerate(DONORS):
            donor = await donor_repository.create({
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "phone": phone,
            })
            funds.append(await fund_repository.create({
                "name": f"{last_name} Family Giving Fund",
                "description": f"Primary giving fund for the {last_name} family",
                "balance": Money.parse(50000 + index * 25000),
                "donor_id": donor.id,
            }))
            if index < 2:
                funds.append(await fund_repository.create({
                    "name": f"{last_name} Legacy Fund",
                    "description": "Legacy and planned giving fund",
                    "balance": Money.parse(100000 + index * 50000),
                    "donor_id": donor.id,
                }))

        verified = [ministry for ministry in ministries if ministry.verified]
        grant_repository = GrantRepository(session)
        for amount, status, purpose, fund_index, ministry_index, approved_days, closed_days in GRANTS:
            values = {
                "amount": Money.parse(amount),
                "status": status,
                "purpose": purpose,
                "giving_fund_id": funds[fund_index].id,
                "ministry_id": verified[ministry_index].id,
                "requested_at": now - timedelta(days=(approved_days or closed_days or 0) + 1),
            }
            if approved_days is not None:
                values["approved_at"] = now - timedelta(days=approved_days)
            if status == GrantStatus.FUNDED:
                values["funded_at"] = now - timedelta(days=closed_days)
            elif status == GrantStatus.REJECTED:
                values["rejected_at"] = now - timedelta(days=closed_days)
                values["notes"] = REJECTION_NOTE
            await grant_repository.create(values)

    summary = {
        "ministries": len(ministries),
        "verified_ministries": len(verified),
        "donors": len(DONORS),
        "funds": len(funds),
        "grants": len(GRANTS),
    }
    logger.info("Demo data seeded", **summary)
    return summary
