"""Tests for dashboard aggregates and the demo seed."""

from ministrygrants.core.money import Money
from ministrygrants.services.seed import seed_demo_data


async def test_empty_database_is_zero_filled(dashboard_service):
    stats = await dashboard_service.get_stats()

    assert stats.total_ministries == 0
    assert stats.total_balance == Money.zero()
    assert stats.total_disbursed.to_fixed() == "0.00"
    assert stats.pending_amount.to_fixed() == "0.00"
    counts = stats.grants_by_status
    assert (counts.pending, counts.approved, counts.funded, counts.rejected, counts.total) == (0, 0, 0, 0, 0)

    dumped = stats.model_dump(mode="json", by_alias=True)
    assert dumped["grantsByStatus"] == {"pending": 0, "approved": 0, "funded": 0, "rejected": 0, "total": 0}
    assert dumped["totalBalance"] == "0.00"


async def test_stats_after_activity(dashboard_service, grant_service, make_ministry, make_fund):
    ministry = await make_ministry()
    await make_ministry(verified=False)
    fund = await make_fund("50000.00")
    await make_fund("1000.50")

    funded = await grant_service.create_grant_request("10000", fund.id, ministry.id)
    await grant_service.approve_grant(funded.id)
    await grant_service.fund_grant(funded.id)
    await grant_service.create_grant_request("250.25", fund.id, ministry.id)
    await grant_service.create_grant_request("100", fund.id, ministry.id)

    stats = await dashboard_service.get_stats()

    assert stats.total_ministries == 2
    assert stats.verified_ministries == 1
    assert stats.total_donors == 2
    assert stats.total_funds == 2
    assert stats.total_balance == Money.parse("41000.50")
    assert stats.total_disbursed == Money.parse("10000")
    assert stats.pending_amount == Money.parse("350.25")
    assert stats.grants_by_status.pending == 2
    assert stats.grants_by_status.approved == 0
    assert stats.grants_by_status.funded == 1
    assert stats.grants_by_status.total == 3


async def test_seed_demo_data(db, dashboard_service):
    summary = await seed_demo_data(db)

    assert summary == {
        "ministries": 11,
        "verified_ministries": 10,
        "donors": 4,
        "funds": 6,
        "grants": 8,
    }

    stats = await dashboard_service.get_stats()
    assert stats.total_ministries == 11
    assert stats.verified_ministries == 10
    assert stats.grants_by_status.pending == 2
    assert stats.grants_by_status.approved == 2
    assert stats.grants_by_status.funded == 3
    assert stats.grants_by_status.rejected == 1
    assert stats.total_disbursed == Money.parse("43000")
    assert stats.pending_amount == Money.parse("7500")

    # Seeding again replaces rather than duplicates
    await seed_demo_data(db)
    assert (await dashboard_service.get_stats()).total_ministries == 11
