"""Tests for giving funds, contributions and donors."""

import pytest

from ministrygrants.core.exceptions import (
    DonorNotFoundError,
    FundInactiveError,
    FundNotFoundError,
    InvalidAmountError,
    InvalidEmailError,
    ResourceAlreadyExistsError,
)
from ministrygrants.core.money import Money


async def test_contribute_increments_balance(ledger_service, make_fund):
    fund = await make_fund("50000.00")

    updated = await ledger_service.contribute(fund.id, "2500.50")

    assert updated.balance == Money.parse("52500.50")
    assert (await ledger_service.get_fund(fund.id)).balance.to_fixed() == "52500.50"


async def test_contributions_accumulate_exactly(ledger_service, make_fund):
    fund = await make_fund("0")

    for _ in range(10):
        await ledger_service.contribute(fund.id, "0.10")

    assert (await ledger_service.get_fund(fund.id)).balance == Money.parse("1.00")


@pytest.mark.parametrize("amount", ["0", "-100.00", "abc", "1.001"])
async def test_contribute_rejects_invalid_amounts(ledger_service, make_fund, amount):
    fund = await make_fund("100.00")

    with pytest.raises(InvalidAmountError):
        await ledger_service.contribute(fund.id, amount)

    assert (await ledger_service.get_fund(fund.id)).balance == Money.parse("100.00")


async def test_contribute_to_missing_fund(ledger_service):
    with pytest.raises(FundNotFoundError):
        await ledger_service.contribute(12345, "10")


async def test_contribute_to_inactive_fund(ledger_service, make_fund):
    fund = await make_fund("100.00", active=False)

    with pytest.raises(FundInactiveError) as exc_info:
        await ledger_service.contribute(fund.id, "10")

    assert exc_info.value.message == "Cannot add funds to an inactive giving fund"
    assert (await ledger_service.get_fund(fund.id)).balance == Money.parse("100.00")


async def test_create_fund(donor_service, ledger_service):
    donor = await donor_service.create_donor("Robert", "Thompson", "robert.thompson@example.com")

    fund = await ledger_service.create_fund(donor.id, "Thompson Legacy Fund", "Planned giving")
    assert fund.balance.is_zero()
    assert fund.active is True

    funded = await ledger_service.create_fund(donor.id, "Thompson Family Giving Fund", initial_balance="50000")
    assert funded.balance.to_fixed() == "50000.00"

    assert [f.id for f in await ledger_service.list_funds(donor.id)] == [funded.id, fund.id]


async def test_create_fund_validation(donor_service, ledger_service):
    with pytest.raises(DonorNotFoundError):
        await ledger_service.create_fund(999, "Orphan Fund")

    donor = await donor_service.create_donor("Sarah", "Mitchell", "sarah.mitchell@example.com")
    with pytest.raises(InvalidAmountError):
        await ledger_service.create_fund(donor.id, "Overdrawn Fund", initial_balance="-1.00")


async def test_fund_rollup(grant_service, ledger_service, make_ministry, make_fund):
    ministry = await make_ministry()
    fund = await make_fund("1000.00")
    paid = await grant_service.create_grant_request("400", fund.id, ministry.id)
    await grant_service.approve_grant(paid.id)
    await grant_service.fund_grant(paid.id)
    declined = await grant_service.create_grant_request("50", fund.id, ministry.id)
    await grant_service.reject_grant(declined.id)

    assert await ledger_service.total_disbursed(fund.id) == Money.parse("400")
    counts = await ledger_service.grant_counts(fund.id)
    assert (counts.pending, counts.approved, counts.funded, counts.rejected, counts.total) == (0, 0, 1, 1, 2)

    with pytest.raises(FundNotFoundError):
        await ledger_service.rollup(999)


async def test_donor_email_is_normalized(donor_service):
    donor = await donor_service.create_donor(" David ", "Anderson", "  David.Anderson@Example.COM ")

    assert donor.email == "david.anderson@example.com"
    assert donor.first_name == "David"
    assert donor.full_name == "David Anderson"


@pytest.mark.parametrize("email", ["not-an-email", "a@b", "@example.com", "two words@example.com", ""])
async def test_donor_rejects_bad_email(donor_service, email):
    with pytest.raises(InvalidEmailError):
        await donor_service.create_donor("Jennifer", "Williams", email)


async def test_duplicate_donor_email(donor_service):
    await donor_service.create_donor("Jennifer", "Williams", "jennifer.williams@example.com")

    with pytest.raises(ResourceAlreadyExistsError):
        await donor_service.create_donor("Jen", "Williams", "JENNIFER.WILLIAMS@example.com")


async def test_donor_listing_and_balance(donor_service, ledger_service):
    zoe = await donor_service.create_donor("Zoe", "Anderson", "zoe@example.com")
    adam = await donor_service.create_donor("Adam", "Anderson", "adam@example.com")
    brown = await donor_service.create_donor("Amy", "Brown", "amy@example.com")
    await ledger_service.create_fund(adam.id, "Primary", initial_balance="100.25")
    await ledger_service.create_fund(adam.id, "Legacy", initial_balance="899.75")

    assert [d.id for d in await donor_service.list_donors()] == [adam.id, zoe.id, brown.id]
    assert await donor_service.total_balance(adam.id) == Money.parse("1000.00")
    assert (await donor_service.total_balance(zoe.id)).is_zero()

    with pytest.raises(DonorNotFoundError):
        await donor_service.get_donor(999)
