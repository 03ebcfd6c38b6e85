"""Tests for the ministry directory: registration, filters and cursor pagination."""

import pytest

from ministrygrants.core.cursor import encode_cursor
from ministrygrants.core.exceptions import (
    InvalidCursorError,
    InvalidEINError,
    MinistryNotFoundError,
    ReferentialIntegrityError,
    ResourceAlreadyExistsError,
)
from ministrygrants.models.database import MinistryCategory
from ministrygrants.repositories.ministry_repository import ministry_filter_conditions
from ministrygrants.schemas import MinistryCreate, MinistryFilter, MinistryUpdate


async def test_create_defaults(ministry_service):
    ministry = await ministry_service.create_ministry(MinistryCreate(
        name="  Samaritan's Purse ",
        ein="58-1437002",
        category=MinistryCategory.HUMANITARIAN,
        state="NC",
    ))

    assert ministry.id is not None
    assert ministry.name == "Samaritan's Purse"
    assert ministry.verified is False
    assert ministry.active is True
    assert ministry.country == "USA"


@pytest.mark.parametrize("ein", ["581437002", "58-143700", "AB-1234567", "58-14370021"])
async def test_create_rejects_bad_ein(ministry_service, ein):
    with pytest.raises(InvalidEINError):
        await ministry_service.create_ministry(
            MinistryCreate(name="Bad EIN", ein=ein, category=MinistryCategory.CHURCH)
        )


async def test_update_rejects_bad_ein(ministry_service, make_ministry):
    ministry = await make_ministry(ein="84-0385934")

    with pytest.raises(InvalidEINError):
        await ministry_service.update_ministry(ministry.id, MinistryUpdate(ein="84-03859340000"))

    assert (await ministry_service.get_ministry(ministry.id)).ein == "84-0385934"


async def test_duplicate_ein_conflicts(ministry_service, make_ministry):
    await make_ministry(ein="36-2423707")

    with pytest.raises(ResourceAlreadyExistsError):
        await make_ministry(ein="36-2423707")


async def test_update_changes_only_provided_fields(ministry_service, make_ministry):
    ministry = await make_ministry(name="Young Life", state="CO", city="Colorado Springs")

    updated = await ministry_service.update_ministry(ministry.id, MinistryUpdate(city="Denver"))

    assert updated.city == "Denver"
    assert updated.state == "CO"
    assert updated.name == "Young Life"
    assert updated.verified is True


async def test_verify_and_get(ministry_service):
    ministry = await ministry_service.create_ministry(
        MinistryCreate(name="New Hope Community Church", category=MinistryCategory.CHURCH)
    )

    await ministry_service.verify_ministry(ministry.id)

    assert (await ministry_service.get_ministry(ministry.id)).verified is True


async def test_missing_ministry_raises_not_found(ministry_service):
    with pytest.raises(MinistryNotFoundError):
        await ministry_service.get_ministry(999)
    with pytest.raises(MinistryNotFoundError):
        await ministry_service.verify_ministry(999)
    with pytest.raises(MinistryNotFoundError):
        await ministry_service.delete_ministry(999)


async def test_delete_ministry_without_grants(ministry_service, make_ministry):
    ministry = await make_ministry()

    await ministry_service.delete_ministry(ministry.id)

    with pytest.raises(MinistryNotFoundError):
        await ministry_service.get_ministry(ministry.id)


async def test_delete_ministry_with_grants_is_blocked(ministry_service, grant_service, make_ministry, make_fund):
    ministry = await make_ministry()
    fund = await make_fund()
    await grant_service.create_grant_request("100", fund.id, ministry.id)

    with pytest.raises(ReferentialIntegrityError):
        await ministry_service.delete_ministry(ministry.id)

    assert (await ministry_service.get_ministry(ministry.id)).id == ministry.id


def test_filter_translation_only_uses_present_fields():
    assert ministry_filter_conditions(None) == []
    assert ministry_filter_conditions(MinistryFilter()) == []

    conditions = ministry_filter_conditions(MinistryFilter(verified=False, state="CO", search="life"))
    assert len(conditions) == 3

    rendered = [str(condition) for condition in conditions]
    assert "ministries.verified" in rendered[0]
    assert "ministries.state" in rendered[1]
    assert "lower(ministries.name)" in rendered[2]


async def test_pagination_walks_twelve_matches_in_pages_of_five(ministry_service, make_ministry):
    for n in range(12):
        await make_ministry(name=f"Harvest Church {n}", category=MinistryCategory.CHURCH)
    for n in range(3):
        await make_ministry(name=f"Campus Outreach {n}", category=MinistryCategory.YOUTH)

    filter = MinistryFilter(category=MinistryCategory.CHURCH)

    first = await ministry_service.list_ministries(filter, limit=5)
    assert len(first.edges) == 5
    assert first.page_info.has_next_page is True
    assert first.page_info.has_previous_page is False
    assert first.page_info.total_count == 12
    assert first.page_info.start_cursor == first.edges[0].cursor
    assert first.page_info.end_cursor == first.edges[-1].cursor

    second = await ministry_service.list_ministries(filter, limit=5, after=first.page_info.end_cursor)
    assert len(second.edges) == 5
    assert second.page_info.has_next_page is True
    assert second.page_info.has_previous_page is True

    third = await ministry_service.list_ministries(filter, limit=5, after=second.page_info.end_cursor)
    assert len(third.edges) == 2
    assert third.page_info.has_next_page is False
    assert third.page_info.total_count == 12

    ids = [edge.node.id for page in (first, second, third) for edge in page.edges]
    assert ids == sorted(ids)
    assert len(set(ids)) == 12


async def test_filters_are_conjunctive(ministry_service, make_ministry):
    await make_ministry(name="Young Life", category=MinistryCategory.YOUTH, state="CO")
    await make_ministry(name="Life Church", category=MinistryCategory.CHURCH, state="OK")
    await make_ministry(name="Wheaton College", category=MinistryCategory.EDUCATION, state="IL")
    await make_ministry(name="Life Teen", category=MinistryCategory.YOUTH, state="AZ", verified=False)

    search = await ministry_service.list_ministries(MinistryFilter(search="LIFE"))
    assert {edge.node.name for edge in search.edges} == {"Young Life", "Life Church", "Life Teen"}

    combined = await ministry_service.list_ministries(
        MinistryFilter(search="life", category=MinistryCategory.YOUTH, verified=True)
    )
    assert [edge.node.name for edge in combined.edges] == ["Young Life"]

    by_state = await ministry_service.list_ministries(MinistryFilter(state="IL"))
    assert [edge.node.name for edge in by_state.edges] == ["Wheaton College"]


async def test_search_matches_wildcards_literally(ministry_service, make_ministry):
    await make_ministry(name="100% Kingdom")
    await make_ministry(name="Kingdom Builders")

    result = await ministry_service.list_ministries(MinistryFilter(search="%"))

    assert [edge.node.name for edge in result.edges] == ["100% Kingdom"]


async def test_inactive_filter(ministry_service, make_ministry):
    await make_ministry(name="Active Ministry")
    await make_ministry(name="Retired Ministry", active=False)

    result = await ministry_service.list_ministries(MinistryFilter(active=False))

    assert [edge.node.name for edge in result.edges] == ["Retired Ministry"]


async def test_limit_is_clamped(ministry_service, make_ministry):
    for _ in range(3):
        await make_ministry()

    assert len((await ministry_service.list_ministries(limit=0)).edges) == 1
    assert len((await ministry_service.list_ministries(limit=-10)).edges) == 1
    assert len((await ministry_service.list_ministries(limit=1000)).edges) == 3
    assert ministry_service.clamp_limit(1000) == 100
    assert ministry_service.clamp_limit(None) == 20


async def test_empty_page_has_null_cursors(ministry_service):
    result = await ministry_service.list_ministries(MinistryFilter(search="nothing matches"))

    assert result.edges == []
    assert result.page_info.start_cursor is None
    assert result.page_info.end_cursor is None
    assert result.page_info.has_next_page is False
    assert result.page_info.total_count == 0


async def test_cursor_past_the_end(ministry_service, make_ministry):
    await make_ministry()

    result = await ministry_service.list_ministries(after=encode_cursor(10_000))

    assert result.edges == []
    assert result.page_info.has_previous_page is True


async def test_invalid_cursor_raises(ministry_service):
    with pytest.raises(InvalidCursorError):
        await ministry_service.list_ministries(after="bogus")


async def test_rollup_zero_fills(ministry_service, grant_service, make_ministry, make_fund):
    ministry = await make_ministry()
    fund = await make_fund("1000")
    grant = await grant_service.create_grant_request("250", fund.id, ministry.id)
    await grant_service.approve_grant(grant.id)
    await grant_service.fund_grant(grant.id)
    await grant_service.create_grant_request("50", fund.id, ministry.id)

    rollup = await ministry_service.rollup(ministry.id)

    assert rollup.total_funded.to_fixed() == "250.00"
    assert rollup.grant_counts.funded == 1
    assert rollup.grant_counts.pending == 1
    assert rollup.grant_counts.approved == 0
    assert rollup.grant_counts.rejected == 0
    assert rollup.grant_counts.total == 2
