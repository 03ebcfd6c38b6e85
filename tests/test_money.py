"""Tests for the Money value type."""

from decimal import Decimal

import pytest

from ministrygrants.core.exceptions import InvalidAmountError
from ministrygrants.core.money import Money
from ministrygrants.schemas import ContributionRequest, GivingFundResponse


@pytest.mark.parametrize("raw, cents", [
    ("10000", 1_000_000),
    ("10000.5", 1_000_050),
    ("0.01", 1),
    ("$1,234.56", 123_456),
    (" 42.10 ", 4_210),
    (25, 2_500),
    (Decimal("19.99"), 1_999),
    ("-3.50", -350),
])
def test_parse(raw, cents):
    assert Money.parse(raw).cents == cents


@pytest.mark.parametrize("raw", [0.1, True, "", "abc", "1.005", "NaN", "Infinity", "1e400", None])
def test_parse_rejects(raw):
    with pytest.raises(InvalidAmountError):
        Money.parse(raw)


def test_to_fixed_always_two_decimals():
    assert Money.parse("40000").to_fixed() == "40000.00"
    assert Money.parse("0.5").to_fixed() == "0.50"
    assert Money.from_cents(-1).to_fixed() == "-0.01"
    assert str(Money.zero()) == "0.00"


def test_arithmetic_and_comparison():
    balance = Money.parse("50000")
    amount = Money.parse("10000")

    assert balance - amount == Money.parse("40000")
    assert amount + amount == Money.parse("20000")
    assert amount.less_than(balance)
    assert not balance.less_than("50000.00")
    assert (amount - balance).is_negative()
    assert (amount - amount).is_zero()
    assert amount + amount + Money.parse("0.01") == Money.parse("20000.01")


def test_decimal_sums_are_exact():
    total = Money.zero()
    for _ in range(10):
        total = total + Money.parse("0.10")
    assert total == Money.parse("1.00")


def test_immutable():
    money = Money.parse("1")
    with pytest.raises(AttributeError):
        money.cents = 5


def test_pydantic_boundary():
    request = ContributionRequest.model_validate({"amount": "2500.00"})
    assert request.amount == Money.parse("2500")

    from_json_number = ContributionRequest.model_validate_json('{"amount": 2500.1}')
    assert from_json_number.amount.cents == 250_010

    with pytest.raises(ValueError):
        ContributionRequest.model_validate({"amount": "12.345"})


def test_serializes_as_two_decimal_string():
    response = GivingFundResponse(
        id=1,
        name="Thompson Family Giving Fund",
        balance=Money.parse("40000"),
        active=True,
        donor_id=1,
        created_at="2026-01-16T03:32:41Z",
        updated_at="2026-01-16T03:32:41Z",
    )

    dumped = response.model_dump(mode="json", by_alias=True)
    assert dumped["balance"] == "40000.00"
    assert dumped["donorId"] == 1
