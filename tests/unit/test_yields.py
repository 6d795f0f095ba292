"""Unit tests for expected yield calculation"""

from decimal import Decimal

from loanbook.domain.models import FacilityYield
from loanbook.domain.yields import YieldAccumulator, expected_yield


def test_expected_yield_worked_example(make_facility, make_loan):
    """
    Facility rate 0.05; loan 500 at 0.08 with default 0.02:
    0.98 * 0.08 * 500 - 0.02 * 500 - 0.05 * 500 = 39.2 - 10 - 25 = 4.2
    """
    facility = make_facility(interest_rate="0.05", capacity=1000)
    loan = make_loan(amount=500, interest_rate="0.08", default_rate="0.02")

    assert expected_yield(loan, facility) == Decimal("4.2")


def test_expected_yield_can_be_negative(make_facility, make_loan):
    facility = make_facility(interest_rate="0.05")
    loan = make_loan(amount=100, interest_rate="0.05", default_rate="0.10")

    # 0.9 * 0.05 * 100 - 10 - 5
    assert expected_yield(loan, facility) == Decimal("-10.5")


def test_accumulator_reports_rounded_total():
    acc = YieldAccumulator()
    acc.add(1, Decimal("4.2"))

    assert acc.report() == [FacilityYield(facility_id=1, expected_yield=4)]


def test_accumulator_is_additive():
    acc = YieldAccumulator()
    acc.add(1, Decimal("4.2"))
    total = acc.add(1, Decimal("3.1"))

    assert total == Decimal("7.3")
    assert acc.total(1) == Decimal("7.3")


def test_accumulator_rounds_once_on_the_total():
    """Three loans of 4.2 report 13 (12.6 rounded), not 12 (three times 4)"""
    acc = YieldAccumulator()
    for _ in range(3):
        acc.add(5, Decimal("4.2"))

    assert acc.report() == [FacilityYield(facility_id=5, expected_yield=13)]


def test_accumulator_rounding_mode():
    half_up = YieldAccumulator("half_up")
    half_even = YieldAccumulator("half_even")
    for acc in (half_up, half_even):
        acc.add(1, Decimal("2.5"))

    assert half_up.report()[0].expected_yield == 3
    assert half_even.report()[0].expected_yield == 2


def test_accumulator_reports_only_funded_facilities_in_id_order():
    acc = YieldAccumulator()
    acc.add(3, Decimal("1"))
    acc.add(1, Decimal("2"))

    assert [y.facility_id for y in acc.report()] == [1, 3]
    assert 2 not in acc
    assert acc.total(2) == Decimal(0)
