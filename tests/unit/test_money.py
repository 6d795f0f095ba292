"""Unit tests for minor-unit and rate parsing"""

from decimal import Decimal

import pytest

from loanbook.utils.money import parse_minor_units, parse_rate, round_minor_units, to_decimal


def test_to_decimal_keeps_float_literal():
    """0.1 becomes Decimal('0.1'), not the binary expansion"""
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(" 0.25 ") == Decimal("0.25")


@pytest.mark.parametrize("value", ["abc", "", "nan", "inf", True])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        to_decimal(value)


def test_parse_minor_units_accepts_integral_decimal():
    assert parse_minor_units("61104.0") == 61104
    assert parse_minor_units("500") == 500
    assert parse_minor_units(75) == 75


def test_parse_minor_units_rejects_fraction():
    """Fractions of a minor unit fail instead of being truncated"""
    with pytest.raises(ValueError):
        parse_minor_units("100.5")


def test_parse_rate_bounds():
    assert parse_rate("0") == Decimal("0")
    assert parse_rate("1") == Decimal("1")
    with pytest.raises(ValueError):
        parse_rate("1.01")
    with pytest.raises(ValueError):
        parse_rate("-0.01")


def test_round_minor_units_half_up_vs_half_even():
    assert round_minor_units(Decimal("2.5"), "half_up") == 3
    assert round_minor_units(Decimal("2.5"), "half_even") == 2
    assert round_minor_units(Decimal("3.5"), "half_even") == 4


def test_round_minor_units_does_not_truncate():
    """4.6 rounds to 5 where int() would give 4"""
    assert round_minor_units(Decimal("4.6")) == 5
    assert round_minor_units(Decimal("4.2")) == 4
    assert round_minor_units(Decimal("-10.5"), "half_up") == -11


def test_round_minor_units_unknown_mode():
    with pytest.raises(ValueError):
        round_minor_units(Decimal("1.5"), "ceiling")
