"""
Tests for token amount conversion helpers.
"""

from decimal import Decimal

import pytest

from txflow.services.amounts import format_token_amount, is_empty_amount, to_base_units, to_decimal


@pytest.mark.parametrize("amount", [None, "", " ", ".", "0", "0.0", "00.000", "abc", "NaN"])
def test_empty_amounts(amount):
    assert is_empty_amount(amount) is True


@pytest.mark.parametrize("amount", ["1", "0.1", ".5", "1."])
def test_non_empty_amounts(amount):
    assert is_empty_amount(amount) is False


def test_to_decimal_rejects_non_finite():
    assert to_decimal("Infinity") is None
    assert to_decimal("1.25") == Decimal("1.25")


def test_to_base_units():
    assert to_base_units("1.5", 6) == "1500000"
    assert to_base_units("0.1", 18) == "100000000000000000"
    # extra precision is truncated, never rounded up
    assert to_base_units("1.0000009", 6) == "1000000"


def test_to_base_units_invalid():
    with pytest.raises(ValueError):
        to_base_units("one", 18)


def test_format_token_amount():
    assert format_token_amount("1500000", 6) == "1.5"
    assert format_token_amount("51234500000000000000", 18) == "51.2345"
    assert format_token_amount("2000000000000000000000", 18) == "2000"
    assert format_token_amount("0", 18) == "0"
    assert format_token_amount("", 18) == ""


def test_large_amounts_keep_every_digit():
    assert to_base_units("12345678901.123456789012345678", 18) == "12345678901123456789012345678"
    assert format_token_amount("12345678901123456789012345678", 18) == "12345678901.123456789012345678"


def test_exponent_notation():
    assert to_base_units("1E+30", 18) == "1" + "0" * 48
    assert format_token_amount("1" + "0" * 48, 18) == "1" + "0" * 30
