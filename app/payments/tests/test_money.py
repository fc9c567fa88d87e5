"""
Tests for minor/major unit conversion.
"""

from decimal import Decimal

import pytest

from payments.exceptions import PaymentValidationError
from payments.money import (
    currency_exponent,
    format_major_units,
    to_major_units,
    to_minor_units,
)


class TestCurrencyExponent:
    @pytest.mark.parametrize(
        "currency,expected",
        [
            ("usd", 2),
            ("EUR", 2),
            ("jpy", 0),
            ("KRW", 0),
            ("kwd", 3),
            ("bhd", 3),
            ("", 2),
        ],
    )
    def test_exponent(self, currency, expected):
        assert currency_exponent(currency) == expected


class TestToMajorUnits:
    """Conversions are exact and keep the currency's precision."""

    def test_two_decimal_currency(self):
        assert format_major_units(12345, "usd") == "123.45"

    def test_zero_decimal_currency(self):
        assert format_major_units(500, "jpy") == "500"

    def test_three_decimal_currency(self):
        assert format_major_units(12345, "kwd") == "12.345"

    def test_trailing_zeros_are_kept(self):
        assert format_major_units(12300, "usd") == "123.00"
        assert to_major_units(12300, "usd") == Decimal("123.00")

    def test_small_amounts(self):
        assert format_major_units(1, "usd") == "0.01"
        assert format_major_units(0, "usd") == "0.00"

    def test_large_amount_has_no_float_error(self):
        assert format_major_units(999999999999, "usd") == "9999999999.99"

    def test_returns_decimal(self):
        assert isinstance(to_major_units(12345, "usd"), Decimal)

    @pytest.mark.parametrize("bad", [None, "12345", 123.45, True])
    def test_rejects_non_integers(self, bad):
        with pytest.raises(PaymentValidationError):
            to_major_units(bad, "usd")

    def test_rejects_negative(self):
        with pytest.raises(PaymentValidationError):
            to_major_units(-1, "usd")


class TestToMinorUnits:
    def test_two_decimal_currency(self):
        assert to_minor_units(Decimal("123.45"), "usd") == 12345

    def test_zero_decimal_currency(self):
        assert to_minor_units(Decimal("500"), "jpy") == 500

    def test_three_decimal_currency(self):
        assert to_minor_units(Decimal("12.345"), "kwd") == 12345

    def test_accepts_strings(self):
        assert to_minor_units("10.50", "usd") == 1050

    def test_rounds_half_up(self):
        assert to_minor_units(Decimal("0.005"), "usd") == 1
        assert to_minor_units(Decimal("0.5"), "jpy") == 1
