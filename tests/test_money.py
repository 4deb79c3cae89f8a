"""Tests for the integer-cent money helpers."""

from decimal import Decimal

import pytest

from hisab.ledger.errors import InvalidAmountError
from hisab.ledger.money import format_currency, from_cents, parse_amount, to_cents


class TestParseAmount:
    """Tests for boundary parsing."""

    def test_accepts_numbers_and_strings(self):
        """Test that ints, strings and Decimals parse unchanged."""
        assert parse_amount(10) == Decimal("10")
        assert parse_amount(" 12.50 ") == Decimal("12.50")
        assert parse_amount(Decimal("3.33")) == Decimal("3.33")

    def test_float_goes_through_str(self):
        """Test that 0.1 means ten cents, not the binary approximation."""
        assert parse_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", ["abc", "", "   ", None, True, "NaN", "Infinity"])
    def test_rejects_non_numeric(self, value):
        """Test that non-numeric and non-finite values are rejected."""
        with pytest.raises(InvalidAmountError):
            parse_amount(value)

    def test_rejects_unsupported_type(self):
        """Test that lists and other types are rejected."""
        with pytest.raises(InvalidAmountError):
            parse_amount([10])


class TestCents:
    """Tests for cent conversion."""

    def test_to_cents(self):
        """Test basic conversion."""
        assert to_cents("10") == 1000
        assert to_cents("3.34") == 334
        assert to_cents(0.1) == 10

    def test_to_cents_rounds_half_up(self):
        """Test that half cents round away from zero."""
        assert to_cents("2.675") == 268
        assert to_cents("2.674") == 267
        assert to_cents("-1.005") == -101

    def test_from_cents(self):
        """Test conversion back to two-decimal Decimals."""
        assert from_cents(334) == Decimal("3.34")
        assert from_cents(-5) == Decimal("-0.05")
        assert str(from_cents(1000)) == "10.00"


class TestFormatCurrency:
    """Tests for display formatting."""

    def test_known_symbols(self):
        """Test each supported currency symbol."""
        assert format_currency(Decimal("12.5"), "USD") == "$12.50"
        assert format_currency(Decimal("12.5"), "EUR") == "€12.50"
        assert format_currency(Decimal("12.5"), "GBP") == "£12.50"
        assert format_currency(Decimal("12.5"), "CAD") == "C$12.50"
        assert format_currency(Decimal("12.5"), "INR") == "₹12.50"

    def test_unknown_currency_defaults_to_dollar(self):
        """Test the fallback symbol."""
        assert format_currency(5, "XYZ") == "$5.00"

    def test_rounds_to_cents(self):
        """Test that formatting rounds to the cent."""
        assert format_currency(3.333, "USD") == "$3.33"
