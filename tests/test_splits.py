"""
Tests for the split calculator.

Every accepted split must add up to the expense total in cents.
"""

from decimal import Decimal

import pytest

from hisab.ledger.errors import (
    DuplicateParticipantError,
    EmptySplitError,
    InvalidAmountError,
    PercentageSumError,
    SplitMismatchError,
)
from hisab.ledger.money import to_cents
from hisab.ledger.splits import (
    calculate_custom_split,
    calculate_equal_split,
    calculate_percentage_split,
    calculate_split,
)
from hisab.models import SplitMethod


def total_cents(split):
    return sum(to_cents(v) for v in split.values())


class TestEqualSplit:
    """Tests for equal splits."""

    def test_ten_dollars_three_ways(self):
        """Test that the first participant in list order gets the extra cent."""
        split = calculate_equal_split(["Alice", "Bob", "Carol"], Decimal("10"))
        assert split == {
            "Alice": Decimal("3.34"),
            "Bob": Decimal("3.33"),
            "Carol": Decimal("3.33"),
        }

    def test_remainder_follows_list_order(self):
        """Test that reordering the list moves the extra cents."""
        split = calculate_equal_split(["Carol", "Bob", "Alice"], "0.05")
        assert split == {
            "Carol": Decimal("0.02"),
            "Bob": Decimal("0.02"),
            "Alice": Decimal("0.01"),
        }

    @pytest.mark.parametrize("count", range(1, 13))
    @pytest.mark.parametrize("amount", ["0.01", "1", "10", "99.99", "1234.57"])
    def test_always_reconciles(self, count, amount):
        """Test that shares add up to the total for 1..12 participants."""
        names = [f"P{i}" for i in range(count)]
        split = calculate_equal_split(names, amount)
        assert list(split) == names
        assert total_cents(split) == to_cents(amount)
        shares = {to_cents(v) for v in split.values()}
        assert max(shares) - min(shares) <= 1

    def test_single_participant_gets_everything(self):
        """Test a one-person split."""
        assert calculate_equal_split(["Alice"], "42.42") == {"Alice": Decimal("42.42")}

    def test_rejects_no_participants(self):
        """Test that an empty participant list is rejected."""
        with pytest.raises(EmptySplitError):
            calculate_equal_split([], "10")

    def test_rejects_duplicates(self):
        """Test that a repeated name is rejected."""
        with pytest.raises(DuplicateParticipantError):
            calculate_equal_split(["Alice", "Alice"], "10")

    @pytest.mark.parametrize("amount", ["0", "-5", "0.001"])
    def test_rejects_non_positive_amount(self, amount):
        """Test that amounts rounding to zero cents or less are rejected."""
        with pytest.raises(InvalidAmountError):
            calculate_equal_split(["Alice"], amount)


class TestCustomSplit:
    """Tests for custom-amount splits."""

    def test_accepts_matching_entries(self):
        """Test that entries adding up to the total are accepted."""
        split = calculate_custom_split({"Alice": "12.50", "Bob": "7.50"}, "20")
        assert split == {"Alice": Decimal("12.50"), "Bob": Decimal("7.50")}

    def test_mismatch_is_rejected(self):
        """Test that $10 + $5 against $20 is a mismatch."""
        with pytest.raises(SplitMismatchError) as exc_info:
            calculate_custom_split({"Alice": 10, "Bob": 5}, 20)
        assert exc_info.value.expected_cents == 2000
        assert exc_info.value.actual_cents == 1500

    def test_zero_and_blank_entries_are_left_out(self):
        """Test that only nonzero entries appear in the result."""
        split = calculate_custom_split({"Alice": "20", "Bob": "0", "Carol": "", "Dan": None}, "20")
        assert split == {"Alice": Decimal("20.00")}

    def test_all_zero_is_empty(self):
        """Test that no nonzero entries is an empty split, not a mismatch."""
        with pytest.raises(EmptySplitError):
            calculate_custom_split({"Alice": "0", "Bob": ""}, "20")

    def test_negative_entry_rejected(self):
        """Test that negative entries are rejected."""
        with pytest.raises(InvalidAmountError):
            calculate_custom_split({"Alice": "25", "Bob": "-5"}, "20")

    def test_non_numeric_entry_rejected(self):
        """Test that garbage entries are rejected."""
        with pytest.raises(InvalidAmountError):
            calculate_custom_split({"Alice": "ten"}, "10")


class TestPercentageSplit:
    """Tests for percentage splits."""

    def test_hundred_dollars_reconciles(self):
        """Test $100 at 33.33/33.33/33.34."""
        split = calculate_percentage_split(
            {"Alice": "33.33", "Bob": "33.33", "Carol": "33.34"}, "100",
        )
        assert split == {
            "Alice": Decimal("33.33"),
            "Bob": Decimal("33.33"),
            "Carol": Decimal("33.34"),
        }
        assert total_cents(split) == 10000

    def test_leftover_cents_go_from_the_first_entry(self):
        """Test that leftover cents start at the first participant."""
        split = calculate_percentage_split(
            {"Alice": "33.33", "Bob": "33.33", "Carol": "33.34"}, "10",
        )
        assert split == {
            "Alice": Decimal("3.34"),
            "Bob": Decimal("3.33"),
            "Carol": Decimal("3.33"),
        }

    def test_reproducible(self):
        """Test that the same inputs always give the same split."""
        entries = {"Alice": "12.5", "Bob": "37.5", "Carol": "50"}
        first = calculate_percentage_split(entries, "77.77")
        second = calculate_percentage_split(entries, "77.77")
        assert first == second
        assert total_cents(first) == 7777

    def test_over_allocation_within_tolerance_is_withdrawn(self):
        """Test that floors exceeding the total are brought back down."""
        split = calculate_percentage_split(
            {"Alice": "50.00005", "Bob": "50.00005"}, "1000000",
        )
        assert split == {"Alice": Decimal("500000.00"), "Bob": Decimal("500000.00")}

    @pytest.mark.parametrize("percentages", [
        ["100"],
        ["50", "50"],
        ["33.33", "33.33", "33.34"],
        ["33.33333", "33.33333", "33.33334"],
        ["12.5", "37.5", "50"],
        ["1", "1", "1", "97"],
        ["14.28", "14.29", "14.29", "14.28", "14.29", "14.28", "14.29"],
        ["50.00005", "50.00005"],
    ])
    @pytest.mark.parametrize("amount", ["0.01", "0.05", "1", "10", "99.99", "1234.57"])
    def test_always_reconciles(self, percentages, amount):
        """Test that shares add up to the total for any amount and percentages."""
        names = [f"P{i}" for i in range(len(percentages))]
        split = calculate_percentage_split(dict(zip(names, percentages)), amount)
        assert list(split) == names
        assert total_cents(split) == to_cents(amount)
        assert all(v >= 0 for v in split.values())

    def test_rejects_sum_not_hundred(self):
        """Test that percentages adding up to 99 are rejected."""
        with pytest.raises(PercentageSumError) as exc_info:
            calculate_percentage_split({"Alice": "50", "Bob": "49"}, "10")
        assert exc_info.value.total == Decimal("99")

    def test_rejects_all_zero(self):
        """Test that all-zero percentages are rejected."""
        with pytest.raises(PercentageSumError):
            calculate_percentage_split({"Alice": "0", "Bob": ""}, "10")

    def test_zero_entries_left_out(self):
        """Test that zero-percent participants are not in the result."""
        split = calculate_percentage_split({"Alice": "100", "Bob": "0"}, "10")
        assert split == {"Alice": Decimal("10.00")}

    def test_tolerance_is_configurable(self):
        """Test that a looser tolerance accepts 99.99%."""
        split = calculate_percentage_split(
            {"Alice": "50", "Bob": "49.99"}, "10", tolerance=Decimal("0.01"),
        )
        assert total_cents(split) == 1000


class TestCalculateSplit:
    """Tests for the method dispatcher."""

    def test_dispatches_by_method(self):
        """Test each method through the dispatcher."""
        assert calculate_split(SplitMethod.EQUAL, "10", participants=["A", "B"]) == {
            "A": Decimal("5.00"), "B": Decimal("5.00"),
        }
        assert calculate_split("custom", "10", entries={"A": "10"}) == {"A": Decimal("10.00")}
        assert calculate_split("percentage", "10", entries={"A": "100"}) == {"A": Decimal("10.00")}

    def test_unknown_method(self):
        """Test that an unknown method name is rejected."""
        with pytest.raises(ValueError):
            calculate_split("weird", "10", participants=["A"])
