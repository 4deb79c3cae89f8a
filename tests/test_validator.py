"""Tests for the two-stage expense validator."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from hisab.config import LedgerSettings
from hisab.models import ExpenseDraft, Group
from hisab.validation import ExpenseValidationError, ExpenseValidator


@pytest.fixture
def validator(ledger_settings):
    return ExpenseValidator(ledger_settings)


def draft(**overrides):
    values = {
        "description": "Dinner",
        "amount": Decimal("30.00"),
        "payer": "Alice",
    }
    values.update(overrides)
    return ExpenseDraft(**values)


def issue_types(result):
    return [issue.issue_type for issue in result.issues]


class TestSchemaStage:
    """Tests for stage 1 (required fields and formats)."""

    def test_valid_draft(self, validator, group):
        """Test that a normal expense passes both stages."""
        result = validator.validate(draft(), group)
        assert result.is_valid
        assert result.issues == []
        assert validator.get_user_friendly_summary(result) == "✅ All checks passed!"

    def test_missing_fields(self, validator, group):
        """Test that every missing field is reported at once."""
        result = validator.validate(ExpenseDraft(), group)
        assert not result.schema_valid
        assert not result.semantic_valid
        assert result.error_count == 3
        assert {i.field for i in result.issues} == {"description", "amount", "payer"}

    def test_overlong_description(self, validator, group):
        """Test the description length limit."""
        result = validator.validate(draft(description="x" * 201), group)
        assert result.has_errors

    @pytest.mark.parametrize("amount", ["0", "-1"])
    def test_non_positive_amount(self, validator, group, amount):
        """Test that amounts must be positive."""
        result = validator.validate(draft(amount=Decimal(amount)), group)
        assert "invalid_value" in issue_types(result)

    def test_too_many_decimals(self, validator, group):
        """Test that sub-cent amounts are rejected, not rounded."""
        result = validator.validate(draft(amount=Decimal("10.005")), group)
        assert "invalid_format" in issue_types(result)

    def test_unknown_payer(self, validator, group):
        """Test that the payer must be a member."""
        result = validator.validate(draft(payer="Mallory"), group)
        assert "unknown_participant" in issue_types(result)

    def test_group_without_participants(self, validator):
        """Test that empty groups can't take expenses."""
        result = validator.validate(draft(), Group(name="Empty"))
        assert result.has_errors
        assert any(i.field == "participants" for i in result.issues)


class TestSemanticStage:
    """Tests for stage 2 (plausibility checks)."""

    def test_large_amount_is_a_warning(self, group):
        """Test that amounts above the threshold warn but don't block."""
        validator = ExpenseValidator(LedgerSettings(max_expense_amount=Decimal("100")))
        result = validator.validate(draft(amount=Decimal("150")), group)

        assert not result.has_errors
        assert result.is_valid
        assert len(result.warnings) == 1
        assert "unusually high" in result.warnings[0]

    def test_future_date_is_a_warning(self, validator, group):
        """Test that dates beyond the tolerance warn."""
        when = datetime.utcnow() + timedelta(days=5)
        result = validator.validate(draft(date=when), group)
        assert "future_date" in issue_types(result)
        assert not result.has_errors

    def test_aware_future_date(self, validator, group):
        """Test that timezone-aware dates are compared in UTC."""
        when = datetime.now(timezone.utc) + timedelta(days=5)
        result = validator.validate(draft(date=when), group)
        assert "future_date" in issue_types(result)

    def test_date_within_tolerance(self, validator, group):
        """Test that a few hours ahead is fine."""
        when = datetime.utcnow() + timedelta(hours=3)
        result = validator.validate(draft(date=when), group)
        assert "future_date" not in issue_types(result)

    def test_payer_not_in_split_is_info(self, validator, group):
        """Test that a payer outside the split is noted, not warned."""
        split = {"Bob": Decimal("15.00"), "Carol": Decimal("15.00")}
        result = validator.validate(draft(), group, split_details=split)

        issue = next(i for i in result.issues if i.issue_type == "payer_not_in_split")
        assert issue.severity == "info"
        assert result.warnings == []

    def test_potential_duplicate(self, validator, store, group, make_expense):
        """Test that the same description, amount, payer and day warns."""
        store.add_expense(group.id, make_expense(description="Dinner", amount="30.00"))
        stored = store.get_group(group.id)

        result = validator.validate(draft(description="dinner"), stored)
        assert "potential_duplicate" in issue_types(result)

        different = validator.validate(draft(amount=Decimal("31.00")), stored)
        assert "potential_duplicate" not in issue_types(different)


class TestSummaryAndError:
    """Tests for presenting results."""

    def test_summary_lists_errors_and_warnings(self, group):
        """Test the user-facing summary text."""
        validator = ExpenseValidator(LedgerSettings(max_expense_amount=Decimal("10")))
        errors = validator.validate(draft(payer=None), group)
        warnings = validator.validate(draft(), group)

        assert "❌ Please fix the following:" in validator.get_user_friendly_summary(errors)
        assert "⚠️ Please verify the following:" in validator.get_user_friendly_summary(warnings)

    def test_validation_error_carries_result(self, validator, group):
        """Test that ExpenseValidationError keeps the result and messages."""
        result = validator.validate(draft(description=""), group)
        error = ExpenseValidationError(result)

        assert error.result is result
        assert "Description is required" in str(error)
