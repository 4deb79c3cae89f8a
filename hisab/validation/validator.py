"""
Two-Stage Expense Validation

DESIGN DECISION: An expense draft is checked in two distinct stages
before it is split and stored:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (description, amount, payer)
- Amount is positive with at most two decimal places
- Payer is a member of the group

STAGE 2 - SEMANTIC VALIDATION:
- Unusually large amounts
- Dates in the future
- Payer not sharing in their own expense
- Likely duplicates of an existing expense

Stage 2 only runs when stage 1 passes. Errors block the expense;
warnings and info are shown to the user but don't block.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to decide.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Mapping, Optional

from hisab.config import LedgerSettings, get_settings
from hisab.ledger.errors import LedgerError
from hisab.ledger.money import CENT, format_currency, to_cents
from hisab.models.ledger import (
    ExpenseDraft,
    Group,
    ValidationIssue,
    ValidationResult,
)


MAX_DESCRIPTION_LENGTH = 200


class ExpenseValidationError(LedgerError):
    """An expense draft failed validation with at least one error."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = [i.message for i in result.issues if i.severity == "error"]
        super().__init__("; ".join(messages) or "Expense failed validation")


class ExpenseValidator:
    """Validates expense drafts against their group."""

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def _validate_schema(
        self,
        draft: ExpenseDraft,
        group: Group,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not draft.description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
                suggested_fix="Say what the expense was for, e.g. 'Dinner'",
            ))
        elif len(draft.description) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="invalid_format",
                message=f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
                severity="error",
            ))

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        elif draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than 0",
                severity="error",
            ))
        elif draft.amount != draft.amount.quantize(CENT):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount must be a valid number (e.g., 25.50)",
                severity="error",
                suggested_fix="Use at most two decimal places",
            ))

        if not group.participants:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="missing",
                message="Add at least one participant before adding expenses",
                severity="error",
            ))

        if not draft.payer:
            issues.append(ValidationIssue(
                field="payer",
                issue_type="missing",
                message="Please choose who paid",
                severity="error",
            ))
        elif not group.has_participant(draft.payer):
            issues.append(ValidationIssue(
                field="payer",
                issue_type="unknown_participant",
                message=f"{draft.payer} is not a participant of {group.name}",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        draft: ExpenseDraft,
        group: Group,
        split_details: Optional[Mapping[str, Decimal]] = None,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        max_amount = self._settings.max_expense_amount
        if draft.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=(
                    f"Amount ({format_currency(draft.amount, group.currency)}) "
                    "seems unusually high"
                ),
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if draft.date:
            when = draft.date
            if when.tzinfo is not None:
                when = when.astimezone(timezone.utc).replace(tzinfo=None)
            tolerance = timedelta(days=self._settings.future_date_tolerance_days)
            if when > datetime.utcnow() + tolerance:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Expense date ({draft.date.date()}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))

        if split_details is not None and draft.payer not in split_details:
            issues.append(ValidationIssue(
                field="split",
                issue_type="payer_not_in_split",
                message=f"{draft.payer} paid but is not sharing this expense",
                severity="info",
            ))

        issues.extend(self._check_duplicates(draft, group))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _check_duplicates(
        self,
        draft: ExpenseDraft,
        group: Group,
    ) -> list[ValidationIssue]:
        """Flag an existing expense with the same description, amount, payer and day."""
        draft_day = (draft.date or datetime.utcnow()).date()
        draft_cents = to_cents(draft.amount)
        description = draft.description.casefold()

        for expense in group.expenses:
            if (
                expense.description.casefold() == description
                and to_cents(expense.amount) == draft_cents
                and expense.payer == draft.payer
                and expense.date.date() == draft_day
            ):
                return [ValidationIssue(
                    field="duplicate",
                    issue_type="potential_duplicate",
                    message=(
                        f"'{expense.description}' paid by {expense.payer} "
                        "was already added today"
                    ),
                    severity="warning",
                    suggested_fix="Please verify this isn't a duplicate entry",
                )]
        return []

    def validate(
        self,
        draft: ExpenseDraft,
        group: Group,
        split_details: Optional[Mapping[str, Decimal]] = None,
    ) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            draft: The expense as entered
            group: The group it will be added to
            split_details: The computed split, if already known

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(draft, group)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                draft, group, split_details,
            )
            all_issues.extend(semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Generate a short, readable summary of validation results."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
