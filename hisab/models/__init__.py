"""
Data Models Package

This package contains all Pydantic models used in hisab.
All data flowing through the system must conform to these schemas.
"""

from hisab.models.ledger import (
    Currency,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    Group,
    GroupSummary,
    Participant,
    Settlement,
    SplitMethod,
    ValidationIssue,
    ValidationResult,
)
from hisab.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger models
    "Currency",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "Group",
    "GroupSummary",
    "Participant",
    "Settlement",
    "SplitMethod",
    "ValidationIssue",
    "ValidationResult",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
