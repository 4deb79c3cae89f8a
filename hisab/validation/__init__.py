"""Expense validation package."""

from hisab.validation.validator import ExpenseValidationError, ExpenseValidator

__all__ = ["ExpenseValidationError", "ExpenseValidator"]
