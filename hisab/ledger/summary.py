"""Headline statistics for a group, computed in cents."""

from typing import Iterable

from hisab.ledger.money import from_cents, to_cents
from hisab.models.ledger import Group, GroupSummary, Settlement


def summarize_group(group: Group, settlements: Iterable[Settlement]) -> GroupSummary:
    """
    Summarize a group's spending.

    The average per person is rounded down to the cent; with no
    participants it is zero.
    """
    total_cents = 0
    category_cents = {}
    for expense in group.expenses:
        cents = to_cents(expense.amount)
        total_cents += cents
        category_cents[expense.category] = category_cents.get(expense.category, 0) + cents

    settlement_cents = sum(to_cents(s.amount) for s in settlements)

    count = len(group.participants)
    average_cents = total_cents // count if count else 0

    return GroupSummary(
        group_id=group.id,
        currency=group.currency,
        total_expenses=from_cents(total_cents),
        participant_count=count,
        average_per_person=from_cents(average_cents),
        expense_count=len(group.expenses),
        total_settlements=from_cents(settlement_cents),
        category_totals={
            category: from_cents(cents)
            for category, cents in category_cents.items()
        },
    )
