"""
Summary Exports

Read-only projections of a group: a plain-text summary for sharing and a
CSV workbook-style file with three tables (expenses, balances, summary).

Both are derived from the same balance computation the UI shows, so an
export can never disagree with the screen.
"""

import csv
import io
from datetime import date
from typing import Iterable, Optional

from hisab.ledger.balances import compute_group_balances
from hisab.ledger.money import format_currency
from hisab.ledger.summary import summarize_group
from hisab.models.ledger import Group, Settlement


def _direction(balance) -> str:
    return "owed" if balance >= 0 else "owes"


def generate_summary_text(
    group: Group,
    settlements: Iterable[Settlement],
    generated_on: Optional[date] = None,
) -> str:
    """Render the shareable plain-text summary of a group."""
    settlements = list(settlements)
    generated_on = generated_on or date.today()
    currency = group.currency.value

    lines = [
        f"EXPENSE SUMMARY - {group.name.upper()}",
        f"Generated on: {generated_on.isoformat()}",
        "",
        "PARTICIPANTS:",
    ]
    lines.extend(f"- {name}" for name in group.participant_names)

    lines.append("")
    lines.append("EXPENSES:")
    for expense in group.expenses:
        lines.append(
            f"- {expense.description}: {format_currency(expense.amount, currency)} "
            f"({expense.category.value}, paid by {expense.payer})"
        )

    lines.append("")
    lines.append("BALANCES:")
    for name, balance in compute_group_balances(group, settlements).items():
        lines.append(
            f"- {name}: {format_currency(abs(balance), currency)} {_direction(balance)}"
        )

    summary = summarize_group(group, settlements)
    lines.append("")
    lines.append(f"TOTAL EXPENSES: {format_currency(summary.total_expenses, currency)}")

    return "\n".join(lines) + "\n"


def generate_summary_csv(
    group: Group,
    settlements: Iterable[Settlement],
    generated_on: Optional[date] = None,
) -> str:
    """
    Render the CSV export.

    Tables are separated by a blank row. Text is quoted, numbers are not.
    """
    settlements = list(settlements)
    generated_on = generated_on or date.today()

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")

    writer.writerow(["Category", "Description", "Amount", "Currency", "Payer", "Date"])
    for expense in group.expenses:
        writer.writerow([
            expense.category.value,
            expense.description,
            expense.amount,
            expense.currency.value,
            expense.payer,
            expense.date.date().isoformat(),
        ])

    writer.writerow([])
    writer.writerow(["Participant", "Balance", "Direction"])
    for name, balance in compute_group_balances(group, settlements).items():
        writer.writerow([name, abs(balance), _direction(balance).capitalize()])

    summary = summarize_group(group, settlements)
    writer.writerow([])
    writer.writerow(["Summary", "Value"])
    writer.writerow(["Total Expenses", summary.total_expenses])
    writer.writerow(["Total Participants", summary.participant_count])
    writer.writerow(["Group Currency", group.currency.value])
    writer.writerow(["Generated Date", generated_on.isoformat()])

    return buffer.getvalue()
