"""
Balance Engine

DESIGN DECISION: Balances are a pure function of participants, expenses
and settlements. Nothing is cached between calls; callers recompute after
every mutation.

Sign convention:
- positive balance: the participant is owed money (net creditor)
- negative balance: the participant owes money (net debtor)

Every expense adds its amount to the payer and subtracts each owed share,
and every settlement moves money from `from` to `to`, so the balances
always add up to exactly zero.

STRICT: Any reference to a name that isn't a participant raises
UnknownParticipantError. Nothing is silently skipped.
"""

from decimal import Decimal
from typing import Iterable, Optional, Union

from hisab.ledger.errors import UnknownParticipantError
from hisab.ledger.money import format_currency, from_cents, to_cents
from hisab.models.ledger import Expense, Group, Participant, Settlement


ParticipantLike = Union[str, Participant]


def _names(participants: Iterable[ParticipantLike]) -> list[str]:
    return [p.name if isinstance(p, Participant) else p for p in participants]


def _compute_cents(
    participants: Iterable[ParticipantLike],
    expenses: Iterable[Expense],
    settlements: Iterable[Settlement],
) -> dict[str, int]:
    """Fold expenses and settlements into per-participant cents."""
    balances = {name: 0 for name in _names(participants)}

    def apply(name: str, cents: int) -> None:
        if name not in balances:
            raise UnknownParticipantError(name)
        balances[name] += cents

    for expense in expenses:
        apply(expense.payer, to_cents(expense.amount))
        for name, owed in expense.split_details.items():
            apply(name, -to_cents(owed))

    for settlement in settlements:
        cents = to_cents(settlement.amount)
        apply(settlement.from_participant, -cents)
        apply(settlement.to_participant, cents)

    return balances


def compute_balances(
    participants: Iterable[ParticipantLike],
    expenses: Iterable[Expense],
    settlements: Iterable[Settlement],
) -> dict[str, Decimal]:
    """
    Compute the net balance of every participant.

    Participants with no activity still appear, with a zero balance.
    Keys follow the order of `participants`.

    Raises:
        UnknownParticipantError: If an expense or settlement references
            someone who is not in `participants`
    """
    cents = _compute_cents(participants, expenses, settlements)
    return {name: from_cents(value) for name, value in cents.items()}


def compute_balances_from_perspective(
    participants: Iterable[ParticipantLike],
    expenses: Iterable[Expense],
    settlements: Iterable[Settlement],
    user: str,
) -> dict[str, Decimal]:
    """
    Compute balances relative to one participant.

    For every other participant p: relative[p] = balance[p] - balance[user].
    Positive means p owes `user`; negative means `user` owes p.
    The perspective user is left out of the result.

    Raises:
        UnknownParticipantError: If `user` (or any referenced name) is not
            a participant
    """
    cents = _compute_cents(participants, expenses, settlements)
    if user not in cents:
        raise UnknownParticipantError(user)

    own = cents[user]
    return {
        name: from_cents(value - own)
        for name, value in cents.items()
        if name != user
    }


def compute_group_balances(
    group: Group,
    settlements: Iterable[Settlement],
    perspective_user: Optional[str] = None,
) -> dict[str, Decimal]:
    """Balances for a stored group, optionally from one member's perspective."""
    if perspective_user:
        return compute_balances_from_perspective(
            group.participants, group.expenses, settlements, perspective_user,
        )
    return compute_balances(group.participants, group.expenses, settlements)


def describe_balance(
    participant: str,
    balance: Decimal,
    currency: str,
    perspective_user: Optional[str] = None,
) -> str:
    """
    Phrase a balance for display.

    Examples:
        "Bob is owed $5.00", "Bob owes $3.33",
        "Bob owes Alice $3.33", "Alice owes Bob $1.00", "All settled up!"
    """
    if balance == 0:
        return "All settled up!"

    formatted = format_currency(abs(balance), currency)
    if perspective_user:
        if balance > 0:
            return f"{participant} owes {perspective_user} {formatted}"
        return f"{perspective_user} owes {participant} {formatted}"

    if balance > 0:
        return f"{participant} is owed {formatted}"
    return f"{participant} owes {formatted}"
