"""
Split Calculator

Turns an expense total plus a split rule into a mapping of
participant -> owed amount.

GUARANTEE: For every method, the owed amounts (in cents) add up to the
expense total (in cents) exactly. Leftover cents from division are handed
out deterministically, so the same inputs always produce the same split.

Methods:
- equal: everyone in the list pays the same, first N get the extra cents
- custom: caller supplies amounts, which must add up to the total
- percentage: caller supplies percentages, which must add up to 100
"""

from decimal import Decimal
from typing import Iterable, Mapping, Optional

from hisab.ledger.errors import (
    DuplicateParticipantError,
    EmptySplitError,
    InvalidAmountError,
    PercentageSumError,
    SplitMismatchError,
)
from hisab.ledger.money import AmountLike, from_cents, parse_amount, to_cents
from hisab.models.ledger import SplitMethod


PERCENTAGE_TOLERANCE = Decimal("0.0001")


def _total_cents(amount: AmountLike) -> int:
    cents = to_cents(amount)
    if cents <= 0:
        raise InvalidAmountError("Amount must be greater than 0")
    return cents


def nonzero_entries(entries: Mapping[str, Optional[AmountLike]]) -> dict[str, Decimal]:
    """Drop blank and zero entries, reject negative ones."""
    kept = {}
    for name, value in entries.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        parsed = parse_amount(value)
        if parsed < 0:
            raise InvalidAmountError(f"Split entry for {name} cannot be negative")
        if parsed > 0:
            kept[name] = parsed
    return kept


def calculate_equal_split(
    participants: Iterable[str],
    amount: AmountLike,
) -> dict[str, Decimal]:
    """
    Split an amount equally among participants.

    Each participant gets floor(cents / n); the first `remainder`
    participants in the given order get one extra cent.

    Raises:
        InvalidAmountError: If the amount is not positive
        EmptySplitError: If there are no participants
        DuplicateParticipantError: If a name appears twice
    """
    names = list(participants)
    cents = _total_cents(amount)

    if not names:
        raise EmptySplitError("Cannot split an expense among zero participants")

    seen = set()
    for name in names:
        if name in seen:
            raise DuplicateParticipantError(name)
        seen.add(name)

    base, remainder = divmod(cents, len(names))

    split = {}
    for index, name in enumerate(names):
        share = base + 1 if index < remainder else base
        split[name] = from_cents(share)
    return split


def calculate_custom_split(
    entries: Mapping[str, Optional[AmountLike]],
    amount: AmountLike,
) -> dict[str, Decimal]:
    """
    Validate caller-supplied amounts against the expense total.

    Zero and blank entries are left out of the result.

    Raises:
        InvalidAmountError: If the total or an entry is invalid
        EmptySplitError: If no nonzero entries remain
        SplitMismatchError: If the entries don't add up to the total
    """
    expense_cents = _total_cents(amount)

    split = {}
    total = 0
    for name, value in nonzero_entries(entries).items():
        cents = to_cents(value)
        if cents > 0:
            split[name] = from_cents(cents)
            total += cents

    if not split:
        raise EmptySplitError()
    if total != expense_cents:
        raise SplitMismatchError(expected_cents=expense_cents, actual_cents=total)

    return split


def calculate_percentage_split(
    entries: Mapping[str, Optional[AmountLike]],
    amount: AmountLike,
    tolerance: Decimal = PERCENTAGE_TOLERANCE,
) -> dict[str, Decimal]:
    """
    Split an amount by percentage.

    Every participant gets floor(pct / 100 * cents). Leftover cents are
    then given out one at a time, cycling through participants in input
    order starting from the first.

    Raises:
        InvalidAmountError: If the total or an entry is invalid
        PercentageSumError: If percentages don't add up to 100 within
            tolerance, or are all zero
    """
    expense_cents = _total_cents(amount)
    percentages = nonzero_entries(entries)

    total_percent = sum(percentages.values(), Decimal(0))
    if total_percent == 0 or abs(total_percent - 100) > tolerance:
        raise PercentageSumError(total_percent)

    names = list(percentages)
    # int() truncates, which is floor for non-negative values
    shares = {
        name: int(percentages[name] * expense_cents / 100)
        for name in names
    }

    leftover = expense_cents - sum(shares.values())
    step = 1 if leftover > 0 else -1
    index = 0
    while leftover != 0:
        name = names[index % len(names)]
        index += 1
        if step < 0 and shares[name] == 0:
            continue
        shares[name] += step
        leftover -= step

    return {name: from_cents(shares[name]) for name in names}


def calculate_split(
    method: SplitMethod,
    amount: AmountLike,
    participants: Optional[Iterable[str]] = None,
    entries: Optional[Mapping[str, Optional[AmountLike]]] = None,
    tolerance: Decimal = PERCENTAGE_TOLERANCE,
) -> dict[str, Decimal]:
    """
    Dispatch to the calculator for a split method.

    Equal splits use `participants`; custom and percentage splits use
    `entries`.
    """
    method = SplitMethod(method)
    if method == SplitMethod.EQUAL:
        return calculate_equal_split(participants or [], amount)
    if method == SplitMethod.CUSTOM:
        return calculate_custom_split(entries or {}, amount)
    return calculate_percentage_split(entries or {}, amount, tolerance=tolerance)
