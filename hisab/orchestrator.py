"""
Main Orchestrator for Hisab

This module ties together all the components and defines the
end-to-end flows for:
1. Groups (create → rename → add/remove participants → delete)
2. Expenses (draft → split → validate → store)
3. Settlements and reporting (record → balances → summary → export)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every split is computed by the split calculator, never typed in by hand
- No expense is stored while validation reports an error
- Every mutation is logged, and every refused operation is logged with
  its error before being re-raised to the caller

The ledger engine and split calculator stay pure; this is the only layer
that talks to both the store and the activity logger.
"""

from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Iterator, Mapping, Optional, Union
from uuid import UUID

from hisab.activity import ActivityLogger, configure_log_level
from hisab.config import LedgerSettings, Settings, get_settings
from hisab.exports import generate_summary_csv, generate_summary_text
from hisab.ledger.balances import compute_group_balances, describe_balance
from hisab.ledger.errors import LedgerError, SplitMismatchError
from hisab.ledger.money import AmountLike, from_cents, parse_amount, to_cents
from hisab.ledger.splits import (
    calculate_equal_split,
    calculate_percentage_split,
    calculate_split,
    nonzero_entries,
)
from hisab.ledger.summary import summarize_group
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
    ValidationResult,
)
from hisab.services import (
    GroupStorageInterface,
    GroupStore,
    InMemoryGroupStorage,
    JsonFileGroupStorage,
    NotFoundError,
    StorageError,
)
from hisab.validation import ExpenseValidationError, ExpenseValidator


SplitEntries = Mapping[str, Optional[AmountLike]]


@contextmanager
def _logged_failures(
    activity_logger: Optional[ActivityLogger],
    operation: str,
    group_id: Optional[UUID] = None,
) -> Iterator[None]:
    """Log a failed operation, then let the error continue to the caller."""
    try:
        yield
    except (LedgerError, NotFoundError) as e:
        if activity_logger:
            activity_logger.log_rejected(operation, e, group_id)
        raise
    except StorageError as e:
        if activity_logger:
            activity_logger.log_storage_error(operation, e, group_id)
        raise


class GroupFlow:
    """Orchestrates group and participant management."""

    def __init__(
        self,
        store: GroupStore,
        activity_logger: Optional[ActivityLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._activity_logger = activity_logger
        self._settings = settings or get_settings().ledger

    def list_groups(self) -> list[Group]:
        return self._store.list_groups()

    def get_group(self, group_id: UUID) -> Group:
        with _logged_failures(self._activity_logger, "get_group", group_id):
            return self._store.get_group(group_id)

    def create_group(
        self,
        name: str,
        currency: Optional[Union[Currency, str]] = None,
    ) -> Group:
        """Create an empty group in the given (or default) currency."""
        currency = currency or self._settings.default_currency

        with _logged_failures(self._activity_logger, "create_group"):
            group = self._store.create_group(name, currency)

        if self._activity_logger:
            self._activity_logger.log_group_created(
                group.id, group.name, group.currency.value,
            )
        return group

    def rename_group(self, group_id: UUID, name: str) -> Group:
        with _logged_failures(self._activity_logger, "rename_group", group_id):
            old_name = self._store.get_group(group_id).name
            group = self._store.rename_group(group_id, name)

        if self._activity_logger:
            self._activity_logger.log_group_renamed(group_id, old_name, group.name)
        return group

    def delete_group(self, group_id: UUID) -> None:
        """Delete a group, its expenses and its settlements."""
        with _logged_failures(self._activity_logger, "delete_group", group_id):
            name = self._store.get_group(group_id).name
            self._store.delete_group(group_id)

        if self._activity_logger:
            self._activity_logger.log_group_deleted(group_id, name)

    def add_participant(
        self,
        group_id: UUID,
        name: str,
        join_date: Optional[date] = None,
    ) -> Participant:
        with _logged_failures(self._activity_logger, "add_participant", group_id):
            participant = self._store.add_participant(group_id, name, join_date)

        if self._activity_logger:
            self._activity_logger.log_participant_added(group_id, participant.name)
        return participant

    def remove_participant(self, group_id: UUID, name: str) -> None:
        """
        Remove a participant.

        Refused (and logged) for unknown names, the last participant, and
        anyone still referenced by an expense or settlement.
        """
        with _logged_failures(self._activity_logger, "remove_participant", group_id):
            self._store.remove_participant(group_id, name)

        if self._activity_logger:
            self._activity_logger.log_participant_removed(group_id, name)


class ExpenseFlow:
    """
    Orchestrates adding, editing and deleting expenses.

    Flow:
    1. Draft → Build an ExpenseDraft from the form values
    2. Validate → Two-stage validation (errors block, warnings don't)
    3. Split → Compute owed amounts with the split calculator
    4. Store → Persist through the group store
    """

    def __init__(
        self,
        store: GroupStore,
        validator: Optional[ExpenseValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().ledger
        self._validator = validator or ExpenseValidator(self._settings)
        self._activity_logger = activity_logger

    def _check(self, draft: ExpenseDraft, group: Group) -> ValidationResult:
        result = self._validator.validate(draft, group)
        if result.has_errors:
            raise ExpenseValidationError(result)
        return result

    def _split(
        self,
        method: SplitMethod,
        amount: Decimal,
        participants: Optional[Iterable[str]],
        entries: Optional[SplitEntries],
    ) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
        """Returns (split_details, split_inputs)."""
        split_details = calculate_split(
            method,
            amount,
            participants=participants,
            entries=entries,
            tolerance=self._settings.percentage_tolerance,
        )
        split_inputs = {}
        if method == SplitMethod.PERCENTAGE:
            split_inputs = nonzero_entries(entries or {})
        return split_details, split_inputs

    def preview_split(
        self,
        group_id: UUID,
        amount: AmountLike,
        split_method: SplitMethod = SplitMethod.EQUAL,
        entries: Optional[SplitEntries] = None,
        participants: Optional[Iterable[str]] = None,
    ) -> dict[str, Decimal]:
        """Compute a split without storing anything (for the form preview)."""
        group = self._store.get_group(group_id)
        if participants is None:
            participants = group.participant_names
        split_details, _ = self._split(
            SplitMethod(split_method), parse_amount(amount), participants, entries,
        )
        return split_details

    def validate_expense(
        self,
        group_id: UUID,
        draft: ExpenseDraft,
        split_details: Optional[Mapping[str, Decimal]] = None,
    ) -> tuple[ValidationResult, str]:
        """
        Validate a draft without storing it.

        Returns:
            (validation_result, user_message)
        """
        group = self._store.get_group(group_id)
        result = self._validator.validate(draft, group, split_details)
        return result, self._validator.get_user_friendly_summary(result)

    def add_expense(
        self,
        group_id: UUID,
        description: str,
        amount: AmountLike,
        payer: str,
        category: ExpenseCategory = ExpenseCategory.OTHER,
        split_method: SplitMethod = SplitMethod.EQUAL,
        entries: Optional[SplitEntries] = None,
        participants: Optional[Iterable[str]] = None,
        when: Optional[datetime] = None,
    ) -> tuple[Expense, ValidationResult]:
        """
        Add an expense to a group.

        Equal splits use `participants` (default: everyone in the group);
        custom and percentage splits use `entries`.

        Returns:
            (stored_expense, validation_result) - the result carries any
            non-blocking warnings for the UI to show

        Raises:
            ExpenseValidationError: If validation found errors
            SplitError: If the split entries don't reconcile
            UnknownParticipantError: If a split entry isn't a member
        """
        with _logged_failures(self._activity_logger, "add_expense", group_id):
            group = self._store.get_group(group_id)
            draft = ExpenseDraft(
                description=(description or "").strip(),
                amount=parse_amount(amount),
                payer=payer,
                category=ExpenseCategory(category),
                split_method=SplitMethod(split_method),
                date=when,
            )
            result = self._check(draft, group)

            if participants is None:
                participants = group.participant_names
            split_details, split_inputs = self._split(
                draft.split_method, draft.amount, participants, entries,
            )

            expense = Expense(
                description=draft.description,
                amount=from_cents(to_cents(draft.amount)),
                category=draft.category,
                payer=draft.payer,
                split_method=draft.split_method,
                split_details=split_details,
                split_inputs=split_inputs,
                date=when or datetime.utcnow(),
            )
            stored = self._store.add_expense(group_id, expense)

        if self._activity_logger:
            self._activity_logger.log_expense_added(
                group_id=group_id,
                expense_id=stored.id,
                description=stored.description,
                amount=str(stored.amount),
                payer=stored.payer,
                split_method=stored.split_method.value,
            )
        return stored, result

    def _resplit(
        self,
        existing: Expense,
        method: SplitMethod,
        amount: Decimal,
        entries: Optional[SplitEntries],
        participants: Optional[Iterable[str]],
        group: Group,
    ) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
        """
        Work out the split for an edited expense.

        New entries or participants (or a new method) always produce a
        fresh split. Otherwise a changed amount is re-split with the
        stored inputs: the same people for equal splits and the same
        percentages for percentage splits. Custom amounts can't be
        scaled, so a changed amount needs new entries.
        """
        if method != existing.split_method or entries is not None or participants is not None:
            if method == SplitMethod.EQUAL and participants is None:
                if method == existing.split_method:
                    participants = list(existing.split_details)
                else:
                    participants = group.participant_names
            return self._split(method, amount, participants, entries)

        new_cents = to_cents(amount)
        old_cents = sum(to_cents(v) for v in existing.split_details.values())
        if new_cents == to_cents(existing.amount):
            return dict(existing.split_details), dict(existing.split_inputs)

        if method == SplitMethod.EQUAL:
            return calculate_equal_split(list(existing.split_details), amount), {}
        if method == SplitMethod.PERCENTAGE and existing.split_inputs:
            split_details = calculate_percentage_split(
                existing.split_inputs, amount,
                tolerance=self._settings.percentage_tolerance,
            )
            return split_details, dict(existing.split_inputs)

        raise SplitMismatchError(expected_cents=new_cents, actual_cents=old_cents)

    def edit_expense(
        self,
        group_id: UUID,
        expense_id: UUID,
        description: Optional[str] = None,
        amount: Optional[AmountLike] = None,
        payer: Optional[str] = None,
        category: Optional[ExpenseCategory] = None,
        split_method: Optional[SplitMethod] = None,
        entries: Optional[SplitEntries] = None,
        participants: Optional[Iterable[str]] = None,
    ) -> tuple[Expense, ValidationResult]:
        """
        Edit an expense in place. Fields left as None keep their value.

        Raises:
            NotFoundError: If the expense doesn't exist
            SplitMismatchError: If a custom split's amount changed without
                new entries
        """
        with _logged_failures(self._activity_logger, "edit_expense", group_id):
            group = self._store.get_group(group_id)
            existing = group.get_expense(expense_id)
            if existing is None:
                raise NotFoundError(f"Expense not found: {expense_id}")

            draft = ExpenseDraft(
                description=(
                    existing.description if description is None else description.strip()
                ),
                amount=existing.amount if amount is None else parse_amount(amount),
                payer=payer or existing.payer,
                category=ExpenseCategory(category or existing.category),
                split_method=SplitMethod(split_method or existing.split_method),
                date=existing.date,
            )
            # Don't let the expense count as a duplicate of itself
            others = group.model_copy(update={
                "expenses": [e for e in group.expenses if e.id != expense_id],
            })
            result = self._check(draft, others)

            split_details, split_inputs = self._resplit(
                existing, draft.split_method, draft.amount, entries, participants, group,
            )

            updated = Expense(
                id=existing.id,
                description=draft.description,
                amount=from_cents(to_cents(draft.amount)),
                category=draft.category,
                payer=draft.payer,
                currency=existing.currency,
                split_method=draft.split_method,
                split_details=split_details,
                split_inputs=split_inputs,
                date=existing.date,
            )
            stored = self._store.edit_expense(group_id, updated)

        changed = [
            field for field in ("description", "amount", "payer", "category",
                                "split_method", "split_details")
            if getattr(existing, field) != getattr(stored, field)
        ]
        if self._activity_logger:
            self._activity_logger.log_expense_updated(group_id, stored.id, changed)
        return stored, result

    def delete_expense(self, group_id: UUID, expense_id: UUID) -> None:
        with _logged_failures(self._activity_logger, "delete_expense", group_id):
            self._store.delete_expense(group_id, expense_id)

        if self._activity_logger:
            self._activity_logger.log_expense_deleted(group_id, expense_id)


class SettlementFlow:
    """
    Orchestrates settlements and everything computed from the ledger.

    Balances, summaries and exports are recomputed from the stored
    expenses and settlements on every call.
    """

    def __init__(
        self,
        store: GroupStore,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._store = store
        self._activity_logger = activity_logger

    def _ledger(self, group_id: UUID) -> tuple[Group, list[Settlement]]:
        return (
            self._store.get_group(group_id),
            self._store.list_settlements(group_id),
        )

    def record_settlement(
        self,
        group_id: UUID,
        from_participant: str,
        to_participant: str,
        amount: AmountLike,
        when: Optional[datetime] = None,
    ) -> Settlement:
        """Record that `from_participant` paid `to_participant`."""
        with _logged_failures(self._activity_logger, "record_settlement", group_id):
            settlement = self._store.record_settlement(
                group_id, from_participant, to_participant, amount, when,
            )

        if self._activity_logger:
            self._activity_logger.log_settlement_recorded(
                group_id=group_id,
                settlement_id=settlement.id,
                from_participant=settlement.from_participant,
                to_participant=settlement.to_participant,
                amount=str(settlement.amount),
            )
        return settlement

    def list_settlements(self, group_id: UUID) -> list[Settlement]:
        return self._store.list_settlements(group_id)

    def balances(self, group_id: UUID) -> dict[str, Decimal]:
        """Net balance per participant; positive means they are owed."""
        with _logged_failures(self._activity_logger, "balances", group_id):
            group, settlements = self._ledger(group_id)
            return compute_group_balances(group, settlements)

    def balances_from_perspective(self, group_id: UUID, user: str) -> dict[str, Decimal]:
        """Balances of everyone else relative to `user`."""
        with _logged_failures(self._activity_logger, "balances_from_perspective", group_id):
            group, settlements = self._ledger(group_id)
            return compute_group_balances(group, settlements, perspective_user=user)

    def describe_balances(
        self,
        group_id: UUID,
        perspective_user: Optional[str] = None,
    ) -> dict[str, str]:
        """Display strings per participant, e.g. "Bob owes Alice $3.33"."""
        with _logged_failures(self._activity_logger, "describe_balances", group_id):
            group, settlements = self._ledger(group_id)
            balances = compute_group_balances(group, settlements, perspective_user)

        return {
            name: describe_balance(name, balance, group.currency.value, perspective_user)
            for name, balance in balances.items()
        }

    def summary(self, group_id: UUID) -> GroupSummary:
        with _logged_failures(self._activity_logger, "summary", group_id):
            group, settlements = self._ledger(group_id)
            return summarize_group(group, settlements)

    def export_text(self, group_id: UUID, generated_on: Optional[date] = None) -> str:
        with _logged_failures(self._activity_logger, "export_text", group_id):
            group, settlements = self._ledger(group_id)
            text = generate_summary_text(group, settlements, generated_on)

        if self._activity_logger:
            self._activity_logger.log_export_generated(group_id, "text")
        return text

    def export_csv(self, group_id: UUID, generated_on: Optional[date] = None) -> str:
        with _logged_failures(self._activity_logger, "export_csv", group_id):
            group, settlements = self._ledger(group_id)
            content = generate_summary_csv(group, settlements, generated_on)

        if self._activity_logger:
            self._activity_logger.log_export_generated(group_id, "csv")
        return content


def create_storage(settings: Settings) -> GroupStorageInterface:
    """Build the storage backend named in the storage settings."""
    if settings.storage.backend == "memory":
        return InMemoryGroupStorage()
    return JsonFileGroupStorage(settings.storage.data_path)


def create_app_components(
    settings: Optional[Settings] = None,
) -> tuple[GroupFlow, ExpenseFlow, SettlementFlow]:
    """
    Factory function to create all application components.

    Args:
        settings: Application settings. Defaults to the cached
                  environment-driven settings.

    Returns:
        (group_flow, expense_flow, settlement_flow)

    Raises:
        StorageError: If the JSON data file can't be read
        CorruptDataError: If the JSON data file holds invalid data
    """
    settings = settings or get_settings()
    configure_log_level(settings.app.log_level)

    activity_logger = ActivityLogger()
    try:
        storage = create_storage(settings)
    except StorageError as e:
        activity_logger.log_storage_error("load_storage", e)
        raise

    store = GroupStore(storage)
    ledger_settings = settings.ledger

    group_flow = GroupFlow(
        store,
        activity_logger=activity_logger,
        settings=ledger_settings,
    )
    expense_flow = ExpenseFlow(
        store,
        validator=ExpenseValidator(ledger_settings),
        activity_logger=activity_logger,
        settings=ledger_settings,
    )
    settlement_flow = SettlementFlow(store, activity_logger=activity_logger)

    return group_flow, expense_flow, settlement_flow
