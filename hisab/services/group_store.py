"""
Group Store

Owns groups, participants, expenses and settlements, and enforces the
rules that need the whole group to check:
- participant names are unique and non-blank
- a participant referenced by an expense or settlement can't be removed
- the last participant can't be removed
- expenses and settlements may only name current participants

Every successful mutation is persisted through the storage backend
before the method returns. Reads return snapshots (copies); the ledger
engine computes over those and never writes back.
"""

from datetime import date, datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import ValidationError

from hisab.ledger.errors import (
    DuplicateParticipantError,
    InvalidAmountError,
    InvalidGroupError,
    InvalidParticipantError,
    InvalidSettlementError,
    LastParticipantError,
    ParticipantReferencedError,
    UnknownParticipantError,
)
from hisab.ledger.money import AmountLike, from_cents, to_cents
from hisab.models.ledger import (
    Currency,
    Expense,
    Group,
    Participant,
    Settlement,
)
from hisab.services.storage.interface import GroupStorageInterface, NotFoundError


class GroupStore:
    """Record keeper for groups, backed by a storage implementation."""

    def __init__(self, storage: GroupStorageInterface):
        self._storage = storage

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_group(self, group_id: UUID) -> Group:
        """
        Get a group snapshot.

        Raises:
            NotFoundError: If the group doesn't exist
        """
        group = self._storage.get_group(group_id)
        if group is None:
            raise NotFoundError(f"Group not found: {group_id}")
        return group

    def list_groups(self) -> list[Group]:
        return self._storage.list_groups()

    def list_participants(self, group_id: UUID) -> list[Participant]:
        return self.get_group(group_id).participants

    def list_expenses(self, group_id: UUID) -> list[Expense]:
        return self.get_group(group_id).expenses

    def list_settlements(self, group_id: UUID) -> list[Settlement]:
        self.get_group(group_id)
        return self._storage.list_settlements(group_id)

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def create_group(
        self,
        name: str,
        currency: Union[Currency, str] = Currency.USD,
    ) -> Group:
        """
        Create and persist an empty group.

        Raises:
            InvalidGroupError: If the name is blank or the currency unknown
        """
        try:
            group = Group(name=name, currency=currency)
        except ValidationError as e:
            raise InvalidGroupError(f"Invalid group: {e.errors()[0]['msg']}")

        self._storage.save_group(group)
        return group

    def rename_group(self, group_id: UUID, name: str) -> Group:
        """Rename a group. Blank names raise InvalidGroupError."""
        group = self.get_group(group_id)
        name = (name or "").strip()
        if not name:
            raise InvalidGroupError("Please enter a group name")

        group.name = name
        self._storage.save_group(group)
        return group

    def delete_group(self, group_id: UUID) -> None:
        """Delete a group together with its settlements."""
        if not self._storage.delete_group(group_id):
            raise NotFoundError(f"Group not found: {group_id}")

    # -------------------------------------------------------------------------
    # Participants
    # -------------------------------------------------------------------------

    def add_participant(
        self,
        group_id: UUID,
        name: str,
        join_date: Optional[date] = None,
    ) -> Participant:
        """
        Add a participant to the end of the group's participant list.

        Raises:
            InvalidParticipantError: If the name is blank or too long
            DuplicateParticipantError: If the name is already taken
        """
        group = self.get_group(group_id)

        try:
            participant = Participant(name=name or "", join_date=join_date or date.today())
        except ValidationError as e:
            raise InvalidParticipantError(f"Invalid participant: {e.errors()[0]['msg']}")

        if group.has_participant(participant.name):
            raise DuplicateParticipantError(participant.name)

        group.participants.append(participant)
        self._storage.save_group(group)
        return participant

    def is_participant_referenced(self, group_id: UUID, name: str) -> bool:
        """Is the name used as payer, split entry, or settlement party?"""
        group = self.get_group(group_id)
        if any(name in expense.referenced_participants for expense in group.expenses):
            return True
        return any(
            name in (s.from_participant, s.to_participant)
            for s in self._storage.list_settlements(group_id)
        )

    def remove_participant(self, group_id: UUID, name: str) -> None:
        """
        Remove a participant.

        Raises:
            UnknownParticipantError: If the name isn't in the group
            LastParticipantError: If this is the only participant left
            ParticipantReferencedError: If any expense or settlement names them
        """
        group = self.get_group(group_id)
        if not group.has_participant(name):
            raise UnknownParticipantError(name)
        if len(group.participants) <= 1:
            raise LastParticipantError(name)
        if self.is_participant_referenced(group_id, name):
            raise ParticipantReferencedError(name)

        group.participants = [p for p in group.participants if p.name != name]
        self._storage.save_group(group)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def _check_members(self, group: Group, expense: Expense) -> None:
        for name in [expense.payer, *expense.split_details]:
            if not group.has_participant(name):
                raise UnknownParticipantError(name)

    def add_expense(self, group_id: UUID, expense: Expense) -> Expense:
        """
        Append an expense to the group.

        The expense's currency is forced to the group's currency.

        Raises:
            UnknownParticipantError: If the payer or a split entry isn't a member
        """
        group = self.get_group(group_id)
        self._check_members(group, expense)

        stored = expense.model_copy(update={"currency": group.currency}, deep=True)
        group.expenses.append(stored)
        self._storage.save_group(group)
        return stored

    def edit_expense(self, group_id: UUID, expense: Expense) -> Expense:
        """
        Replace an existing expense (matched by id), keeping its position.

        Raises:
            NotFoundError: If no expense with that id exists in the group
            UnknownParticipantError: If the payer or a split entry isn't a member
        """
        group = self.get_group(group_id)
        self._check_members(group, expense)

        stored = expense.model_copy(update={"currency": group.currency}, deep=True)
        for index, existing in enumerate(group.expenses):
            if existing.id == expense.id:
                group.expenses[index] = stored
                self._storage.save_group(group)
                return stored

        raise NotFoundError(f"Expense not found: {expense.id}")

    def delete_expense(self, group_id: UUID, expense_id: UUID) -> None:
        group = self.get_group(group_id)
        remaining = [e for e in group.expenses if e.id != expense_id]
        if len(remaining) == len(group.expenses):
            raise NotFoundError(f"Expense not found: {expense_id}")

        group.expenses = remaining
        self._storage.save_group(group)

    # -------------------------------------------------------------------------
    # Settlements
    # -------------------------------------------------------------------------

    def record_settlement(
        self,
        group_id: UUID,
        from_participant: str,
        to_participant: str,
        amount: AmountLike,
        when: Optional[datetime] = None,
    ) -> Settlement:
        """
        Record a payment from one participant to another.

        Raises:
            UnknownParticipantError: If either party isn't a member
            InvalidSettlementError: If both parties are the same person
            InvalidAmountError: If the amount is not positive
        """
        group = self.get_group(group_id)
        for name in (from_participant, to_participant):
            if not group.has_participant(name):
                raise UnknownParticipantError(name)
        if from_participant == to_participant:
            raise InvalidSettlementError("Cannot settle with yourself")

        cents = to_cents(amount)
        if cents <= 0:
            raise InvalidAmountError("Settlement amount must be greater than 0")

        settlement = Settlement(
            group_id=group.id,
            from_participant=from_participant,
            to_participant=to_participant,
            amount=from_cents(cents),
            date=when or datetime.utcnow(),
        )
        self._storage.append_settlement(settlement)
        return settlement
