"""
Ledger Error Taxonomy

Every error here is recoverable: it describes a bad input or a blocked
operation, never a broken process. The core raises them and callers
(the orchestrator, the UI) decide how to present them.

IMPORTANT: The core never catches-and-swallows these.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all ledger operations."""
    pass


class InvalidAmountError(LedgerError):
    """Amount is non-numeric, non-finite, or not positive."""
    pass


class SplitError(LedgerError):
    """Base exception for split calculation failures."""
    pass


class SplitMismatchError(SplitError):
    """Custom split amounts don't add up to the expense total."""

    def __init__(self, expected_cents: int, actual_cents: int):
        self.expected_cents = expected_cents
        self.actual_cents = actual_cents
        super().__init__(
            f"Custom split amounts ({actual_cents / 100:.2f}) must equal "
            f"the total expense amount ({expected_cents / 100:.2f})"
        )


class EmptySplitError(SplitError):
    """No participant has a nonzero share."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Please enter at least one nonzero split entry")


class PercentageSumError(SplitError):
    """Percentages don't add up to 100 (or are all zero)."""

    def __init__(self, total):
        self.total = total
        super().__init__(
            f"Percentages must add up to 100% with at least one non-zero "
            f"participant (got {total}%)"
        )


class UnknownParticipantError(LedgerError):
    """A name was referenced that is not a member of the group."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown participant: {name}")


class DuplicateParticipantError(LedgerError):
    """A participant name appears twice where names must be unique."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Participant already exists: {name}")


class InvalidParticipantError(LedgerError):
    """Participant data is unusable (e.g. blank name)."""
    pass


class InvalidGroupError(LedgerError):
    """Group data is unusable (e.g. blank name)."""
    pass


class InvalidSettlementError(LedgerError):
    """Settlement is structurally invalid (e.g. paying yourself)."""
    pass


class ParticipantRemovalError(LedgerError):
    """Base exception for blocked participant removals."""
    pass


class LastParticipantError(ParticipantRemovalError):
    """The group would be left without participants."""

    def __init__(self, name: str):
        self.name = name
        super().__init__("Cannot remove the last participant")


class ParticipantReferencedError(ParticipantRemovalError):
    """The participant is still referenced by expenses or settlements."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Cannot remove {name}: referenced in expenses or settlements. "
            "Edit or delete those records first."
        )
