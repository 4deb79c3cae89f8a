"""
Ledger Core Package

Pure, synchronous computations over in-memory snapshots:
- money: integer-cent conversions
- splits: equal / custom / percentage split calculation
- balances: net balances and perspective balances
- summary: headline group statistics

Only money and errors are re-exported here because the models package
depends on them. Import the calculators from their modules.
"""

from hisab.ledger.errors import (
    DuplicateParticipantError,
    EmptySplitError,
    InvalidAmountError,
    InvalidGroupError,
    InvalidParticipantError,
    InvalidSettlementError,
    LastParticipantError,
    LedgerError,
    ParticipantReferencedError,
    ParticipantRemovalError,
    PercentageSumError,
    SplitError,
    SplitMismatchError,
    UnknownParticipantError,
)
from hisab.ledger.money import (
    format_currency,
    from_cents,
    parse_amount,
    to_cents,
)

__all__ = [
    # Errors
    "DuplicateParticipantError",
    "EmptySplitError",
    "InvalidAmountError",
    "InvalidGroupError",
    "InvalidParticipantError",
    "InvalidSettlementError",
    "LastParticipantError",
    "LedgerError",
    "ParticipantReferencedError",
    "ParticipantRemovalError",
    "PercentageSumError",
    "SplitError",
    "SplitMismatchError",
    "UnknownParticipantError",
    # Money
    "format_currency",
    "from_cents",
    "parse_amount",
    "to_cents",
]
