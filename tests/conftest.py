"""
Shared fixtures for the hisab test suite.

Everything runs against the in-memory storage backend; the JSON backend
tests use pytest's tmp_path. Nothing touches the network.
"""

from decimal import Decimal

import pytest

from hisab.activity import ActivityLogger
from hisab.config import LedgerSettings
from hisab.ledger.splits import calculate_equal_split
from hisab.models import Expense, ExpenseCategory, SplitMethod
from hisab.services import GroupStore, InMemoryGroupStorage


class RecordingLogger:
    """Stands in for a structlog logger and keeps every call."""

    def __init__(self):
        self.records = []

    def _record(self, level, event, **kwargs):
        self.records.append({"level": level, "event": event, **kwargs})

    def info(self, event, **kwargs):
        self._record("info", event, **kwargs)

    def warning(self, event, **kwargs):
        self._record("warning", event, **kwargs)

    def error(self, event, **kwargs):
        self._record("error", event, **kwargs)

    def of_type(self, event_type):
        return [r for r in self.records if r["event_type"] == event_type]


@pytest.fixture
def storage():
    return InMemoryGroupStorage()


@pytest.fixture
def store(storage):
    return GroupStore(storage)


@pytest.fixture
def group(store):
    """A USD group with Alice, Bob and Carol, in that order."""
    created = store.create_group("Weekend Trip")
    for name in ("Alice", "Bob", "Carol"):
        store.add_participant(created.id, name)
    return store.get_group(created.id)


@pytest.fixture
def recorder():
    return RecordingLogger()


@pytest.fixture
def activity_logger(recorder):
    return ActivityLogger(logger=recorder)


@pytest.fixture
def ledger_settings():
    return LedgerSettings()


@pytest.fixture
def make_expense():
    """Build an equally split expense without going through the store."""

    def _make(
        payer="Alice",
        amount="10.00",
        participants=("Alice", "Bob", "Carol"),
        description="Dinner",
        category=ExpenseCategory.FOOD,
    ):
        return Expense(
            description=description,
            amount=Decimal(amount),
            category=category,
            payer=payer,
            split_method=SplitMethod.EQUAL,
            split_details=calculate_equal_split(list(participants), amount),
        )

    return _make
