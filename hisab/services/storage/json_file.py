"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document holds everything:

    {
      "groups": {"<group id>": {...group with participants and expenses...}},
      "settlements": {"<group id>": [{"id", "group_id", "from", "to", "amount", "date"}]}
    }

The whole document is kept in memory and rewritten after every mutation.
Writes go to a temporary file first and are moved into place, so a crash
mid-write never leaves a half-written data file.

MIGRATION: Older data (browser exports) used plain strings for
participants, camelCase keys, millisecond-timestamp ids and float
amounts. It also let an expense amount be edited without re-splitting,
so such splits are reconciled to the amount here as well. Those payloads
are converted exactly once, here at load time; nothing else in the
codebase knows the old shapes exist.
"""

import json
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union
from uuid import NAMESPACE_URL, UUID, uuid5

from pydantic import ValidationError

from hisab.ledger.errors import LedgerError
from hisab.ledger.money import from_cents, to_cents
from hisab.ledger.splits import calculate_equal_split
from hisab.models.ledger import Group, Settlement, SplitMethod
from hisab.services.storage.interface import (
    CorruptDataError,
    GroupStorageInterface,
    StorageError,
)


# Keys used by the browser version of the app
LEGACY_GROUPS_KEY = "expenseSplitterGroups"
LEGACY_SETTLEMENTS_KEY = "expenseSplitterSettlements"

LEGACY_FIELD_NAMES = {
    "joinDate": "join_date",
    "createdAt": "created_at",
    "splitMethod": "split_method",
    "splitDetails": "split_details",
    "splitInputs": "split_inputs",
    "groupId": "group_id",
}


def _legacy_id(value: Any) -> str:
    """Map a legacy id to a UUID; non-UUID ids map deterministically."""
    try:
        return str(UUID(str(value)))
    except ValueError:
        return str(uuid5(NAMESPACE_URL, f"hisab:{value}"))


def _rename_keys(raw: dict) -> dict:
    return {LEGACY_FIELD_NAMES.get(key, key): value for key, value in raw.items()}


def _amount(value: Any) -> Any:
    # Floats go through str() so 3.34 stays 3.34
    return str(value) if isinstance(value, float) else value


def migrate_participant_payload(raw: Union[str, dict], today: date) -> dict:
    """Convert a stored participant (string or dict) to the current shape."""
    if isinstance(raw, str):
        return {"name": raw, "join_date": today.isoformat()}
    return _rename_keys(raw)


def _rescale(shares: dict[str, int], total: int) -> dict[str, int]:
    """Scale shares to a new total; leftover cents go first-in-order."""
    old_total = sum(shares.values())
    scaled = {name: cents * total // old_total for name, cents in shares.items()}
    names = list(scaled)
    for index in range(total - sum(scaled.values())):
        scaled[names[index % len(names)]] += 1
    return scaled


def reconcile_split_details(amount: Any, split_details: dict, split_method: Any) -> dict:
    """
    Bring a stored split back in line with its expense amount.

    The browser version let users edit an amount without re-splitting.
    Equal splits are recomputed over the same people; any other split is
    rescaled in proportion to the stored shares. Splits that already add
    up, or hold values that don't parse, are returned unchanged and left
    to model validation.
    """
    try:
        total = to_cents(amount)
        shares = {name: to_cents(value) for name, value in split_details.items()}
    except LedgerError:
        return split_details

    if total <= 0 or sum(shares.values()) == total or any(c < 0 for c in shares.values()):
        return split_details

    if split_method == SplitMethod.EQUAL or sum(shares.values()) == 0:
        split = calculate_equal_split(list(split_details), from_cents(total))
        return {name: str(owed) for name, owed in split.items()}

    return {name: str(from_cents(cents)) for name, cents in _rescale(shares, total).items()}


def migrate_expense_payload(raw: dict) -> dict:
    """Convert a stored expense to the current shape."""
    expense = _rename_keys(raw)
    if "id" in expense:
        expense["id"] = _legacy_id(expense["id"])
    if "amount" in expense:
        expense["amount"] = _amount(expense["amount"])
    for key in ("split_details", "split_inputs"):
        if key in expense:
            expense[key] = {name: _amount(v) for name, v in expense[key].items()}
    if "amount" in expense and expense.get("split_details"):
        expense["split_details"] = reconcile_split_details(
            expense["amount"],
            expense["split_details"],
            expense.get("split_method", SplitMethod.EQUAL),
        )
    return expense


def migrate_group_payload(raw: dict, today: Optional[date] = None) -> dict:
    """
    Convert a stored group to the current shape.

    Already-current payloads pass through unchanged.
    """
    today = today or date.today()
    group = _rename_keys(raw)
    if "id" in group:
        group["id"] = _legacy_id(group["id"])
    group["participants"] = [
        migrate_participant_payload(p, today) for p in group.get("participants", [])
    ]
    group["expenses"] = [migrate_expense_payload(e) for e in group.get("expenses", [])]
    return group


def migrate_settlement_payload(raw: dict, group_id: str) -> dict:
    """Convert a stored settlement to the current shape."""
    settlement = _rename_keys(raw)
    if "id" in settlement:
        settlement["id"] = _legacy_id(settlement["id"])
    settlement["group_id"] = group_id
    if "amount" in settlement:
        settlement["amount"] = _amount(settlement["amount"])
    return settlement


class JsonFileGroupStorage(GroupStorageInterface):
    """
    JSON file implementation of group storage.

    The file is read once at construction; a missing file starts empty.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._groups: dict[UUID, Group] = {}
        self._settlements: dict[UUID, list[Settlement]] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Data file {self._path} is not valid JSON: {e}")
        if not isinstance(document, dict):
            raise CorruptDataError(f"Data file {self._path} must hold a JSON object")
        return document

    def _load(self) -> None:
        document = self._read_document()
        raw_groups = document.get("groups", document.get(LEGACY_GROUPS_KEY, {}))
        raw_settlements = document.get("settlements", document.get(LEGACY_SETTLEMENTS_KEY, {}))

        for raw in raw_groups.values():
            payload = migrate_group_payload(raw)
            try:
                group = Group.model_validate(payload)
            except ValidationError as e:
                raise CorruptDataError(
                    f"Stored group {payload.get('name', payload.get('id'))!r} is invalid: {e}"
                )
            self._groups[group.id] = group

        for raw_group_id, raw_list in raw_settlements.items():
            group_id = _legacy_id(raw_group_id)
            for raw in raw_list:
                payload = migrate_settlement_payload(raw, group_id)
                try:
                    settlement = Settlement.model_validate(payload)
                except ValidationError as e:
                    raise CorruptDataError(f"Stored settlement is invalid: {e}")
                self._settlements.setdefault(settlement.group_id, []).append(settlement)

    def _document(self) -> dict:
        return {
            "groups": {
                str(group_id): group.model_dump(mode="json")
                for group_id, group in self._groups.items()
            },
            "settlements": {
                str(group_id): [s.model_dump(mode="json", by_alias=True) for s in settlements]
                for group_id, settlements in self._settlements.items()
            },
        }

    def _flush(self) -> None:
        """Atomically rewrite the data file."""
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(self._document(), handle, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

    def save_group(self, group: Group) -> bool:
        self._groups[group.id] = group.model_copy(deep=True)
        self._flush()
        return True

    def get_group(self, group_id: UUID) -> Optional[Group]:
        group = self._groups.get(group_id)
        return group.model_copy(deep=True) if group else None

    def list_groups(self) -> list[Group]:
        return [group.model_copy(deep=True) for group in self._groups.values()]

    def delete_group(self, group_id: UUID) -> bool:
        existed = self._groups.pop(group_id, None) is not None
        self._settlements.pop(group_id, None)
        if existed:
            self._flush()
        return existed

    def append_settlement(self, settlement: Settlement) -> bool:
        self._settlements.setdefault(settlement.group_id, []).append(
            settlement.model_copy(deep=True)
        )
        self._flush()
        return True

    def list_settlements(self, group_id: UUID) -> list[Settlement]:
        return [s.model_copy(deep=True) for s in self._settlements.get(group_id, [])]
