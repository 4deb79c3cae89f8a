"""In-memory storage backend. Nothing survives the process."""

from typing import Optional
from uuid import UUID

from hisab.models.ledger import Group, Settlement
from hisab.services.storage.interface import GroupStorageInterface


class InMemoryGroupStorage(GroupStorageInterface):
    """
    Dictionary-backed storage.

    Groups and settlements are deep-copied on the way in and out.
    """

    def __init__(self):
        self._groups: dict[UUID, Group] = {}
        self._settlements: dict[UUID, list[Settlement]] = {}

    def save_group(self, group: Group) -> bool:
        self._groups[group.id] = group.model_copy(deep=True)
        return True

    def get_group(self, group_id: UUID) -> Optional[Group]:
        group = self._groups.get(group_id)
        return group.model_copy(deep=True) if group else None

    def list_groups(self) -> list[Group]:
        return [group.model_copy(deep=True) for group in self._groups.values()]

    def delete_group(self, group_id: UUID) -> bool:
        self._settlements.pop(group_id, None)
        return self._groups.pop(group_id, None) is not None

    def append_settlement(self, settlement: Settlement) -> bool:
        self._settlements.setdefault(settlement.group_id, []).append(
            settlement.model_copy(deep=True)
        )
        return True

    def list_settlements(self, group_id: UUID) -> list[Settlement]:
        return [s.model_copy(deep=True) for s in self._settlements.get(group_id, [])]
