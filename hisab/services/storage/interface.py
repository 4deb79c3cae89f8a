"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep an in-memory backend for tests and the UI's scratch mode
2. Persist to a JSON file without the ledger knowing about files
3. Swap in another backend later without touching business logic

The interface is intentionally simple: whole groups are saved and
loaded as units, and settlements are appended per group. Guards on
what may be saved (membership, removal rules) live in GroupStore.

Backends are synchronous. Every method that returns records returns
copies, so callers can never mutate stored state by accident.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from hisab.models.ledger import Group, Settlement


class GroupStorageInterface(ABC):
    """
    Abstract interface for group and settlement persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def save_group(self, group: Group) -> bool:
        """
        Insert or replace a group.

        Args:
            group: The group to save, with its participants and expenses

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def get_group(self, group_id: UUID) -> Optional[Group]:
        """
        Retrieve a group by its ID.

        Returns:
            A copy of the group if found, None otherwise
        """
        pass

    @abstractmethod
    def list_groups(self) -> list[Group]:
        """
        List all groups in insertion order.

        Returns:
            Copies of all stored groups
        """
        pass

    @abstractmethod
    def delete_group(self, group_id: UUID) -> bool:
        """
        Delete a group and all of its settlements.

        Returns:
            True if the group existed and was deleted
        """
        pass

    @abstractmethod
    def append_settlement(self, settlement: Settlement) -> bool:
        """
        Append a settlement to its group's list.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def list_settlements(self, group_id: UUID) -> list[Settlement]:
        """
        List a group's settlements in the order they were recorded.

        Returns:
            Copies of the settlements (empty list for unknown groups)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class CorruptDataError(StorageError):
    """Stored data could not be loaded into valid models."""
    pass
