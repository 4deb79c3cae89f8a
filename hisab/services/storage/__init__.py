"""
Storage Services Package

Provides the abstract storage interface and its implementations:
in-memory (tests, scratch sessions) and a JSON data file.
"""

from hisab.services.storage.interface import (
    CorruptDataError,
    GroupStorageInterface,
    NotFoundError,
    StorageError,
)
from hisab.services.storage.memory import InMemoryGroupStorage
from hisab.services.storage.json_file import (
    JsonFileGroupStorage,
    migrate_group_payload,
    migrate_settlement_payload,
)

__all__ = [
    # Interface
    "GroupStorageInterface",
    # Exceptions
    "CorruptDataError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryGroupStorage",
    "JsonFileGroupStorage",
    # Load-time migration
    "migrate_group_payload",
    "migrate_settlement_payload",
]
