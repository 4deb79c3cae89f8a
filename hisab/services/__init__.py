"""Services package."""

from hisab.services.group_store import GroupStore
from hisab.services.storage import (
    CorruptDataError,
    GroupStorageInterface,
    InMemoryGroupStorage,
    JsonFileGroupStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Record keeping
    "GroupStore",
    # Storage services
    "CorruptDataError",
    "GroupStorageInterface",
    "InMemoryGroupStorage",
    "JsonFileGroupStorage",
    "NotFoundError",
    "StorageError",
]
