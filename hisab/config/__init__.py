"""Configuration package."""

from hisab.config.settings import (
    SUPPORTED_CURRENCIES,
    AppSettings,
    LedgerSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "SUPPORTED_CURRENCIES",
    "AppSettings",
    "LedgerSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
