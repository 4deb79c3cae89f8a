"""
Configuration Management for hisab

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger core itself takes no configuration beyond what callers pass in;
these settings drive the storage backend, validation thresholds and logging.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "CAD", "INR")


class LedgerSettings(BaseSettings):
    """Ledger defaults and validation thresholds."""

    model_config = SettingsConfigDict(
        env_prefix="HISAB_",
        extra="ignore"
    )

    default_currency: str = Field(
        default="USD",
        description="Currency assigned to new groups when none is given"
    )
    max_expense_amount: Decimal = Field(
        default=Decimal("1000000"),
        gt=0,
        description="Expenses above this amount are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future an expense date can be"
    )
    percentage_tolerance: Decimal = Field(
        default=Decimal("0.0001"),
        ge=0,
        description="Allowed deviation from 100 for percentage splits"
    )

    @field_validator('default_currency')
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Only allow currencies the formatter knows about."""
        code = v.strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValueError(
                f"Unsupported currency: {v}. Allowed: {', '.join(SUPPORTED_CURRENCIES)}"
            )
        return code


class StorageSettings(BaseSettings):
    """Storage backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HISAB_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(memory|json)$",
        description="Which storage backend to use"
    )
    data_path: str = Field(
        default="hisab_data.json",
        description="Path of the JSON data file (json backend only)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for activity logs"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
