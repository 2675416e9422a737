"""
Configuration Management for ISP Bookkeeping

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Business policy (who shares the profit, what the report letterhead says,
which account is seeded on first launch) lives in configuration data so it
can change without touching the aggregation code.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bookkeeping.models.ledger import ProfitSharingPolicy


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    store_sheet_name: str = Field(
        default="KeyValueStore",
        description="Name of the worksheet holding key/value pairs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GeminiSettings(BaseSettings):
    """
    Gemini LLM configuration.

    The API key is optional: without it the financial summary
    feature reports itself as disabled instead of failing.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class OrganizationSettings(BaseSettings):
    """Letterhead and signature block printed on the monthly report."""

    model_config = SettingsConfigDict(
        env_prefix="ORG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    name: str = Field(
        default="Damar Global Network",
        description="Organization name shown in the report header"
    )
    address: str = Field(
        default="Jl. Raya Cadas - Kukun, Kp. Korod, Ds. Pangadegan, Kec. Pasar kemis",
        description="Organization address shown under the name"
    )
    city: str = Field(
        default="Tangerang",
        description="City printed before the signature date"
    )
    signatory_title: str = Field(
        default="Direktur Utama",
        description="Title of the person signing the report"
    )
    signatory_name: str = Field(
        default="Mardi Jayadi",
        description="Name of the person signing the report"
    )


class ProfitSharingSettings(BaseSettings):
    """
    Profit sharing policy.

    PROFIT_SHARING_PARTNERS is read as a JSON list, e.g.
    PROFIT_SHARING_PARTNERS='["Alice", "Bob"]'.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROFIT_SHARING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    partners: list[str] = Field(
        default_factory=lambda: ["Mardi Jayadi", "Daden", "Hamdan", "Umi"],
        min_length=1,
        description="Ordered list of partners sharing a positive monthly balance"
    )
    decimal_places: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Decimal places each share is rounded to"
    )

    @property
    def policy(self) -> ProfitSharingPolicy:
        return ProfitSharingPolicy(
            partners=self.partners,
            decimal_places=self.decimal_places,
        )


class BootstrapAdminSettings(BaseSettings):
    """
    Administrator account seeded when no account exists yet.

    The seeded account is forced to change its password at first login.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOTSTRAP_ADMIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    username: str = Field(
        default="amin",
        min_length=1,
        description="Username of the first administrator"
    )
    password: str = Field(
        default="password",
        min_length=1,
        description="Initial password of the first administrator"
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

    # Storage
    storage_backend: Literal["json", "google_sheets", "memory"] = Field(
        default="json",
        description="Which key-value store backs the application"
    )
    data_file: str = Field(
        default="data/bookkeeping.json",
        description="Path of the JSON file used by the 'json' backend"
    )

    # Security
    password_hash_iterations: int = Field(
        default=600_000,
        ge=1,
        description="PBKDF2 iterations for newly hashed passwords"
    )

    # Audit trail
    audit_log_max_events: int = Field(
        default=500,
        ge=0,
        description="How many audit events are kept in storage (0 disables persistence)"
    )

    @property
    def data_path(self) -> Path:
        return Path(self.data_file)


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def organization(self) -> OrganizationSettings:
        return OrganizationSettings()

    @property
    def profit_sharing(self) -> ProfitSharingSettings:
        return ProfitSharingSettings()

    @property
    def bootstrap_admin(self) -> BootstrapAdminSettings:
        return BootstrapAdminSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" entry for every failing section.
    Useful for startup checks and the settings page.
    """
    results = {}

    settings = get_settings()

    sections = {
        "app": lambda: settings.app,
        "organization": lambda: settings.organization,
        "profit_sharing": lambda: settings.profit_sharing,
        "bootstrap_admin": lambda: settings.bootstrap_admin,
        "google_sheets": lambda: settings.google_sheets,
    }
    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    # Gemini always loads; it is only "valid" when a key is present
    try:
        gemini = settings.gemini
        results["gemini"] = gemini.is_configured
        if not gemini.is_configured:
            results["gemini_error"] = "GEMINI_API_KEY is not set"
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    return results
