"""Configuration package."""

from bookkeeping.config.settings import (
    AppSettings,
    BootstrapAdminSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    OrganizationSettings,
    ProfitSharingSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BootstrapAdminSettings",
    "GeminiSettings",
    "GoogleSheetsSettings",
    "OrganizationSettings",
    "ProfitSharingSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
