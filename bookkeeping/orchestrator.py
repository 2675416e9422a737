"""
Application Factory

Wires the configured key-value store into an AppState.

DESIGN DECISION: A misconfigured optional backend never stops the app
from starting. If Google Sheets cannot be set up, the local JSON file is
used instead and the failure is logged, so the office can keep working
while the configuration is fixed.
"""

from typing import Optional

import structlog

from bookkeeping.config import Settings, get_settings
from bookkeeping.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StorageError,
)
from bookkeeping.state import AppState


logger = structlog.get_logger(__name__)


def create_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """
    Build the key-value store selected by STORAGE_BACKEND.

    Falls back to the JSON file when Google Sheets is selected but
    not usable.
    """
    settings = settings or get_settings()
    app_settings = settings.app

    if app_settings.storage_backend == "memory":
        return MemoryKeyValueStore()

    if app_settings.storage_backend == "google_sheets":
        try:
            client = GoogleSheetsClient(settings.google_sheets)
            client.get_store_sheet()
            return GoogleSheetsKeyValueStore(client)
        except (StorageError, ValueError) as e:
            # Storage not configured - continue with the local file
            logger.warning(
                "storage_backend_fallback",
                requested="google_sheets",
                using="json",
                error=str(e),
            )

    return JsonFileKeyValueStore(app_settings.data_path)


def create_app_state(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    session_id: Optional[str] = None,
) -> AppState:
    """
    Factory function to create the application state.

    Args:
        settings: Settings to use (defaults to the cached global settings)
        store: Key-value store to use; built from settings when omitted
        session_id: Per-browser id the login is persisted under (optional)

    Returns:
        An AppState that still needs init() before use
    """
    settings = settings or get_settings()
    store = store or create_store(settings)
    logger.info("app_state_created", store=type(store).__name__)
    return AppState(store, settings=settings, session_id=session_id)
