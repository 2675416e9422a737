"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of changes to the books
2. Debugging capability when stored data turns out to be broken
3. A visible record of failed logins

The audit logger:
- Always writes to the structured local log
- Optionally keeps the most recent events in the key-value store
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

from typing import Optional

import structlog
from pydantic import TypeAdapter

from bookkeeping.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from bookkeeping.services.storage import (
    KeyValueStore,
    StorageError,
    load_json_list,
    save_json_list,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


AUDIT_LOG_KEY = "auditLog"

AuditEventListAdapter = TypeAdapter(list[AuditEvent])


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The "auditLog" key of the store, capped at max_events
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        max_events: int = 500,
    ):
        """
        Initialize audit logger.

        Args:
            store: Key-value store for persistence.
                   If None, only logs locally.
            max_events: Number of most recent events kept in the store
        """
        self._store = store
        self._max_events = max_events
        self._logger = structlog.get_logger("bookkeeping.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._store is None or self._max_events <= 0:
            return True

        try:
            events = load_json_list(self._store, AUDIT_LOG_KEY, AuditEventListAdapter)
            events.append(event)
            save_json_list(
                self._store,
                AUDIT_LOG_KEY,
                AuditEventListAdapter,
                events[-self._max_events:],
            )
            return True
        except StorageError as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent persisted events, newest first."""
        if self._store is None:
            return []
        events = load_json_list(self._store, AUDIT_LOG_KEY, AuditEventListAdapter)
        return list(reversed(events[-limit:]))

    def log_external_service_error(self, service: str, error_message: str) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
        ))
