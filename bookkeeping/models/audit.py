"""
Audit Models for ISP Bookkeeping

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of who changed the books and when
2. Debugging information when stored data turns out to be broken
3. A record of failed login attempts

DESIGN DECISION: Audit logs are append-only. We never modify them.
Persisted copies are capped; the structured log keeps everything.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_DELETED = "account_deleted"
    ACCOUNT_BOOTSTRAPPED = "account_bootstrapped"
    PASSWORD_CHANGED = "password_changed"

    # Records (transactions, customers)
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"

    # Reports
    REPORT_EXPORTED = "report_exported"

    # System events
    STORAGE_DECODE_FAILED = "storage_decode_failed"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'customer', 'account')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Who did it
    actor: Optional[str] = Field(
        default=None,
        description="Username the action was performed as"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor": self.actor,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_failed("amin")
        event = AuditEventBuilder.record_added("transaction", tx.id, "amin")
    """

    @staticmethod
    def login_succeeded(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="account",
            actor=username,
            description=f"User logged in: {username}",
        )

    @staticmethod
    def login_failed(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            description="Login rejected: invalid credentials",
            details={"attempted_username": username},
        )

    @staticmethod
    def logout(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            entity_type="account",
            actor=username,
            description=f"User logged out: {username}",
        )

    @staticmethod
    def account_bootstrapped(account_id: str, username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_BOOTSTRAPPED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            description=(
                f"Default administrator '{username}' created; "
                "password must be changed at first login"
            ),
        )

    @staticmethod
    def account_created(
        account_id: str,
        username: str,
        role: str,
        actor: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            actor=actor,
            description=f"Account created: {username} ({role})",
            details={"username": username, "role": role},
        )

    @staticmethod
    def account_deleted(
        account_id: str,
        username: str,
        actor: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            actor=actor,
            description=f"Account deleted: {username}",
            details={"username": username},
        )

    @staticmethod
    def password_changed(account_id: str, username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSWORD_CHANGED,
            entity_type="account",
            entity_id=account_id,
            actor=username,
            description=f"Password changed for {username}",
        )

    @staticmethod
    def record_added(
        entity_type: str,
        entity_id: str,
        actor: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor,
            description=f"{entity_type.capitalize()} added",
            details=details or {},
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        entity_id: str,
        actor: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor,
            description=f"{entity_type.capitalize()} updated",
            details=details or {},
        )

    @staticmethod
    def record_deleted(
        entity_type: str,
        entity_id: str,
        actor: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def report_exported(
        year: int,
        month: int,
        transaction_count: int,
        actor: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_EXPORTED,
            entity_type="report",
            entity_id=f"{year:04d}-{month:02d}",
            actor=actor,
            description=f"Monthly report exported for {year:04d}-{month:02d}",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def storage_decode_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_DECODE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage_key",
            entity_id=key,
            description=f"Stored data under '{key}' could not be read; using an empty collection",
            error_message=error_message,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
        )
