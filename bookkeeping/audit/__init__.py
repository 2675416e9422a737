"""Audit logging package."""

from bookkeeping.audit.logger import AUDIT_LOG_KEY, AuditEventListAdapter, AuditLogger

__all__ = ["AUDIT_LOG_KEY", "AuditEventListAdapter", "AuditLogger"]
