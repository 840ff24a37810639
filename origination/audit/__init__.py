"""Audit trail for verification and review events."""

from origination.audit.models import AuditEvent, AuditEventType
from origination.audit.store import AuditStore

__all__ = ["AuditEvent", "AuditEventType", "AuditStore"]
