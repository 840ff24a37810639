"""AuditStore implementations."""

from origination.audit.stores.inmemory import InMemoryAuditStore

__all__ = ["InMemoryAuditStore"]
