"""AuditStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from origination.audit.models import AuditEvent, AuditEventType


class AuditStore(ABC):
    """Append-only storage for audit events."""

    @abstractmethod
    async def save_event(self, event: AuditEvent) -> UUID:
        """Save an audit event."""
        pass

    @abstractmethod
    async def get_event(self, event_id: UUID) -> AuditEvent | None:
        """Get an audit event by ID."""
        pass

    @abstractmethod
    async def list_events_by_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        *,
        event_type: AuditEventType | None = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """List events for an applicant in chronological order."""
        pass

    @abstractmethod
    async def list_events_by_application(
        self,
        tenant_id: UUID,
        application_id: UUID,
        *,
        event_type: AuditEventType | None = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """List events for an application in chronological order."""
        pass
