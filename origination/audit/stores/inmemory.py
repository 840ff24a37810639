"""In-memory implementation of AuditStore."""

from uuid import UUID

from origination.audit.models import AuditEvent, AuditEventType
from origination.audit.store import AuditStore


class InMemoryAuditStore(AuditStore):
    """In-memory implementation of AuditStore for testing and development.

    Uses simple dict storage with linear scan for queries.
    """

    def __init__(self) -> None:
        self._events: dict[UUID, AuditEvent] = {}

    async def save_event(self, event: AuditEvent) -> UUID:
        """Save an audit event."""
        self._events[event.id] = event
        return event.id

    async def get_event(self, event_id: UUID) -> AuditEvent | None:
        """Get an audit event by ID."""
        return self._events.get(event_id)

    async def list_events_by_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        *,
        event_type: AuditEventType | None = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """List events for an applicant in chronological order."""
        results = [
            event
            for event in self._events.values()
            if event.tenant_id == tenant_id
            and event.applicant_id == applicant_id
            and (event_type is None or event.event_type == event_type)
        ]
        results.sort(key=lambda x: x.timestamp)
        return results[:limit]

    async def list_events_by_application(
        self,
        tenant_id: UUID,
        application_id: UUID,
        *,
        event_type: AuditEventType | None = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """List events for an application in chronological order."""
        results = [
            event
            for event in self._events.values()
            if event.tenant_id == tenant_id
            and event.application_id == application_id
            and (event_type is None or event.event_type == event_type)
        ]
        results.sort(key=lambda x: x.timestamp)
        return results[:limit]
