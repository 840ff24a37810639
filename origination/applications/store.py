"""ApplicationStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from origination.applications.enums import ApplicationStatus
from origination.applications.models import Application


class ApplicationStore(ABC):
    """Storage for loan applications, scoped by tenant."""

    @abstractmethod
    async def get(self, tenant_id: UUID, application_id: UUID) -> Application | None:
        """Get an application by ID."""
        pass

    @abstractmethod
    async def save(self, application: Application) -> UUID:
        """Insert or replace an application."""
        pass

    @abstractmethod
    async def list_by_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        *,
        statuses: frozenset[ApplicationStatus] | None = None,
    ) -> list[Application]:
        """List an applicant's applications, newest first."""
        pass

    @abstractmethod
    async def next_folio_sequence(self, tenant_id: UUID, folio_prefix: str) -> int:
        """Next sequence number for folios starting with ``folio_prefix``."""
        pass
