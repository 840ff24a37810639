"""In-memory implementation of ApplicationStore."""

from uuid import UUID

from origination.applications.enums import ApplicationStatus
from origination.applications.models import Application
from origination.applications.store import ApplicationStore


class InMemoryApplicationStore(ApplicationStore):
    """In-memory implementation of ApplicationStore for testing and development."""

    def __init__(self) -> None:
        self._applications: dict[UUID, Application] = {}

    async def get(self, tenant_id: UUID, application_id: UUID) -> Application | None:
        application = self._applications.get(application_id)
        if application and application.tenant_id == tenant_id:
            return application.model_copy(deep=True)
        return None

    async def save(self, application: Application) -> UUID:
        self._applications[application.id] = application.model_copy(deep=True)
        return application.id

    async def list_by_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        *,
        statuses: frozenset[ApplicationStatus] | None = None,
    ) -> list[Application]:
        results = [
            app.model_copy(deep=True)
            for app in self._applications.values()
            if app.tenant_id == tenant_id
            and app.applicant_id == applicant_id
            and (statuses is None or app.status in statuses)
        ]
        results.sort(key=lambda a: a.created_at, reverse=True)
        return results

    async def next_folio_sequence(self, tenant_id: UUID, folio_prefix: str) -> int:
        sequences = [
            int(app.folio.rsplit("-", 1)[-1])
            for app in self._applications.values()
            if app.tenant_id == tenant_id
            and app.folio.startswith(folio_prefix)
            and app.folio.rsplit("-", 1)[-1].isdigit()
        ]
        return max(sequences, default=0) + 1
