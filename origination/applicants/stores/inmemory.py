"""In-memory implementation of ApplicantStore."""

from uuid import UUID

from origination.applicants.models import Applicant
from origination.applicants.store import ApplicantStore


class InMemoryApplicantStore(ApplicantStore):
    """In-memory implementation of ApplicantStore for testing and development."""

    def __init__(self) -> None:
        self._applicants: dict[UUID, Applicant] = {}

    async def get(self, tenant_id: UUID, applicant_id: UUID) -> Applicant | None:
        applicant = self._applicants.get(applicant_id)
        if applicant and applicant.tenant_id == tenant_id:
            return applicant.model_copy(deep=True)
        return None

    async def save(self, applicant: Applicant) -> UUID:
        self._applicants[applicant.id] = applicant.model_copy(deep=True)
        return applicant.id

    async def find_by_curp(self, tenant_id: UUID, curp: str) -> Applicant | None:
        curp = curp.upper()
        for applicant in self._applicants.values():
            if applicant.tenant_id == tenant_id and applicant.curp == curp:
                return applicant.model_copy(deep=True)
        return None
