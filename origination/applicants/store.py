"""ApplicantStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from origination.applicants.models import Applicant


class ApplicantStore(ABC):
    """Storage for applicants, scoped by tenant."""

    @abstractmethod
    async def get(self, tenant_id: UUID, applicant_id: UUID) -> Applicant | None:
        """Get an applicant by ID."""
        pass

    @abstractmethod
    async def save(self, applicant: Applicant) -> UUID:
        """Insert or replace an applicant."""
        pass

    @abstractmethod
    async def find_by_curp(self, tenant_id: UUID, curp: str) -> Applicant | None:
        """Find an applicant by CURP."""
        pass
