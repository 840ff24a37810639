"""VerificationStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from origination.verification.models import DataVerification


class VerificationStore(ABC):
    """Storage for the field verification ledger.

    Records are keyed by (tenant_id, applicant_id, field_name); ``save``
    is an upsert on that key.
    """

    @abstractmethod
    async def get(
        self, tenant_id: UUID, applicant_id: UUID, field_name: str
    ) -> DataVerification | None:
        """Get the ledger record for one field."""
        pass

    @abstractmethod
    async def save(self, record: DataVerification) -> DataVerification:
        """Insert or replace the record for its field."""
        pass

    @abstractmethod
    async def list_for_applicant(
        self, tenant_id: UUID, applicant_id: UUID
    ) -> list[DataVerification]:
        """List all ledger records of an applicant ordered by field name."""
        pass

    @abstractmethod
    async def delete(self, tenant_id: UUID, applicant_id: UUID, field_name: str) -> bool:
        """Delete a record. Returns True if one existed."""
        pass
