"""In-memory implementation of VerificationStore."""

from uuid import UUID

from origination.verification.models import DataVerification
from origination.verification.store import VerificationStore

_Key = tuple[UUID, UUID, str]


class InMemoryVerificationStore(VerificationStore):
    """In-memory ledger for testing and development.

    Records are copied on the way in and out so callers cannot mutate
    stored state without calling ``save``.
    """

    def __init__(self) -> None:
        self._records: dict[_Key, DataVerification] = {}

    async def get(
        self, tenant_id: UUID, applicant_id: UUID, field_name: str
    ) -> DataVerification | None:
        record = self._records.get((tenant_id, applicant_id, field_name))
        return record.model_copy(deep=True) if record else None

    async def save(self, record: DataVerification) -> DataVerification:
        key = (record.tenant_id, record.applicant_id, record.field_name)
        existing = self._records.get(key)
        if existing is not None and existing.id != record.id:
            # Upsert keeps the identity of the first record for the field
            record = record.model_copy(update={"id": existing.id, "created_at": existing.created_at})
        self._records[key] = record.model_copy(deep=True)
        return record

    async def list_for_applicant(
        self, tenant_id: UUID, applicant_id: UUID
    ) -> list[DataVerification]:
        results = [
            record.model_copy(deep=True)
            for (t_id, a_id, _), record in self._records.items()
            if t_id == tenant_id and a_id == applicant_id
        ]
        results.sort(key=lambda r: r.field_name)
        return results

    async def delete(self, tenant_id: UUID, applicant_id: UUID, field_name: str) -> bool:
        return self._records.pop((tenant_id, applicant_id, field_name), None) is not None
