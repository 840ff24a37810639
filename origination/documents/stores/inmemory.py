"""In-memory implementation of DocumentStore."""

from uuid import UUID

from origination.documents.enums import DocumentType
from origination.documents.models import Document
from origination.documents.store import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """In-memory implementation of DocumentStore for testing and development."""

    def __init__(self) -> None:
        self._documents: dict[UUID, Document] = {}

    async def get(self, tenant_id: UUID, document_id: UUID) -> Document | None:
        document = self._documents.get(document_id)
        if document and document.tenant_id == tenant_id:
            return document.model_copy(deep=True)
        return None

    async def save(self, document: Document) -> UUID:
        self._documents[document.id] = document.model_copy(deep=True)
        return document.id

    async def list_for_application(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        application_id: UUID,
        *,
        current_only: bool = True,
    ) -> list[Document]:
        results = [
            doc.model_copy(deep=True)
            for doc in self._documents.values()
            if doc.tenant_id == tenant_id
            and doc.applicant_id == applicant_id
            and doc.application_id in (None, application_id)
            and (doc.is_current or not current_only)
        ]
        results.sort(key=lambda d: d.created_at)
        return results

    async def list_for_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        *,
        current_only: bool = True,
    ) -> list[Document]:
        results = [
            doc.model_copy(deep=True)
            for doc in self._documents.values()
            if doc.tenant_id == tenant_id
            and doc.applicant_id == applicant_id
            and (doc.is_current or not current_only)
        ]
        results.sort(key=lambda d: d.created_at)
        return results

    async def find_current(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        document_type: DocumentType,
        application_id: UUID | None = None,
    ) -> Document | None:
        for doc in self._documents.values():
            if (
                doc.tenant_id == tenant_id
                and doc.applicant_id == applicant_id
                and doc.type == document_type
                and doc.application_id == application_id
                and doc.is_current
            ):
                return doc.model_copy(deep=True)
        return None
