"""DocumentStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from origination.documents.enums import DocumentType
from origination.documents.models import Document


class DocumentStore(ABC):
    """Storage for document records (metadata only, not file content)."""

    @abstractmethod
    async def get(self, tenant_id: UUID, document_id: UUID) -> Document | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def save(self, document: Document) -> UUID:
        """Insert or replace a document."""
        pass

    @abstractmethod
    async def list_for_application(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        application_id: UUID,
        *,
        current_only: bool = True,
    ) -> list[Document]:
        """Documents of an application plus the applicant's own documents."""
        pass

    @abstractmethod
    async def list_for_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        *,
        current_only: bool = True,
    ) -> list[Document]:
        """All documents uploaded by an applicant."""
        pass

    @abstractmethod
    async def find_current(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        document_type: DocumentType,
        application_id: UUID | None = None,
    ) -> Document | None:
        """The current document of a type for the same owner."""
        pass
