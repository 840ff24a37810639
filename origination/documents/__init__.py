"""Supporting documents and their review state."""

from origination.documents.enums import DocumentStatus, DocumentType
from origination.documents.models import Document
from origination.documents.store import DocumentStore

__all__ = ["Document", "DocumentStatus", "DocumentStore", "DocumentType"]
