"""DocumentStore implementations."""

from origination.documents.stores.inmemory import InMemoryDocumentStore

__all__ = ["InMemoryDocumentStore"]
