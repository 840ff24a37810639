"""ApplicationStore implementations."""

from origination.applications.stores.inmemory import InMemoryApplicationStore

__all__ = ["InMemoryApplicationStore"]
