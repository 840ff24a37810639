"""VerificationStore implementations."""

from origination.verification.stores.inmemory import InMemoryVerificationStore
from origination.verification.stores.postgres import PostgresVerificationStore

__all__ = ["InMemoryVerificationStore", "PostgresVerificationStore"]
