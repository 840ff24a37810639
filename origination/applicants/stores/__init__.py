"""ApplicantStore implementations."""

from origination.applicants.stores.inmemory import InMemoryApplicantStore

__all__ = ["InMemoryApplicantStore"]
