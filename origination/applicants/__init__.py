"""Applicant aggregate: personal data, identifiers and KYC state."""

from origination.applicants.enums import IdentificationType, KycStatus
from origination.applicants.models import Address, Applicant, Employment, Identification
from origination.applicants.store import ApplicantStore

__all__ = [
    "Address",
    "Applicant",
    "ApplicantStore",
    "Employment",
    "Identification",
    "IdentificationType",
    "KycStatus",
]
