"""Field-level verification ledger."""

from origination.verification.enums import (
    VerificationMethod,
    VerificationStatus,
    VerificationTier,
)
from origination.verification.models import (
    CorrectionEntry,
    DataVerification,
    VerificationSummary,
)
from origination.verification.store import VerificationStore

__all__ = [
    "CorrectionEntry",
    "DataVerification",
    "VerificationMethod",
    "VerificationStatus",
    "VerificationStore",
    "VerificationSummary",
    "VerificationTier",
]
