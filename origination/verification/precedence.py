"""Precedence rules between verification sources."""

from origination.verification.enums import VerificationMethod
from origination.verification.models import DataVerification


def supersedes(method: VerificationMethod, existing: VerificationMethod) -> bool:
    """Whether a verification by ``method`` may replace one by ``existing``.

    A strictly higher tier always wins. At equal tier only an official
    registry may refresh the value.
    """
    if method.tier > existing.tier:
        return True
    return method.is_official_source and method.tier == existing.tier


def accepts(record: DataVerification | None, method: VerificationMethod) -> bool:
    """Whether the ledger may overwrite ``record`` with a ``method`` verification.

    Unlocked records accept any write. Locked records only accept a
    superseding source.
    """
    if record is None or not record.is_locked:
        return True
    return supersedes(method, record.method)


def is_repeat(record: DataVerification | None, value: str | None, method: VerificationMethod) -> bool:
    """True when the record already holds this exact verification."""
    return (
        record is not None
        and record.is_verified
        and record.method == method
        and record.field_value == value
    )
