"""Applicant correction of rejected data."""

from origination.corrections.formatting import correction_label, format_value_for_display
from origination.corrections.models import CorrectionResult, PendingCorrections, RejectedField

__all__ = [
    "CorrectionResult",
    "PendingCorrections",
    "RejectedField",
    "correction_label",
    "format_value_for_display",
]
