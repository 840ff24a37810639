"""Loan applications: status state machine and staff review."""

from origination.applications.enums import (
    ActorType,
    ApplicationStatus,
    ChecklistStatus,
    PaymentFrequency,
    RejectionReason,
    ReviewAction,
    TimelineEvent,
)
from origination.applications.models import (
    Actor,
    Application,
    ChecklistEntry,
    CounterOffer,
    ReviewOutcome,
    StatusHistoryEntry,
)
from origination.applications.service import ApplicationWorkflowService
from origination.applications.store import ApplicationStore

__all__ = [
    "Actor",
    "ActorType",
    "Application",
    "ApplicationStatus",
    "ApplicationStore",
    "ApplicationWorkflowService",
    "ChecklistEntry",
    "ChecklistStatus",
    "CounterOffer",
    "PaymentFrequency",
    "RejectionReason",
    "ReviewAction",
    "ReviewOutcome",
    "StatusHistoryEntry",
    "TimelineEvent",
]
