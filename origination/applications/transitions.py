"""Application status transition matrix and permission rules."""

from origination.applications.enums import ApplicationStatus

S = ApplicationStatus

TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED, S.CANCELLED}),
    S.SUBMITTED: frozenset({S.IN_REVIEW, S.DOCS_PENDING, S.CANCELLED}),
    S.IN_REVIEW: frozenset({
        S.DOCS_PENDING,
        S.CORRECTIONS_PENDING,
        S.COUNTER_OFFERED,
        S.APPROVED,
        S.REJECTED,
        S.CANCELLED,
    }),
    S.DOCS_PENDING: frozenset({S.IN_REVIEW, S.CORRECTIONS_PENDING, S.CANCELLED}),
    S.CORRECTIONS_PENDING: frozenset({S.IN_REVIEW, S.CANCELLED}),
    S.COUNTER_OFFERED: frozenset({S.IN_REVIEW, S.APPROVED, S.REJECTED, S.CANCELLED}),
    S.APPROVED: frozenset({S.DISBURSED, S.CANCELLED}),
    S.DISBURSED: frozenset({S.ACTIVE}),
    S.ACTIVE: frozenset({S.COMPLETED, S.DEFAULT}),
    S.DEFAULT: frozenset({S.ACTIVE}),
    S.REJECTED: frozenset(),
    S.CANCELLED: frozenset(),
    S.COMPLETED: frozenset(),
}

# Statuses an applicant is still waiting on
ACTIVE_STATUSES: frozenset[ApplicationStatus] = frozenset({
    S.SUBMITTED,
    S.IN_REVIEW,
    S.DOCS_PENDING,
    S.CORRECTIONS_PENDING,
    S.COUNTER_OFFERED,
})

# Applications in these statuses can receive applicant corrections
CORRECTABLE_STATUSES: frozenset[ApplicationStatus] = frozenset({
    S.CORRECTIONS_PENDING,
    S.IN_REVIEW,
    S.DOCS_PENDING,
    S.SUBMITTED,
})

# Statuses check_and_advance returns to IN_REVIEW once nothing blocks review
AUTO_ADVANCE_STATUSES: frozenset[ApplicationStatus] = frozenset({
    S.CORRECTIONS_PENDING,
    S.DOCS_PENDING,
})

RESTRICTED_STATUSES: frozenset[ApplicationStatus] = frozenset({
    S.APPROVED,
    S.REJECTED,
    S.CANCELLED,
    S.DISBURSED,
    S.ACTIVE,
    S.COMPLETED,
    S.DEFAULT,
})

PERMISSION_APPROVE = "applications.approve"
PERMISSION_CHANGE_STATUS = "applications.change_status"
PERMISSION_VERIFY_DATA = "applications.verify_data"
PERMISSION_REVIEW_DOCUMENTS = "documents.review"


def can_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    return to_status in TRANSITIONS.get(from_status, frozenset())


def required_permission(to_status: ApplicationStatus) -> str:
    """Permission a staff member needs to move an application to ``to_status``."""
    if to_status in RESTRICTED_STATUSES:
        return PERMISSION_APPROVE
    return PERMISSION_CHANGE_STATUS
