"""Tests for the application status transition matrix."""

import pytest

from origination.applications.enums import ApplicationStatus
from origination.applications.transitions import (
    PERMISSION_APPROVE,
    PERMISSION_CHANGE_STATUS,
    TRANSITIONS,
    can_transition,
    required_permission,
)

S = ApplicationStatus


class TestCanTransition:
    """Tests for can_transition."""

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (S.DRAFT, S.SUBMITTED),
            (S.SUBMITTED, S.IN_REVIEW),
            (S.IN_REVIEW, S.CORRECTIONS_PENDING),
            (S.CORRECTIONS_PENDING, S.IN_REVIEW),
            (S.DOCS_PENDING, S.IN_REVIEW),
            (S.COUNTER_OFFERED, S.APPROVED),
            (S.APPROVED, S.DISBURSED),
            (S.DEFAULT, S.ACTIVE),
        ],
    )
    def test_allowed(self, from_status: ApplicationStatus, to_status: ApplicationStatus) -> None:
        assert can_transition(from_status, to_status)

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (S.DRAFT, S.APPROVED),
            (S.CORRECTIONS_PENDING, S.APPROVED),
            (S.SUBMITTED, S.CORRECTIONS_PENDING),
            (S.APPROVED, S.IN_REVIEW),
        ],
    )
    def test_not_allowed(
        self, from_status: ApplicationStatus, to_status: ApplicationStatus
    ) -> None:
        assert not can_transition(from_status, to_status)

    @pytest.mark.parametrize("status", [S.REJECTED, S.CANCELLED, S.COMPLETED])
    def test_final_statuses_have_no_exits(self, status: ApplicationStatus) -> None:
        assert status.is_final
        assert TRANSITIONS[status] == frozenset()


class TestRequiredPermission:
    """Tests for required_permission."""

    def test_decisions_need_approve_permission(self) -> None:
        assert required_permission(S.APPROVED) == PERMISSION_APPROVE
        assert required_permission(S.REJECTED) == PERMISSION_APPROVE

    def test_review_moves_need_change_status(self) -> None:
        assert required_permission(S.IN_REVIEW) == PERMISSION_CHANGE_STATUS
        assert required_permission(S.COUNTER_OFFERED) == PERMISSION_CHANGE_STATUS
