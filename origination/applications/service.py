"""Application review workflow.

ApplicationWorkflowService drives the status state machine. Staff status
changes are checked against the transition matrix and the actor's
permissions; field reviews are mirrored into the verification ledger so
that a rejection moves the application to CORRECTIONS_PENDING and a
later verification can return it to IN_REVIEW.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from origination.applicants.store import ApplicantStore
from origination.applications.enums import (
    ApplicationStatus,
    ChecklistStatus,
    PaymentFrequency,
    ReviewAction,
    TimelineEvent,
)
from origination.applications.models import (
    Actor,
    Application,
    ChecklistEntry,
    CounterOffer,
    ReviewOutcome,
    utc_now,
)
from origination.applications.pricing import periodic_payment
from origination.applications.store import ApplicationStore
from origination.applications.transitions import (
    ACTIVE_STATUSES,
    AUTO_ADVANCE_STATUSES,
    PERMISSION_VERIFY_DATA,
    TRANSITIONS,
    can_transition,
    required_permission,
)
from origination.audit.models import AuditEvent, AuditEventType
from origination.audit.store import AuditStore
from origination.config.models.verification import VerificationConfig
from origination.documents.enums import DocumentStatus
from origination.documents.store import DocumentStore
from origination.errors import (
    ApplicantNotFoundError,
    ApplicationNotFoundError,
    InvalidOperationError,
    InvalidTransitionError,
    PermissionDeniedError,
)
from origination.locking import KeyedMutex
from origination.observability.logging import get_logger
from origination.observability.metrics import STATUS_TRANSITIONS
from origination.verification.enums import VerificationMethod
from origination.verification.fields import NAME_FIELDS, field_label
from origination.verification.service import VerificationService

logger = get_logger(__name__)


class ApplicationWorkflowService:
    """Status transitions and staff review of loan applications."""

    def __init__(
        self,
        store: ApplicationStore,
        applicant_store: ApplicantStore,
        document_store: DocumentStore,
        verification: VerificationService,
        audit_store: AuditStore,
        config: VerificationConfig | None = None,
    ) -> None:
        self._store = store
        self._applicants = applicant_store
        self._documents = document_store
        self._verification = verification
        self._audit = audit_store
        self._config = config or VerificationConfig()
        self._locks = KeyedMutex()
        self._folio_locks = KeyedMutex()

    @asynccontextmanager
    async def locked(
        self,
        tenant_id: UUID,
        application_id: UUID,
        applicant_id: UUID | None = None,
    ) -> AsyncIterator[Application]:
        """Load an application under its lock and save it on exit.

        When ``applicant_id`` is given the application must belong to that
        applicant. Nothing is saved if the block raises.
        """
        async with self._locks.acquire((tenant_id, application_id)):
            application = await self.get(tenant_id, application_id)
            if applicant_id is not None and application.applicant_id != applicant_id:
                raise ApplicationNotFoundError(f"Application {application_id} not found")
            yield application
            application.updated_at = utc_now()
            await self._store.save(application)

    async def get(self, tenant_id: UUID, application_id: UUID) -> Application:
        application = await self._store.get(tenant_id, application_id)
        if application is None:
            raise ApplicationNotFoundError(f"Application {application_id} not found")
        return application

    async def list_for_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        statuses: frozenset[ApplicationStatus] | None = None,
    ) -> list[Application]:
        return await self._store.list_by_applicant(tenant_id, applicant_id, statuses=statuses)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        requested_amount: Decimal,
        term_months: int,
        purpose: str | None = None,
        payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
        interest_rate: Decimal | None = None,
    ) -> Application:
        """Create a DRAFT application with the next folio for the tenant."""
        if await self._applicants.get(tenant_id, applicant_id) is None:
            raise ApplicantNotFoundError(f"Applicant {applicant_id} not found")

        async with self._folio_locks.acquire(tenant_id):
            year_prefix = f"{self._config.folio_prefix}-{utc_now().year}-"
            sequence = await self._store.next_folio_sequence(tenant_id, year_prefix)
            application = Application(
                tenant_id=tenant_id,
                applicant_id=applicant_id,
                folio=f"{year_prefix}{sequence:05d}",
                requested_amount=requested_amount,
                term_months=term_months,
                purpose=purpose,
                payment_frequency=payment_frequency,
                interest_rate=interest_rate,
            )
            await self._store.save(application)

        logger.info(
            "application_created",
            application_id=str(application.id),
            folio=application.folio,
        )
        return application

    async def submit(
        self,
        tenant_id: UUID,
        application_id: UUID,
        actor: Actor,
        applicant_id: UUID | None = None,
    ) -> Application:
        """Submit a DRAFT application for review."""
        async with self.locked(tenant_id, application_id, applicant_id) as application:
            if application.status != ApplicationStatus.DRAFT:
                raise InvalidTransitionError(
                    application.status.value,
                    ApplicationStatus.SUBMITTED.value,
                    "Only draft applications can be submitted",
                )
            if await self._applicants.get(tenant_id, application.applicant_id) is None:
                raise ApplicantNotFoundError(f"Applicant {application.applicant_id} not found")
            if not application.purpose:
                raise InvalidOperationError("Application purpose is required before submitting")

            application.submitted_at = utc_now()
            await self._transition(application, ApplicationStatus.SUBMITTED, actor)
        return application

    async def change_status(
        self,
        tenant_id: UUID,
        application_id: UUID,
        new_status: ApplicationStatus,
        actor: Actor,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
        approved_amount: Decimal | None = None,
    ) -> Application:
        """Move an application to ``new_status`` on behalf of ``actor``.

        Raises:
            PermissionDeniedError: Actor lacks the permission for the target
            InvalidTransitionError: Target not reachable from current status
        """
        permission = required_permission(new_status)
        if not actor.has_permission(permission):
            raise PermissionDeniedError(permission)

        async with self.locked(tenant_id, application_id) as application:
            if not can_transition(application.status, new_status):
                raise InvalidTransitionError(application.status.value, new_status.value)

            now = utc_now()
            if new_status == ApplicationStatus.APPROVED:
                application.approved_at = now
                if approved_amount is not None:
                    application.approved_amount = approved_amount
                elif application.approved_amount is None:
                    application.approved_amount = application.requested_amount
            elif new_status == ApplicationStatus.REJECTED:
                application.rejected_at = now
                application.rejection_reason = reason
            elif new_status == ApplicationStatus.DISBURSED:
                application.disbursed_at = now

            await self._transition(application, new_status, actor, reason, metadata)
        return application

    async def approve(
        self,
        tenant_id: UUID,
        application_id: UUID,
        actor: Actor,
        approved_amount: Decimal | None = None,
        notes: str | None = None,
    ) -> Application:
        return await self.change_status(
            tenant_id,
            application_id,
            ApplicationStatus.APPROVED,
            actor,
            notes,
            approved_amount=approved_amount,
        )

    async def reject(
        self, tenant_id: UUID, application_id: UUID, actor: Actor, reason: str
    ) -> Application:
        return await self.change_status(
            tenant_id, application_id, ApplicationStatus.REJECTED, actor, reason
        )

    async def cancel(
        self, tenant_id: UUID, application_id: UUID, actor: Actor, reason: str | None = None
    ) -> Application:
        return await self.change_status(
            tenant_id, application_id, ApplicationStatus.CANCELLED, actor, reason
        )

    async def send_counter_offer(
        self,
        tenant_id: UUID,
        application_id: UUID,
        actor: Actor,
        amount: Decimal,
        term_months: int,
        interest_rate: Decimal,
        payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
        reason: str | None = None,
    ) -> Application:
        """Propose new terms and move the application to COUNTER_OFFERED."""
        payment, total = periodic_payment(amount, term_months, interest_rate, payment_frequency)
        offer = CounterOffer(
            amount=amount,
            term_months=term_months,
            interest_rate=interest_rate,
            payment_frequency=payment_frequency,
            payment_amount=payment,
            total_to_pay=total,
            reason=reason,
            offered_by=actor.id,
        )

        permission = required_permission(ApplicationStatus.COUNTER_OFFERED)
        if not actor.has_permission(permission):
            raise PermissionDeniedError(permission)

        async with self.locked(tenant_id, application_id) as application:
            if not can_transition(application.status, ApplicationStatus.COUNTER_OFFERED):
                raise InvalidTransitionError(
                    application.status.value, ApplicationStatus.COUNTER_OFFERED.value
                )
            application.counter_offer = offer
            await self._transition(
                application,
                ApplicationStatus.COUNTER_OFFERED,
                actor,
                reason,
                {
                    "amount": str(amount),
                    "term_months": term_months,
                    "interest_rate": str(interest_rate),
                    "payment_amount": str(payment),
                },
            )
        return application

    async def respond_to_counter_offer(
        self,
        tenant_id: UUID,
        application_id: UUID,
        actor: Actor,
        accept: bool,
        applicant_id: UUID | None = None,
    ) -> Application:
        """Applicant response: accept approves with the offered terms, decline cancels."""
        async with self.locked(tenant_id, application_id, applicant_id) as application:
            offer = application.counter_offer
            if application.status != ApplicationStatus.COUNTER_OFFERED or offer is None:
                raise InvalidOperationError("Application has no open counter-offer")

            offer.accepted = accept
            offer.responded_at = utc_now()
            application.counter_offer = offer

            if accept:
                application.approved_amount = offer.amount
                application.term_months = offer.term_months
                application.interest_rate = offer.interest_rate
                application.payment_frequency = offer.payment_frequency
                application.approved_at = utc_now()
                await self._transition(
                    application, ApplicationStatus.APPROVED, actor, "Contraoferta aceptada"
                )
            else:
                await self._transition(
                    application, ApplicationStatus.CANCELLED, actor, "Contraoferta rechazada"
                )
        return application

    def allowed_next_statuses(
        self, application: Application, actor: Actor
    ) -> list[ApplicationStatus]:
        targets = TRANSITIONS.get(application.status, frozenset())
        return [
            status
            for status in ApplicationStatus
            if status in targets and actor.has_permission(required_permission(status))
        ]

    def is_stale(self, application: Application, hours: int | None = None) -> bool:
        """True when an active application has not been touched for ``hours``."""
        if application.status not in ACTIVE_STATUSES:
            return False
        limit = timedelta(hours=hours if hours is not None else self._config.stale_after_hours)
        return utc_now() - application.updated_at > limit

    # ------------------------------------------------------------------
    # Field review
    # ------------------------------------------------------------------

    async def verify_data(
        self,
        tenant_id: UUID,
        application_id: UUID,
        field_name: str,
        action: ReviewAction,
        actor: Actor,
        method: VerificationMethod | None = None,
        rejection_reason: str | None = None,
        notes: str | None = None,
    ) -> ReviewOutcome:
        """Record a staff review of one field and mirror it into the ledger.

        The ledger is written first, so a locked field raises
        FieldLockedError before the application changes.
        """
        if not actor.has_permission(PERMISSION_VERIFY_DATA):
            raise PermissionDeniedError(PERMISSION_VERIFY_DATA)
        if action == ReviewAction.REJECT and not rejection_reason:
            raise InvalidOperationError("A rejection reason is required")

        async with self.locked(tenant_id, application_id) as application:
            applicant_id = application.applicant_id
            previous_status = application.status
            now = utc_now()

            if action == ReviewAction.VERIFY:
                method = method or VerificationMethod.MANUAL
                applicant = await self._applicants.get(tenant_id, applicant_id)
                if applicant is None:
                    raise ApplicantNotFoundError(f"Applicant {applicant_id} not found")
                value = (
                    getattr(applicant, field_name)
                    if field_name in NAME_FIELDS
                    else applicant.get_field_value(field_name)
                )
                await self._verification.verify(
                    tenant_id,
                    applicant_id,
                    field_name,
                    value,
                    method,
                    metadata={"application_id": str(application_id)},
                    notes=notes,
                    verified_by=actor.id,
                )
                entry = ChecklistEntry(
                    status=ChecklistStatus.VERIFIED,
                    method=method.value,
                    notes=notes,
                    verified_by=actor.id,
                    verified_at=now,
                )
            elif action == ReviewAction.REJECT:
                await self._verification.reject_field(
                    tenant_id, applicant_id, field_name, rejection_reason, actor.id
                )
                entry = ChecklistEntry(
                    status=ChecklistStatus.REJECTED,
                    rejection_reason=rejection_reason,
                    notes=notes,
                    verified_by=actor.id,
                    rejected_at=now,
                )
            else:
                await self._verification.unverify_field(
                    tenant_id, applicant_id, field_name, actor.id
                )
                entry = ChecklistEntry(status=ChecklistStatus.PENDING, notes=notes)

            application.verification_checklist = {
                **application.verification_checklist,
                field_name: entry,
            }
            application.add_history(
                TimelineEvent.DATA_VERIFICATION,
                actor,
                notes=self._review_note(field_name, action, rejection_reason),
                metadata={
                    "action": action.value,
                    "field": field_name,
                    "method": entry.method,
                    "rejection_reason": rejection_reason,
                },
            )

            if action == ReviewAction.REJECT and can_transition(
                application.status, ApplicationStatus.CORRECTIONS_PENDING
            ):
                await self._transition(
                    application,
                    ApplicationStatus.CORRECTIONS_PENDING,
                    actor,
                    f"Dato rechazado: {field_label(field_name)}",
                    {"trigger": "field_rejected", "field": field_name},
                )
            elif action == ReviewAction.VERIFY:
                await self.advance_if_ready(application, actor)

        logger.info(
            "application_field_reviewed",
            application_id=str(application_id),
            field_name=field_name,
            action=action.value,
            status=application.status.value,
        )
        changed = application.status != previous_status
        return ReviewOutcome(
            application=application,
            status_changed=changed,
            new_status=application.status if changed else None,
        )

    async def check_and_advance(
        self, tenant_id: UUID, application_id: UUID, actor: Actor
    ) -> bool:
        """Return a waiting application to IN_REVIEW when nothing blocks it.

        Returns True if the status changed.
        """
        async with self.locked(tenant_id, application_id) as application:
            return await self.advance_if_ready(application, actor)

    async def move_if_allowed(
        self,
        application: Application,
        new_status: ApplicationStatus,
        actor: Actor,
        notes: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Apply a workflow-driven transition when the matrix allows it.

        Used for moves caused by reviews and corrections, which are not
        subject to status-change permissions. The caller saves.
        """
        if not can_transition(application.status, new_status):
            return False
        await self._transition(application, new_status, actor, notes, metadata)
        return True

    async def ready_for_review(
        self, application: Application, *, allow_pending_documents: bool = False
    ) -> bool:
        """No rejected fields and no rejected (or, unless allowed, pending) documents."""
        if application.has_rejected_fields():
            return False
        documents = await self._documents.list_for_application(
            application.tenant_id, application.applicant_id, application.id
        )
        blocking = {DocumentStatus.REJECTED}
        if not allow_pending_documents:
            blocking.add(DocumentStatus.PENDING)
        return not any(doc.status in blocking for doc in documents)

    async def advance_if_ready(self, application: Application, actor: Actor) -> bool:
        """In-lock variant of check_and_advance; the caller saves."""
        if application.status not in AUTO_ADVANCE_STATUSES:
            return False
        if not await self.ready_for_review(application):
            return False
        return await self.move_if_allowed(
            application,
            ApplicationStatus.IN_REVIEW,
            actor,
            "Verificaciones completadas, solicitud lista para revisión",
            {"action": "auto_status_advance", "trigger": "verifications_complete"},
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _transition(
        self,
        application: Application,
        new_status: ApplicationStatus,
        actor: Actor,
        notes: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        previous = application.status
        application.status = new_status
        application.add_history(
            new_status, actor, notes=notes, metadata=metadata, from_status=previous
        )

        STATUS_TRANSITIONS.labels(
            from_status=previous.value,
            to_status=new_status.value,
            actor_type=actor.type.value,
        ).inc()
        logger.info(
            "application_status_changed",
            application_id=str(application.id),
            from_status=previous.value,
            to_status=new_status.value,
            actor_id=actor.id,
        )
        await self._audit.save_event(
            AuditEvent(
                tenant_id=application.tenant_id,
                event_type=AuditEventType.STATUS_CHANGED,
                event_data={
                    "from_status": previous.value,
                    "to_status": new_status.value,
                    "notes": notes,
                },
                applicant_id=application.applicant_id,
                application_id=application.id,
                actor_id=actor.id,
            )
        )

    @staticmethod
    def _review_note(field_name: str, action: ReviewAction, reason: str | None) -> str:
        label = field_label(field_name)
        if action == ReviewAction.VERIFY:
            return f"{label} verificado"
        if action == ReviewAction.REJECT:
            return f"{label} rechazado: {reason}"
        return f"{label} marcado como pendiente"
