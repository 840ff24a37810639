"""Verification ledger service.

Reconciles field values arriving from different sources (staff review,
OTP, document OCR, government registries, biometrics) into one ledger
record per applicant field, and keeps the applicant's identifiers and
KYC status in step with the ledger.

Precedence: a record verified by an automated source is locked. A locked
record is only overwritten by a source of a higher tier, or refreshed by
an official registry of the same tier. Lower or equal tier writes return
the existing record unchanged.
"""

from typing import Any
from uuid import UUID

from origination.applicants.enums import IdentificationStatus, IdentificationType, KycStatus
from origination.applicants.models import Applicant
from origination.applicants.store import ApplicantStore
from origination.audit.models import AuditEvent, AuditEventType
from origination.audit.store import AuditStore
from origination.config.models.verification import VerificationConfig
from origination.documents.enums import DocumentType
from origination.errors import ApplicantNotFoundError, FieldLockedError
from origination.locking import KeyedMutex
from origination.observability.logging import get_logger
from origination.observability.metrics import FIELD_REJECTIONS, FIELD_VERIFICATIONS
from origination.verification.enums import VerificationMethod, VerificationStatus
from origination.verification.fields import ADDRESS_FIELDS, KYC_FIELDS, field_label
from origination.verification.models import (
    CorrectorRef,
    DataVerification,
    FieldSummary,
    VerificationSummary,
    VerifiedField,
    normalize_date,
    normalize_value,
    utc_now,
)
from origination.verification.precedence import accepts, is_repeat
from origination.verification.store import VerificationStore

logger = get_logger(__name__)

# Ledger fields mirrored onto the applicant's identification records
_IDENTIFICATION_FIELDS: dict[str, IdentificationType] = {
    "curp": IdentificationType.CURP,
    "rfc": IdentificationType.RFC,
    "ine_clave": IdentificationType.INE,
    "ine_cic": IdentificationType.INE,
    "ine_document_front": IdentificationType.INE,
    "ine_document_back": IdentificationType.INE,
}

# Ledger field -> key in the INE OCR payload
_INE_FRONT_FIELDS: dict[str, str] = {
    "curp": "curp",
    "first_name": "nombres",
    "last_name_1": "apellido_paterno",
    "last_name_2": "apellido_materno",
    "birth_date": "fecha_nacimiento",
}


class VerificationService:
    """Writes and queries the field verification ledger."""

    def __init__(
        self,
        store: VerificationStore,
        applicant_store: ApplicantStore,
        audit_store: AuditStore,
        config: VerificationConfig | None = None,
    ) -> None:
        self._store = store
        self._applicants = applicant_store
        self._audit = audit_store
        self._config = config or VerificationConfig()
        self._field_locks = KeyedMutex()
        self._applicant_locks = KeyedMutex()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def verify(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        field_name: str,
        value: Any,
        method: VerificationMethod,
        metadata: dict[str, Any] | None = None,
        notes: str | None = None,
        verified_by: str | None = None,
    ) -> DataVerification:
        """Verify a field value, honouring lock precedence.

        Returns the stored record. When the write is a repeat of the
        current verification, or the record is locked by a source this
        method does not supersede, the existing record is returned as is.
        """
        await self._require_applicant(tenant_id, applicant_id)
        normalized = normalize_value(value)

        async with self._field_locks.acquire((tenant_id, applicant_id, field_name)):
            existing = await self._store.get(tenant_id, applicant_id, field_name)

            if is_repeat(existing, normalized, method):
                FIELD_VERIFICATIONS.labels(method=method.value, outcome="idempotent").inc()
                logger.debug(
                    "field_verification_repeated",
                    applicant_id=str(applicant_id),
                    field_name=field_name,
                    method=method.value,
                )
                return existing  # type: ignore[return-value]

            if not accepts(existing, method):
                FIELD_VERIFICATIONS.labels(method=method.value, outcome="locked").inc()
                logger.info(
                    "field_verification_skipped_locked",
                    applicant_id=str(applicant_id),
                    field_name=field_name,
                    method=method.value,
                    locked_by=existing.method.value,  # type: ignore[union-attr]
                )
                return existing  # type: ignore[return-value]

            outcome = "updated" if existing else "created"
            record = existing or DataVerification(
                tenant_id=tenant_id,
                applicant_id=applicant_id,
                field_name=field_name,
            )
            record.mark_verified(
                normalized,
                method,
                metadata=metadata,
                notes=notes or self._default_notes(field_name, method),
                verified_by=verified_by,
            )
            record = await self._store.save(record)

        FIELD_VERIFICATIONS.labels(method=method.value, outcome=outcome).inc()
        logger.info(
            "field_verified",
            applicant_id=str(applicant_id),
            field_name=field_name,
            method=method.value,
            locked=record.is_locked,
            outcome=outcome,
        )

        await self._sync_applicant(tenant_id, applicant_id, field_name, record)
        await self._record_event(
            tenant_id,
            applicant_id,
            AuditEventType.FIELD_VERIFIED,
            {
                "field_name": field_name,
                "method": method.value,
                "locked": record.is_locked,
                "outcome": outcome,
            },
            actor_id=verified_by,
        )
        return record

    async def verify_batch(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        verifications: dict[str, Any],
        default_method: VerificationMethod = VerificationMethod.API,
    ) -> dict[str, DataVerification]:
        """Verify several fields.

        Each value is either the raw field value or a mapping with
        ``value`` and optional ``method``, ``metadata`` and ``notes``.
        """
        results: dict[str, DataVerification] = {}
        for field_name, item in verifications.items():
            if isinstance(item, dict) and "value" in item:
                method = VerificationMethod(item.get("method") or default_method)
                results[field_name] = await self.verify(
                    tenant_id,
                    applicant_id,
                    field_name,
                    item["value"],
                    method,
                    metadata=item.get("metadata"),
                    notes=item.get("notes"),
                )
            else:
                results[field_name] = await self.verify(
                    tenant_id, applicant_id, field_name, item, default_method
                )
        return results

    async def reject_field(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        field_name: str,
        reason: str,
        rejected_by: str | None = None,
    ) -> DataVerification:
        """Mark a field as rejected by staff review.

        Raises:
            FieldLockedError: The field was verified by an automated source
        """
        applicant = await self._require_applicant(tenant_id, applicant_id)

        async with self._field_locks.acquire((tenant_id, applicant_id, field_name)):
            record = await self._store.get(tenant_id, applicant_id, field_name)
            if record is not None and record.is_locked:
                raise FieldLockedError(field_name)
            if record is None:
                record = DataVerification(
                    tenant_id=tenant_id,
                    applicant_id=applicant_id,
                    field_name=field_name,
                    field_value=normalize_value(applicant.get_field_value(field_name)),
                )
            record.reject(reason, rejected_by)
            record = await self._store.save(record)

        FIELD_REJECTIONS.labels(field=field_name).inc()
        logger.info(
            "field_rejected",
            applicant_id=str(applicant_id),
            field_name=field_name,
            rejected_by=rejected_by,
        )

        async with self._applicant_locks.acquire((tenant_id, applicant_id)):
            applicant = await self._require_applicant(tenant_id, applicant_id)
            id_type = _IDENTIFICATION_FIELDS.get(field_name)
            if id_type and id_type in applicant.identifications:
                applicant.identifications[id_type].status = IdentificationStatus.REJECTED
            if field_name in KYC_FIELDS and applicant.kyc_status != KycStatus.REJECTED:
                self._set_kyc_status(applicant, KycStatus.REJECTED)
            applicant.updated_at = utc_now()
            await self._applicants.save(applicant)

        await self._record_event(
            tenant_id,
            applicant_id,
            AuditEventType.FIELD_REJECTED,
            {"field_name": field_name, "reason": reason},
            actor_id=rejected_by,
        )
        return record

    async def unverify_field(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        field_name: str,
        actor_id: str | None = None,
    ) -> DataVerification | None:
        """Return a field to PENDING. Returns None if there is no record.

        Raises:
            FieldLockedError: The field was verified by an automated source
        """
        async with self._field_locks.acquire((tenant_id, applicant_id, field_name)):
            record = await self._store.get(tenant_id, applicant_id, field_name)
            if record is None:
                return None
            if record.is_locked:
                raise FieldLockedError(field_name)
            record.unverify()
            record = await self._store.save(record)

        id_type = _IDENTIFICATION_FIELDS.get(field_name)
        if id_type:
            async with self._applicant_locks.acquire((tenant_id, applicant_id)):
                applicant = await self._require_applicant(tenant_id, applicant_id)
                if id_type in applicant.identifications:
                    ident = applicant.identifications[id_type]
                    ident.status = IdentificationStatus.PENDING
                    ident.verified_at = None
                    await self._applicants.save(applicant)

        await self._record_event(
            tenant_id,
            applicant_id,
            AuditEventType.FIELD_UNVERIFIED,
            {"field_name": field_name},
            actor_id=actor_id,
        )
        return record

    async def mark_corrected(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        field_name: str,
        old_value: Any,
        new_value: Any,
        corrected_by: CorrectorRef | None = None,
    ) -> DataVerification:
        """Record an applicant correction on the ledger."""
        async with self._field_locks.acquire((tenant_id, applicant_id, field_name)):
            record = await self._store.get(tenant_id, applicant_id, field_name)
            if record is None:
                record = DataVerification(
                    tenant_id=tenant_id,
                    applicant_id=applicant_id,
                    field_name=field_name,
                    field_value=normalize_value(old_value),
                )
            entry = record.mark_corrected(old_value, new_value, corrected_by)
            record = await self._store.save(record)

        logger.info(
            "field_corrected",
            applicant_id=str(applicant_id),
            field_name=field_name,
            correction_count=record.correction_count,
        )
        await self._record_event(
            tenant_id,
            applicant_id,
            AuditEventType.FIELD_CORRECTED,
            {
                "field_name": field_name,
                "rejection_reason": entry.rejection_reason,
                "correction_count": record.correction_count,
            },
            actor_id=corrected_by.id if corrected_by else None,
        )
        return record

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def verify_document(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        document_type: DocumentType,
        document_id: UUID,
        method: VerificationMethod = VerificationMethod.DOCUMENT,
        metadata: dict[str, Any] | None = None,
        fields_to_lock: dict[str, Any] | None = None,
    ) -> DataVerification:
        """Verify a document and the field values extracted from it."""
        doc_metadata = {
            **(metadata or {}),
            "document_id": str(document_id),
            "document_type": document_type.value,
        }
        record = await self.verify(
            tenant_id,
            applicant_id,
            document_type.ledger_field,
            str(document_id),
            method,
            metadata=doc_metadata,
        )

        for field_name, value in (fields_to_lock or {}).items():
            if value in (None, ""):
                continue
            await self.verify(
                tenant_id,
                applicant_id,
                field_name,
                value,
                method,
                metadata={
                    "locked_by_document": str(document_id),
                    "document_type": document_type.value,
                },
            )
        return record

    async def verify_ine_document(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        side: str,
        document_id: UUID,
        ocr_data: dict[str, Any],
    ) -> DataVerification:
        """Verify an INE side from OCR; the front side locks identity fields."""
        fields_to_lock: dict[str, Any] = {}
        if side == "front":
            fields_to_lock = {
                field: ocr_data.get(key) for field, key in _INE_FRONT_FIELDS.items()
            }
            fields_to_lock["birth_date"] = normalize_date(fields_to_lock["birth_date"])

        document_type = DocumentType.INE_FRONT if side == "front" else DocumentType.INE_BACK
        return await self.verify_document(
            tenant_id,
            applicant_id,
            document_type,
            document_id,
            VerificationMethod.KYC_INE_OCR,
            metadata={"ocr_data": ocr_data},
            fields_to_lock=fields_to_lock,
        )

    async def verify_selfie_document(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        document_id: UUID,
        face_match_data: dict[str, Any],
    ) -> DataVerification:
        return await self.verify_document(
            tenant_id,
            applicant_id,
            DocumentType.SELFIE,
            document_id,
            VerificationMethod.KYC_FACE_MATCH,
            metadata={
                "face_match_score": face_match_data.get("score"),
                "face_match_threshold": face_match_data.get("threshold"),
                "face_match_passed": face_match_data.get("match"),
            },
        )

    async def verify_proof_of_address(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        document_id: UUID,
        address_data: dict[str, Any],
    ) -> DataVerification:
        """Verify a proof of address and the address components it shows."""
        return await self.verify_document(
            tenant_id,
            applicant_id,
            DocumentType.PROOF_OF_ADDRESS,
            document_id,
            VerificationMethod.DOCUMENT,
            fields_to_lock={field: address_data.get(field) for field in ADDRESS_FIELDS},
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get(
        self, tenant_id: UUID, applicant_id: UUID, field_name: str
    ) -> DataVerification | None:
        return await self._store.get(tenant_id, applicant_id, field_name)

    async def list_records(self, tenant_id: UUID, applicant_id: UUID) -> list[DataVerification]:
        return await self._store.list_for_applicant(tenant_id, applicant_id)

    async def is_locked(self, tenant_id: UUID, applicant_id: UUID, field_name: str) -> bool:
        record = await self._store.get(tenant_id, applicant_id, field_name)
        return bool(record and record.is_locked)

    async def is_verified(self, tenant_id: UUID, applicant_id: UUID, field_name: str) -> bool:
        record = await self._store.get(tenant_id, applicant_id, field_name)
        return bool(record and record.is_verified)

    async def get_locked_fields(self, tenant_id: UUID, applicant_id: UUID) -> list[str]:
        records = await self._store.list_for_applicant(tenant_id, applicant_id)
        return [r.field_name for r in records if r.is_locked]

    async def get_verified_fields(
        self, tenant_id: UUID, applicant_id: UUID
    ) -> dict[str, VerifiedField]:
        records = await self._store.list_for_applicant(tenant_id, applicant_id)
        return {
            r.field_name: VerifiedField(
                value=r.field_value,
                method=r.method,
                method_label=r.method.label,
                verified_at=r.updated_at,
                locked=r.is_locked,
                metadata=r.metadata,
            )
            for r in records
            if r.is_verified
        }

    async def get_summary(self, tenant_id: UUID, applicant_id: UUID) -> VerificationSummary:
        records = await self._store.list_for_applicant(tenant_id, applicant_id)
        return VerificationSummary(
            total=len(records),
            verified=sum(1 for r in records if r.is_verified),
            locked=sum(1 for r in records if r.is_locked),
            pending=sum(1 for r in records if r.status == VerificationStatus.PENDING),
            rejected=sum(1 for r in records if r.status == VerificationStatus.REJECTED),
            fields={
                r.field_name: FieldSummary(
                    verified=r.is_verified,
                    locked=r.is_locked,
                    method=r.method,
                    status=r.status,
                )
                for r in records
            },
        )

    async def has_completed_kyc(self, tenant_id: UUID, applicant_id: UUID) -> bool:
        """True when every critical KYC field is verified."""
        verified = await self._verified_field_names(tenant_id, applicant_id)
        return all(field in verified for field in self._config.critical_kyc_fields)

    async def update_kyc_status(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        verified_by: str | None = None,
    ) -> bool:
        """Advance the applicant's KYC status from the ledger.

        Returns True only when the applicant became KYC verified.
        """
        async with self._applicant_locks.acquire((tenant_id, applicant_id)):
            applicant = await self._require_applicant(tenant_id, applicant_id)
            verified = await self._verified_field_names(tenant_id, applicant_id)
            previous = applicant.kyc_status
            completed = self._apply_kyc_progress(applicant, verified, verified_by)
            if applicant.kyc_status != previous:
                await self._applicants.save(applicant)
                await self._record_kyc_change(applicant, previous, verified_by)
            return completed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require_applicant(self, tenant_id: UUID, applicant_id: UUID) -> Applicant:
        applicant = await self._applicants.get(tenant_id, applicant_id)
        if applicant is None:
            raise ApplicantNotFoundError(f"Applicant {applicant_id} not found")
        return applicant

    async def _verified_field_names(self, tenant_id: UUID, applicant_id: UUID) -> set[str]:
        records = await self._store.list_for_applicant(tenant_id, applicant_id)
        return {r.field_name for r in records if r.is_verified}

    async def _sync_applicant(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        field_name: str,
        record: DataVerification,
    ) -> None:
        """Mirror a verification onto the applicant aggregate."""
        async with self._applicant_locks.acquire((tenant_id, applicant_id)):
            applicant = await self._require_applicant(tenant_id, applicant_id)
            previous_kyc = applicant.kyc_status
            now = utc_now()

            if field_name == "phone" and applicant.phone_verified_at is None:
                applicant.phone_verified_at = now
            elif field_name == "email" and applicant.email_verified_at is None:
                applicant.email_verified_at = now

            id_type = _IDENTIFICATION_FIELDS.get(field_name)
            if id_type is not None:
                ident = applicant.identifications.get(id_type)
                if ident is None and field_name in ("curp", "rfc", "ine_clave"):
                    ident = applicant.set_identification(id_type, record.field_value)
                if ident is not None:
                    ident.status = IdentificationStatus.VERIFIED
                    ident.verified_at = now
                    ident.verification_method = record.method.value

            if field_name in KYC_FIELDS:
                verified = await self._verified_field_names(tenant_id, applicant_id)
                self._apply_kyc_progress(applicant, verified, record.verified_by)

            applicant.updated_at = now
            await self._applicants.save(applicant)

            if applicant.kyc_status != previous_kyc:
                await self._record_kyc_change(applicant, previous_kyc, record.verified_by)

    def _apply_kyc_progress(
        self,
        applicant: Applicant,
        verified_fields: set[str],
        verified_by: str | None,
    ) -> bool:
        critical = self._config.critical_kyc_fields
        if all(field in verified_fields for field in critical):
            if applicant.kyc_status == KycStatus.VERIFIED:
                return False
            self._set_kyc_status(applicant, KycStatus.VERIFIED)
            applicant.kyc_verified_at = utc_now()
            applicant.kyc_verified_by = verified_by
            return True

        if applicant.kyc_status == KycStatus.PENDING and any(
            field in verified_fields for field in critical
        ):
            self._set_kyc_status(applicant, KycStatus.IN_PROGRESS)
        return False

    def _set_kyc_status(self, applicant: Applicant, status: KycStatus) -> None:
        logger.info(
            "kyc_status_changed",
            applicant_id=str(applicant.id),
            from_status=applicant.kyc_status.value,
            to_status=status.value,
        )
        applicant.kyc_status = status

    async def _record_kyc_change(
        self, applicant: Applicant, previous: KycStatus, actor_id: str | None
    ) -> None:
        await self._record_event(
            applicant.tenant_id,
            applicant.id,
            AuditEventType.KYC_STATUS_CHANGED,
            {"from_status": previous.value, "to_status": applicant.kyc_status.value},
            actor_id=actor_id,
        )

    async def _record_event(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        event_type: AuditEventType,
        data: dict[str, Any],
        actor_id: str | None = None,
    ) -> None:
        await self._audit.save_event(
            AuditEvent(
                tenant_id=tenant_id,
                applicant_id=applicant_id,
                event_type=event_type,
                event_data=data,
                actor_id=actor_id,
            )
        )

    @staticmethod
    def _default_notes(field_name: str, method: VerificationMethod) -> str:
        return f"{field_label(field_name)} verificado vía {method.label}"
