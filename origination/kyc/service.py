"""Provider-backed KYC checks that feed the verification ledger.

Each check calls the configured KycProvider and, when it passes, writes
the confirmed values to the ledger with the method that identifies the
source (RENAPO, SAT, INE OCR, biometrics, blocklists). Failed checks are
only audited; they never touch ledger values.
"""

from collections.abc import Awaitable
from typing import Any, TypeVar
from uuid import UUID, uuid4

from opentelemetry.trace import SpanKind

from origination.applicants.models import Applicant
from origination.applicants.store import ApplicantStore
from origination.audit.models import AuditEvent, AuditEventType
from origination.audit.store import AuditStore
from origination.config.models.verification import VerificationConfig
from origination.documents.enums import DocumentType
from origination.documents.service import DocumentReviewService
from origination.errors import ApplicantNotFoundError, InvalidOperationError
from origination.observability.logging import get_logger, mask_identifier
from origination.observability.metrics import KYC_CHECKS
from origination.observability.tracing import create_span
from origination.providers.kyc.base import (
    BlocklistResult,
    CurpValidation,
    FaceMatchResult,
    IneValidation,
    KycProvider,
    KycProviderError,
    LivenessResult,
    RfcValidation,
)
from origination.verification.enums import VerificationMethod
from origination.verification.models import normalize_date
from origination.verification.service import VerificationService

logger = get_logger(__name__)

T = TypeVar("T")

OTP_FIELDS = frozenset({"phone", "email"})


class KycService:
    """Runs KYC checks for an applicant and records the results."""

    def __init__(
        self,
        provider: KycProvider,
        verification: VerificationService,
        documents: DocumentReviewService,
        applicant_store: ApplicantStore,
        audit_store: AuditStore,
        config: VerificationConfig | None = None,
    ) -> None:
        self._provider = provider
        self._verification = verification
        self._documents = documents
        self._applicants = applicant_store
        self._audit = audit_store
        self._config = config or VerificationConfig()

    async def validate_curp(self, tenant_id: UUID, applicant_id: UUID, curp: str) -> CurpValidation:
        """Validate a CURP with RENAPO; a valid CURP also confirms name and birth date."""
        await self._require_applicant(tenant_id, applicant_id)
        result = await self._call("curp", self._provider.validate_curp(curp))
        await self._record_check(
            tenant_id, applicant_id, "curp", result.valid, {"curp": mask_identifier(result.curp)}
        )
        logger.info("kyc_curp_checked", curp=mask_identifier(result.curp), valid=result.valid)
        if not result.valid:
            return result

        await self._verification.verify(
            tenant_id,
            applicant_id,
            "curp",
            result.curp,
            VerificationMethod.RENAPO,
            metadata={
                "validation_code": result.validation_code,
                "curp_status": result.curp_status,
            },
        )
        confirmed = {
            "first_name": result.first_name,
            "last_name_1": result.last_name_1,
            "last_name_2": result.last_name_2,
            "birth_date": normalize_date(result.birth_date),
        }
        for field_name, value in confirmed.items():
            if value:
                await self._verification.verify(
                    tenant_id, applicant_id, field_name, value, VerificationMethod.RENAPO
                )

        await self._verification.update_kyc_status(tenant_id, applicant_id)
        return result

    async def validate_rfc(self, tenant_id: UUID, applicant_id: UUID, rfc: str) -> RfcValidation:
        await self._require_applicant(tenant_id, applicant_id)
        result = await self._call("rfc", self._provider.validate_rfc(rfc))
        await self._record_check(
            tenant_id, applicant_id, "rfc", result.valid, {"rfc": mask_identifier(result.rfc)}
        )
        if result.valid:
            await self._verification.verify(
                tenant_id,
                applicant_id,
                "rfc",
                result.rfc,
                VerificationMethod.SAT,
                metadata={
                    "validation_code": result.validation_code,
                    "person_type": result.person_type,
                },
            )
        return result

    async def validate_ine(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        front_image: str,
        back_image: str | None = None,
        validate_list: bool = True,
    ) -> IneValidation:
        """OCR the INE, lock the identity fields it shows and approve the INE documents."""
        await self._require_applicant(tenant_id, applicant_id)
        result = await self._call(
            "ine", self._provider.validate_ine(front_image, back_image, validate_list)
        )
        await self._record_check(
            tenant_id,
            applicant_id,
            "ine",
            result.is_valid,
            {"list_checked": result.list_checked, "list_valid": result.list_valid},
        )
        if not result.is_valid:
            return result

        ocr_data = result.ocr_data.model_dump()
        kyc_metadata = {
            "validation_code": result.validation_code,
            "list_validation_code": result.list_validation_code,
        }
        front = await self._documents.auto_approve_kyc(
            tenant_id, applicant_id, DocumentType.INE_FRONT, kyc_metadata
        )
        await self._verification.verify_ine_document(
            tenant_id, applicant_id, "front", front.id if front else uuid4(), ocr_data
        )
        back = await self._documents.auto_approve_kyc(
            tenant_id, applicant_id, DocumentType.INE_BACK, kyc_metadata
        )
        if back is not None:
            await self._verification.verify_ine_document(
                tenant_id, applicant_id, "back", back.id, ocr_data
            )

        if result.list_checked and result.list_valid:
            identifiers = {
                "ine_clave": result.ocr_data.clave_elector,
                "ine_cic": result.ocr_data.cic,
            }
            for field_name, value in identifiers.items():
                if value:
                    await self._verification.verify(
                        tenant_id,
                        applicant_id,
                        field_name,
                        value,
                        VerificationMethod.KYC_INE_LIST,
                        metadata={"validation_code": result.list_validation_code},
                    )

        await self._verification.update_kyc_status(tenant_id, applicant_id)
        return result

    async def face_match(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        selfie_image: str,
        ine_image: str,
        threshold: int | None = None,
    ) -> FaceMatchResult:
        await self._require_applicant(tenant_id, applicant_id)
        threshold = threshold or self._config.face_match_threshold
        result = await self._call(
            "face_match", self._provider.face_match(selfie_image, ine_image, threshold)
        )
        await self._record_check(
            tenant_id,
            applicant_id,
            "face_match",
            result.match,
            {"score": result.score, "threshold": result.threshold},
        )
        if not result.match:
            return result

        match_data = {
            "score": result.score,
            "threshold": result.threshold,
            "validation_code": result.validation_code,
        }
        await self._verification.verify(
            tenant_id,
            applicant_id,
            "face_match",
            "passed",
            VerificationMethod.KYC_FACE_MATCH,
            metadata=match_data,
        )
        selfie = await self._documents.auto_approve_kyc(
            tenant_id, applicant_id, DocumentType.SELFIE, match_data
        )
        if selfie is not None:
            await self._verification.verify_selfie_document(
                tenant_id, applicant_id, selfie.id, {**match_data, "match": result.match}
            )

        await self._verification.update_kyc_status(tenant_id, applicant_id)
        return result

    async def liveness(
        self, tenant_id: UUID, applicant_id: UUID, face_image: str
    ) -> LivenessResult:
        await self._require_applicant(tenant_id, applicant_id)
        result = await self._call("liveness", self._provider.liveness(face_image))
        await self._record_check(
            tenant_id, applicant_id, "liveness", result.passed, {"score": result.score}
        )
        if result.passed:
            await self._verification.verify(
                tenant_id,
                applicant_id,
                "liveness",
                "passed",
                VerificationMethod.KYC_LIVENESS,
                metadata={"score": result.score, "validation_code": result.validation_code},
            )
        return result

    async def check_ofac(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        name: str | None = None,
        similarity: int | None = None,
    ) -> BlocklistResult:
        applicant = await self._require_applicant(tenant_id, applicant_id)
        similarity = similarity or self._config.blocklist_similarity
        result = await self._call(
            "ofac",
            self._provider.check_ofac(self._screened_name(applicant, name), similarity),
        )
        await self._record_blocklist(tenant_id, applicant_id, "ofac", result)
        return result

    async def check_pld(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        name: str | None = None,
        curp: str | None = None,
        similarity: int | None = None,
    ) -> BlocklistResult:
        applicant = await self._require_applicant(tenant_id, applicant_id)
        similarity = similarity or self._config.blocklist_similarity
        result = await self._call(
            "pld",
            self._provider.check_pld(
                self._screened_name(applicant, name), curp or applicant.curp, similarity
            ),
        )
        await self._record_blocklist(tenant_id, applicant_id, "pld", result)
        return result

    async def record_otp(
        self, tenant_id: UUID, applicant_id: UUID, field_name: str, value: str
    ) -> None:
        """Record a phone or email confirmed by a one-time password."""
        if field_name not in OTP_FIELDS:
            raise InvalidOperationError(f"OTP verification is not available for {field_name}")
        await self._verification.verify(
            tenant_id,
            applicant_id,
            field_name,
            value,
            VerificationMethod.OTP,
            metadata={"channel": "sms" if field_name == "phone" else "email"},
        )
        KYC_CHECKS.labels(check="otp", outcome="passed").inc()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require_applicant(self, tenant_id: UUID, applicant_id: UUID) -> Applicant:
        applicant = await self._applicants.get(tenant_id, applicant_id)
        if applicant is None:
            raise ApplicantNotFoundError(f"Applicant {applicant_id} not found")
        return applicant

    async def _call(self, check: str, call: Awaitable[T]) -> T:
        try:
            with create_span(
                f"kyc.{check}",
                kind=SpanKind.CLIENT,
                attributes={"kyc.provider": self._provider.provider_name},
            ):
                return await call
        except KycProviderError as e:
            KYC_CHECKS.labels(check=check, outcome="error").inc()
            logger.error(
                "kyc_provider_error",
                check=check,
                provider=self._provider.provider_name,
                error=e.message,
                status_code=e.status_code,
            )
            raise

    @staticmethod
    def _screened_name(applicant: Applicant, name: str | None) -> str:
        screened = name or applicant.full_name
        if not screened:
            raise InvalidOperationError("A name is required for list screening")
        return screened

    async def _record_blocklist(
        self, tenant_id: UUID, applicant_id: UUID, check: str, result: BlocklistResult
    ) -> None:
        await self._record_check(
            tenant_id,
            applicant_id,
            check,
            not result.found,
            {"count": result.count, "warning": result.warning},
        )
        if result.found:
            logger.warning("kyc_blocklist_match", check=check, count=result.count)
            return

        method = VerificationMethod.KYC_OFAC if check == "ofac" else VerificationMethod.KYC_PLD
        await self._verification.verify(
            tenant_id,
            applicant_id,
            check,
            "clear",
            method,
            metadata={
                "checked_at": result.checked_at.isoformat(),
                "validation_code": result.validation_code,
                "warning": result.warning,
            },
        )

    async def _record_check(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        check: str,
        passed: bool,
        details: dict[str, Any],
    ) -> None:
        KYC_CHECKS.labels(check=check, outcome="passed" if passed else "failed").inc()
        await self._audit.save_event(
            AuditEvent(
                tenant_id=tenant_id,
                event_type=AuditEventType.KYC_CHECK,
                event_data={
                    "check": check,
                    "passed": passed,
                    "provider": self._provider.provider_name,
                    **details,
                },
                applicant_id=applicant_id,
            )
        )
