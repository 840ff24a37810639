"""Enums for the application domain."""

from enum import Enum


class ApplicationStatus(str, Enum):
    """Lifecycle status of a loan application."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    DOCS_PENDING = "DOCS_PENDING"
    CORRECTIONS_PENDING = "CORRECTIONS_PENDING"
    COUNTER_OFFERED = "COUNTER_OFFERED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    DISBURSED = "DISBURSED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DEFAULT = "DEFAULT"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_final(self) -> bool:
        return self in (
            ApplicationStatus.REJECTED,
            ApplicationStatus.CANCELLED,
            ApplicationStatus.COMPLETED,
            ApplicationStatus.DEFAULT,
        )


_STATUS_LABELS: dict[ApplicationStatus, str] = {
    ApplicationStatus.DRAFT: "Borrador",
    ApplicationStatus.SUBMITTED: "Enviada",
    ApplicationStatus.IN_REVIEW: "En revisión",
    ApplicationStatus.DOCS_PENDING: "Documentos pendientes",
    ApplicationStatus.CORRECTIONS_PENDING: "Correcciones pendientes",
    ApplicationStatus.COUNTER_OFFERED: "Contraoferta",
    ApplicationStatus.APPROVED: "Aprobada",
    ApplicationStatus.REJECTED: "Rechazada",
    ApplicationStatus.CANCELLED: "Cancelada",
    ApplicationStatus.DISBURSED: "Desembolsada",
    ApplicationStatus.ACTIVE: "Activa",
    ApplicationStatus.COMPLETED: "Completada",
    ApplicationStatus.DEFAULT: "En mora",
}


class ChecklistStatus(str, Enum):
    """Staff review state of one field on an application's checklist."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    CORRECTED = "CORRECTED"


class ReviewAction(str, Enum):
    VERIFY = "verify"
    REJECT = "reject"
    UNVERIFY = "unverify"


class ActorType(str, Enum):
    STAFF = "staff"
    APPLICANT = "applicant"
    SYSTEM = "system"


class TimelineEvent(str, Enum):
    """Non-status entries recorded on the application timeline."""

    DATA_VERIFICATION = "DATA_VERIFICATION"
    DATA_CORRECTED = "DATA_CORRECTED"
    DOCUMENT_REVIEW = "DOCUMENT_REVIEW"


class PaymentFrequency(str, Enum):
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"


class RejectionReason(str, Enum):
    """Reasons staff give when rejecting an application."""

    SCORE_BAJO = "SCORE_BAJO"
    INGRESOS_INSUFICIENTES = "INGRESOS_INSUFICIENTES"
    HISTORIAL_NEGATIVO = "HISTORIAL_NEGATIVO"
    DOCUMENTACION_FALSA = "DOCUMENTACION_FALSA"
    REFERENCIAS_NO_VERIFICADAS = "REFERENCIAS_NO_VERIFICADAS"
    SOBREENDEUDAMIENTO = "SOBREENDEUDAMIENTO"
    POLITICAS_INTERNAS = "POLITICAS_INTERNAS"
    OTRO = "OTRO"

    @property
    def label(self) -> str:
        return {
            RejectionReason.SCORE_BAJO: "Score crediticio bajo",
            RejectionReason.INGRESOS_INSUFICIENTES: "Ingresos insuficientes",
            RejectionReason.HISTORIAL_NEGATIVO: "Historial crediticio negativo",
            RejectionReason.DOCUMENTACION_FALSA: "Documentación falsa o inconsistente",
            RejectionReason.REFERENCIAS_NO_VERIFICADAS: "Referencias no verificadas",
            RejectionReason.SOBREENDEUDAMIENTO: "Sobreendeudamiento",
            RejectionReason.POLITICAS_INTERNAS: "No cumple políticas internas",
            RejectionReason.OTRO: "Otro motivo",
        }[self]
