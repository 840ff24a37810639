"""Enums for the verification ledger."""

from enum import Enum, IntEnum


class VerificationTier(IntEnum):
    """Precedence of verification sources, lowest to highest.

    A locked ledger value can only be replaced by a source of a higher
    tier (or refreshed by an official registry).
    """

    SELF_REPORTED = 0
    OTP = 1
    THIRD_PARTY = 2
    GOVERNMENT_REGISTRY = 3
    BIOMETRIC = 4


class VerificationMethod(str, Enum):
    """How a field value was verified."""

    MANUAL = "MANUAL"
    OTP = "OTP"
    API = "API"
    DOCUMENT = "DOCUMENT"
    BUREAU = "BUREAU"
    KYC_INE_OCR = "KYC_INE_OCR"
    KYC_INE_LIST = "KYC_INE_LIST"
    KYC_CURP_RENAPO = "KYC_CURP_RENAPO"
    KYC_RFC_SAT = "KYC_RFC_SAT"
    RENAPO = "RENAPO"
    SAT = "SAT"
    KYC_FACE_MATCH = "KYC_FACE_MATCH"
    KYC_LIVENESS = "KYC_LIVENESS"
    KYC_OFAC = "KYC_OFAC"
    KYC_PLD = "KYC_PLD"
    NUBARIUM = "NUBARIUM"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]

    @property
    def tier(self) -> VerificationTier:
        return _METHOD_TIERS[self]

    @property
    def is_automated(self) -> bool:
        """Automated sources lock the field they verify."""
        return self not in (VerificationMethod.MANUAL, VerificationMethod.DOCUMENT)

    @property
    def is_official_source(self) -> bool:
        """Government registries (RENAPO, SAT) may refresh a locked value."""
        return self in _OFFICIAL_SOURCES


_METHOD_LABELS: dict[VerificationMethod, str] = {
    VerificationMethod.MANUAL: "Manual",
    VerificationMethod.OTP: "OTP",
    VerificationMethod.API: "API",
    VerificationMethod.DOCUMENT: "Documento",
    VerificationMethod.BUREAU: "Buró de crédito",
    VerificationMethod.KYC_INE_OCR: "OCR de INE",
    VerificationMethod.KYC_INE_LIST: "Lista Nominal INE",
    VerificationMethod.KYC_CURP_RENAPO: "CURP RENAPO",
    VerificationMethod.KYC_RFC_SAT: "RFC SAT",
    VerificationMethod.RENAPO: "RENAPO",
    VerificationMethod.SAT: "SAT",
    VerificationMethod.KYC_FACE_MATCH: "Reconocimiento facial",
    VerificationMethod.KYC_LIVENESS: "Prueba de vida",
    VerificationMethod.KYC_OFAC: "Lista OFAC",
    VerificationMethod.KYC_PLD: "Listas PLD",
    VerificationMethod.NUBARIUM: "Nubarium",
}

_METHOD_TIERS: dict[VerificationMethod, VerificationTier] = {
    VerificationMethod.MANUAL: VerificationTier.SELF_REPORTED,
    VerificationMethod.DOCUMENT: VerificationTier.SELF_REPORTED,
    VerificationMethod.OTP: VerificationTier.OTP,
    VerificationMethod.API: VerificationTier.THIRD_PARTY,
    VerificationMethod.BUREAU: VerificationTier.THIRD_PARTY,
    VerificationMethod.NUBARIUM: VerificationTier.THIRD_PARTY,
    VerificationMethod.KYC_INE_OCR: VerificationTier.THIRD_PARTY,
    VerificationMethod.KYC_INE_LIST: VerificationTier.THIRD_PARTY,
    VerificationMethod.KYC_OFAC: VerificationTier.THIRD_PARTY,
    VerificationMethod.KYC_PLD: VerificationTier.THIRD_PARTY,
    VerificationMethod.RENAPO: VerificationTier.GOVERNMENT_REGISTRY,
    VerificationMethod.KYC_CURP_RENAPO: VerificationTier.GOVERNMENT_REGISTRY,
    VerificationMethod.SAT: VerificationTier.GOVERNMENT_REGISTRY,
    VerificationMethod.KYC_RFC_SAT: VerificationTier.GOVERNMENT_REGISTRY,
    VerificationMethod.KYC_FACE_MATCH: VerificationTier.BIOMETRIC,
    VerificationMethod.KYC_LIVENESS: VerificationTier.BIOMETRIC,
}

_OFFICIAL_SOURCES = frozenset({
    VerificationMethod.RENAPO,
    VerificationMethod.KYC_CURP_RENAPO,
    VerificationMethod.SAT,
    VerificationMethod.KYC_RFC_SAT,
})


class VerificationStatus(str, Enum):
    """Lifecycle of a single ledger record."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    CORRECTED = "CORRECTED"

    @property
    def label(self) -> str:
        return {
            VerificationStatus.PENDING: "Pendiente",
            VerificationStatus.VERIFIED: "Verificado",
            VerificationStatus.REJECTED: "Rechazado",
            VerificationStatus.CORRECTED: "Corregido",
        }[self]
