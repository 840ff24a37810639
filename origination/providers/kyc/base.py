"""KycProvider abstract interface and result models."""

import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

CURP_PATTERN = re.compile(r"^[A-Z]{4}[0-9]{6}[HM][A-Z]{2}[A-Z]{3}[A-Z0-9][0-9]$", re.IGNORECASE)
RFC_PERSON_PATTERN = re.compile(r"^[A-Z]{4}[0-9]{6}[A-Z0-9]{3}$", re.IGNORECASE)
RFC_COMPANY_PATTERN = re.compile(r"^[A-Z]{3}[0-9]{6}[A-Z0-9]{3}$", re.IGNORECASE)


def is_valid_curp_format(curp: str) -> bool:
    return bool(CURP_PATTERN.match(curp))


def is_valid_rfc_format(rfc: str) -> bool:
    """13 characters for natural persons, 12 for companies."""
    if len(rfc) == 13:
        return bool(RFC_PERSON_PATTERN.match(rfc))
    if len(rfc) == 12:
        return bool(RFC_COMPANY_PATTERN.match(rfc))
    return False


class KycProviderError(Exception):
    """Base exception for KYC provider failures."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code


class KycAuthenticationError(KycProviderError):
    """Raised when the provider rejects our credentials."""


class KycUnavailableError(KycProviderError):
    """Raised when the provider cannot be reached or times out."""


class CurpValidation(BaseModel):
    """RENAPO CURP lookup result."""

    valid: bool
    curp: str
    first_name: str | None = None
    last_name_1: str | None = None
    last_name_2: str | None = None
    birth_date: str | None = Field(default=None, description="As returned, usually dd/mm/YYYY")
    gender: str | None = None
    birth_state: str | None = None
    curp_status: str | None = None
    validation_code: str | None = None
    error: str | None = None
    error_code: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)


class RfcValidation(BaseModel):
    """SAT RFC lookup result."""

    valid: bool
    rfc: str
    person_type: str | None = Field(default=None, description="F (natural) or M (company)")
    message: str | None = None
    validation_code: str | None = None
    error: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)


class IneOcrData(BaseModel):
    """Fields read from an INE credential.

    Keys follow the provider's Spanish naming since they are stored as
    document metadata verbatim.
    """

    tipo: str | None = None
    subtipo: str | None = None
    clave_elector: str | None = None
    curp: str | None = None
    nombres: str | None = None
    apellido_paterno: str | None = None
    apellido_materno: str | None = None
    fecha_nacimiento: str | None = None
    sexo: str | None = None
    ocr: str | None = None
    cic: str | None = None
    identificador_ciudadano: str | None = None
    numero_emision: str | None = None
    emision: str | None = None
    vigencia: str | None = None


class IneValidation(BaseModel):
    """OCR extraction plus, optionally, the nominal-list check."""

    ocr_data: IneOcrData
    validation_code: str | None = None
    list_checked: bool = False
    list_valid: bool | None = None
    list_message: str | None = None
    list_validation_code: str | None = None

    @property
    def is_valid(self) -> bool:
        """OCR succeeded and, when checked, the credential is on the nominal list."""
        return not self.list_checked or bool(self.list_valid)


class FaceMatchResult(BaseModel):
    match: bool
    score: float
    threshold: int
    message_code: int | None = None
    validation_code: str | None = None
    message: str | None = None


class LivenessResult(BaseModel):
    passed: bool
    score: float = Field(..., description="Normalized to 0-100")
    message_code: int | None = None
    validation_code: str | None = None
    message: str | None = None


class BlocklistResult(BaseModel):
    """OFAC or PLD list query result."""

    found: bool
    matches: list[dict[str, Any]] = Field(default_factory=list)
    count: int = 0
    validation_code: str | None = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    warning: str | None = Field(default=None, description="Set when the list service was unavailable")


class KycProvider(ABC):
    """Abstract interface for identity and compliance checks."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name for logging and metrics."""
        pass

    @abstractmethod
    async def validate_curp(self, curp: str) -> CurpValidation:
        """Look up a CURP in RENAPO."""
        pass

    @abstractmethod
    async def validate_rfc(self, rfc: str) -> RfcValidation:
        """Look up an RFC in SAT."""
        pass

    @abstractmethod
    async def validate_ine(
        self,
        front_image: str,
        back_image: str | None = None,
        validate_list: bool = True,
    ) -> IneValidation:
        """Read an INE by OCR and optionally check it against the nominal list.

        Images are base64-encoded.
        """
        pass

    @abstractmethod
    async def face_match(
        self, selfie_image: str, ine_image: str, threshold: int = 80
    ) -> FaceMatchResult:
        """Compare a selfie with the INE photo."""
        pass

    @abstractmethod
    async def liveness(self, face_image: str) -> LivenessResult:
        """Check that a selfie shows a live person."""
        pass

    @abstractmethod
    async def check_ofac(self, name: str, similarity: int = 80) -> BlocklistResult:
        """Query the OFAC sanctions list."""
        pass

    @abstractmethod
    async def check_pld(
        self, full_name: str, curp: str | None = None, similarity: int = 80
    ) -> BlocklistResult:
        """Query Mexican anti money laundering (PLD) blacklists."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
