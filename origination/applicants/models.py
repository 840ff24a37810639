"""Applicant domain models.

An applicant is the person behind one or more loan applications. The
fields here are the values the verification ledger verifies and that
corrections overwrite.
"""

from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from origination.applicants.enums import (
    EmploymentType,
    IdentificationStatus,
    IdentificationType,
    KycStatus,
)
from origination.errors import InvalidOperationError
from origination.verification.fields import NAME_FIELDS
from origination.verification.models import normalize_date

# Ledger address component -> Address attribute
ADDRESS_COMPONENTS: dict[str, str] = {
    "street": "street",
    "exterior_number": "ext_number",
    "interior_number": "int_number",
    "colony": "neighborhood",
    "city": "city",
    "state": "state",
    "postal_code": "postal_code",
}


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def _parse_birth_date(value: Any) -> Any:
    """Accept ISO or dd/mm/YYYY strings; other values go to model validation."""
    if not isinstance(value, str):
        return value
    try:
        return date.fromisoformat(normalize_date(value.strip())[:10])
    except ValueError as e:
        raise InvalidOperationError(f"Invalid birth date '{value}'") from e


class Identification(BaseModel):
    """An official identifier and its verification state."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    type: IdentificationType = Field(..., description="Identifier kind")
    value: str | None = Field(default=None, description="Identifier value")
    status: IdentificationStatus = Field(
        default=IdentificationStatus.PENDING, description="Verification state"
    )
    verified_at: datetime | None = Field(default=None, description="Verification time")
    verification_method: str | None = Field(default=None, description="How verified")


class Address(BaseModel):
    """Current home address."""

    model_config = ConfigDict(frozen=False, validate_assignment=True, extra="ignore")

    street: str | None = None
    ext_number: str | None = None
    int_number: str | None = None
    neighborhood: str | None = None
    postal_code: str | None = None
    municipality: str | None = None
    city: str | None = None
    state: str | None = None
    housing_type: str | None = None
    years_at_address: int = 0
    months_at_address: int = 0


class Employment(BaseModel):
    """Current employment."""

    model_config = ConfigDict(frozen=False, validate_assignment=True, extra="ignore")

    type: EmploymentType | None = None
    company_name: str | None = None
    position: str | None = None
    monthly_income: float | None = Field(default=None, ge=0)
    seniority_years: int = Field(default=0, ge=0)
    seniority_months: int = Field(default=0, ge=0, le=11)


class Applicant(BaseModel):
    """A loan applicant (natural person)."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    tenant_id: UUID = Field(..., description="Owning tenant")
    first_name: str | None = Field(default=None, description="Given names")
    last_name_1: str | None = Field(default=None, description="Paternal surname")
    last_name_2: str | None = Field(default=None, description="Maternal surname")
    birth_date: date | None = Field(default=None, description="Date of birth")
    gender: str | None = Field(default=None, description="H or M as printed on the CURP")
    nationality: str | None = Field(default=None, description="Nationality")
    phone: str | None = Field(default=None, description="Mobile phone")
    email: str | None = Field(default=None, description="Email address")
    phone_verified_at: datetime | None = Field(default=None, description="Phone OTP time")
    email_verified_at: datetime | None = Field(default=None, description="Email OTP time")
    address: Address | None = Field(default=None, description="Current home address")
    employment: Employment | None = Field(default=None, description="Current employment")
    identifications: dict[IdentificationType, Identification] = Field(
        default_factory=dict, description="Official identifiers by type"
    )
    kyc_status: KycStatus = Field(default=KycStatus.PENDING, description="KYC state")
    kyc_verified_at: datetime | None = Field(default=None, description="KYC completion time")
    kyc_verified_by: str | None = Field(default=None, description="Who completed KYC")
    kyc_data: dict[str, Any] = Field(default_factory=dict, description="Provider payloads")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name_1, self.last_name_2) if p)

    @property
    def curp(self) -> str | None:
        return self.identification_value(IdentificationType.CURP)

    @property
    def rfc(self) -> str | None:
        return self.identification_value(IdentificationType.RFC)

    @property
    def ine_clave(self) -> str | None:
        return self.identification_value(IdentificationType.INE)

    def identification_value(self, id_type: IdentificationType) -> str | None:
        ident = self.identifications.get(id_type)
        return ident.value if ident else None

    def set_identification(self, id_type: IdentificationType, value: str | None) -> Identification:
        """Store a new identifier value; a changed value needs verifying again."""
        value = value.strip().upper() if value else None
        ident = self.identifications.get(id_type)
        if ident is None:
            ident = Identification(type=id_type, value=value)
            self.identifications = {**self.identifications, id_type: ident}
        elif ident.value != value:
            ident.value = value
            ident.status = IdentificationStatus.PENDING
            ident.verified_at = None
            ident.verification_method = None
        return ident

    def get_field_value(self, field_name: str) -> Any:
        """Current value of a correctable field.

        Name fields return all three name parts; address and employment
        return dicts.
        """
        if field_name in NAME_FIELDS:
            return {
                "first_name": self.first_name,
                "last_name_1": self.last_name_1,
                "last_name_2": self.last_name_2,
            }
        if field_name == "curp":
            return self.curp
        if field_name == "rfc":
            return self.rfc
        if field_name in ("ine_clave", "ine"):
            return self.ine_clave
        if field_name == "birth_date":
            return self.birth_date.isoformat() if self.birth_date else None
        if field_name in ("phone", "email", "gender", "nationality"):
            return getattr(self, field_name)
        if field_name == "address":
            return self.address.model_dump(mode="json") if self.address else None
        if field_name in ADDRESS_COMPONENTS:
            return getattr(self.address, ADDRESS_COMPONENTS[field_name]) if self.address else None
        if field_name == "employment":
            return self.employment.model_dump(mode="json") if self.employment else None
        return None

    def set_field_value(self, field_name: str, value: Any) -> None:
        """Overwrite a correctable field with applicant-supplied data."""
        if field_name in NAME_FIELDS:
            if isinstance(value, dict):
                for name_part in NAME_FIELDS:
                    if value.get(name_part) is not None:
                        setattr(self, name_part, value[name_part])
            else:
                setattr(self, field_name, value)
        elif field_name == "curp":
            self.set_identification(IdentificationType.CURP, value)
        elif field_name == "rfc":
            self.set_identification(IdentificationType.RFC, value)
        elif field_name in ("ine_clave", "ine"):
            self.set_identification(IdentificationType.INE, value)
        elif field_name == "birth_date":
            self.birth_date = _parse_birth_date(value)
        elif field_name == "phone":
            self.phone = value
            self.phone_verified_at = None
        elif field_name == "email":
            self.email = value
            self.email_verified_at = None
        elif field_name in ("gender", "nationality"):
            setattr(self, field_name, value)
        elif field_name == "address":
            self._update_address(value)
        elif field_name in ADDRESS_COMPONENTS:
            self._update_address({ADDRESS_COMPONENTS[field_name]: value})
        elif field_name == "employment":
            self._update_employment(value)
        else:
            raise InvalidOperationError(f"Field '{field_name}' cannot be corrected")
        self.updated_at = utc_now()

    def _update_address(self, value: Any) -> None:
        if not isinstance(value, dict):
            raise InvalidOperationError("Address correction must be an object")
        current = self.address.model_dump() if self.address else {}
        current.update({k: v for k, v in value.items() if v is not None})
        self.address = Address.model_validate(current)

    def _update_employment(self, value: Any) -> None:
        if not isinstance(value, dict):
            raise InvalidOperationError("Employment correction must be an object")
        current = self.employment.model_dump() if self.employment else {}
        for key in ("type", "company_name", "position", "monthly_income"):
            if value.get(key) is not None:
                current[key] = value[key]

        if value.get("seniority_years") is not None:
            current["seniority_years"] = int(value["seniority_years"])
            if value.get("seniority_months") is not None:
                current["seniority_months"] = int(value["seniority_months"])
        elif value.get("seniority_months") is not None:
            # Older clients send total months without years
            total_months = int(value["seniority_months"])
            current["seniority_years"], current["seniority_months"] = divmod(total_months, 12)

        self.employment = Employment.model_validate(current)
