"""Enums for the applicant domain."""

from enum import Enum


class KycStatus(str, Enum):
    """Overall identity verification state of an applicant."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class IdentificationType(str, Enum):
    """Official identifiers kept alongside the applicant."""

    CURP = "CURP"
    RFC = "RFC"
    INE = "INE"


class IdentificationStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class EmploymentType(str, Enum):
    """Employment category with its display label."""

    EMPLOYEE = "EMPLOYEE"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    BUSINESS_OWNER = "BUSINESS_OWNER"
    RETIRED = "RETIRED"
    STUDENT = "STUDENT"
    HOMEMAKER = "HOMEMAKER"
    UNEMPLOYED = "UNEMPLOYED"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return {
            EmploymentType.EMPLOYEE: "Empleado",
            EmploymentType.SELF_EMPLOYED: "Trabajador Independiente",
            EmploymentType.BUSINESS_OWNER: "Empresario",
            EmploymentType.RETIRED: "Pensionado",
            EmploymentType.STUDENT: "Estudiante",
            EmploymentType.HOMEMAKER: "Hogar",
            EmploymentType.UNEMPLOYED: "Desempleado",
            EmploymentType.OTHER: "Otro",
        }[self]
