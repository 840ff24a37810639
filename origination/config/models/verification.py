"""Verification and review workflow configuration."""

from pydantic import BaseModel, Field


class VerificationConfig(BaseModel):
    """Rules for the verification ledger and application review."""

    critical_kyc_fields: list[str] = Field(
        default=["curp", "first_name", "last_name_1", "birth_date"],
        description="Fields that must be verified before KYC is complete",
    )
    face_match_threshold: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Minimum similarity score for a face match",
    )
    blocklist_similarity: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Name similarity used for OFAC and PLD list queries",
    )
    stale_after_hours: int = Field(
        default=8,
        gt=0,
        description="Hours without activity before an active application is stale",
    )
    folio_prefix: str = Field(
        default="SOL",
        min_length=1,
        description="Prefix for generated application folios",
    )
