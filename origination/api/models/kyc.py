"""Request models for applicant KYC checks.

Images are base64 strings as captured by the client.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from origination.providers.kyc.base import is_valid_curp_format, is_valid_rfc_format


class CurpRequest(BaseModel):
    curp: str = Field(..., min_length=18, max_length=18)

    @field_validator("curp")
    @classmethod
    def check_curp(cls, v: str) -> str:
        v = v.strip().upper()
        if not is_valid_curp_format(v):
            raise ValueError("Invalid CURP format")
        return v


class RfcRequest(BaseModel):
    rfc: str = Field(..., min_length=12, max_length=13)

    @field_validator("rfc")
    @classmethod
    def check_rfc(cls, v: str) -> str:
        v = v.strip().upper()
        if not is_valid_rfc_format(v):
            raise ValueError("Invalid RFC format")
        return v


class IneRequest(BaseModel):
    front_image: str = Field(..., min_length=1, description="Base64 front of the INE")
    back_image: str | None = Field(default=None, description="Base64 back of the INE")
    validate_list: bool = Field(default=True, description="Also check the INE nominal list")


class FaceMatchRequest(BaseModel):
    selfie_image: str = Field(..., min_length=1)
    ine_image: str = Field(..., min_length=1)
    threshold: int | None = Field(default=None, ge=0, le=100)


class LivenessRequest(BaseModel):
    face_image: str = Field(..., min_length=1)


class BlocklistRequest(BaseModel):
    name: str | None = Field(default=None, description="Defaults to the applicant's full name")
    similarity: int | None = Field(default=None, ge=0, le=100)


class OtpConfirmation(BaseModel):
    """A phone or email already confirmed by a one-time password."""

    field_name: Literal["phone", "email"]
    value: str = Field(..., min_length=3, max_length=255)
