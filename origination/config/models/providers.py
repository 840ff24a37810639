"""KYC provider configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

KycProviderType = Literal["mock", "nubarium"]


class NubariumConfig(BaseModel):
    """Nubarium API endpoints and timeouts.

    Credentials come from ORIGINATION_NUBARIUM_USERNAME and
    ORIGINATION_NUBARIUM_PASSWORD, never from TOML.
    """

    auth_url: str = Field(
        default="https://api.nubarium.com", description="JWT issuing endpoint"
    )
    curp_url: str = Field(
        default="https://curp.nubarium.com", description="RENAPO CURP service"
    )
    sat_url: str = Field(default="https://sat.nubarium.com", description="SAT RFC service")
    ocr_url: str = Field(default="https://ocr.nubarium.com", description="INE OCR service")
    ine_url: str = Field(
        default="https://ine.nubarium.com", description="INE nominal list service"
    )
    global_url: str = Field(
        default="https://api.nubarium.com",
        description="Biometrics and compliance services",
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    biometrics_timeout: float = Field(
        default=60.0, gt=0, description="Timeout for OCR and biometric calls"
    )


class KycProviderConfig(BaseModel):
    """KYC provider selection."""

    provider: KycProviderType = Field(default="mock", description="Provider backend")
    nubarium: NubariumConfig = Field(
        default_factory=NubariumConfig, description="Nubarium settings"
    )


class ProvidersConfig(BaseModel):
    """External provider configuration."""

    kyc: KycProviderConfig = Field(
        default_factory=KycProviderConfig, description="KYC provider"
    )
