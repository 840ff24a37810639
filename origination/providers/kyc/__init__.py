"""KYC providers: identity registries, biometrics and compliance lists."""

from origination.config.models.providers import KycProviderConfig
from origination.providers.kyc.base import (
    BlocklistResult,
    CurpValidation,
    FaceMatchResult,
    IneOcrData,
    IneValidation,
    KycAuthenticationError,
    KycProvider,
    KycProviderError,
    KycUnavailableError,
    LivenessResult,
    RfcValidation,
)
from origination.providers.kyc.mock import MockKycProvider
from origination.providers.kyc.nubarium import NubariumKycProvider


def create_kyc_provider(config: KycProviderConfig) -> KycProvider:
    """Create the configured KYC provider."""
    if config.provider == "nubarium":
        return NubariumKycProvider(config.nubarium)
    return MockKycProvider()


__all__ = [
    "BlocklistResult",
    "CurpValidation",
    "FaceMatchResult",
    "IneOcrData",
    "IneValidation",
    "KycAuthenticationError",
    "KycProvider",
    "KycProviderError",
    "KycUnavailableError",
    "LivenessResult",
    "MockKycProvider",
    "NubariumKycProvider",
    "RfcValidation",
    "create_kyc_provider",
]
