"""Configuration model exports.

    from origination.config.models import APIConfig, StorageConfig
"""

from origination.config.models.api import APIConfig
from origination.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from origination.config.models.providers import (
    KycProviderConfig,
    NubariumConfig,
    ProvidersConfig,
)
from origination.config.models.storage import PostgresConfig, StorageConfig
from origination.config.models.verification import VerificationConfig

__all__ = [
    "APIConfig",
    "KycProviderConfig",
    "LoggingConfig",
    "MetricsConfig",
    "NubariumConfig",
    "ObservabilityConfig",
    "PostgresConfig",
    "ProvidersConfig",
    "StorageConfig",
    "TracingConfig",
    "VerificationConfig",
]
