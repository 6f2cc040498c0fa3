"""Configuration model exports.

    from serviceregistry.config.models import LoggingConfig, StorageConfig
"""

from serviceregistry.config.models.metadata import (
    MetadataFieldDefinition,
    MetadataFieldsConfig,
)
from serviceregistry.config.models.observability import (
    LoggingConfig,
    ObservabilityConfig,
)
from serviceregistry.config.models.storage import (
    StorageConfig,
    StoreBackendConfig,
)

__all__ = [
    # Metadata
    "MetadataFieldDefinition",
    "MetadataFieldsConfig",
    # Observability
    "LoggingConfig",
    "ObservabilityConfig",
    # Storage
    "StorageConfig",
    "StoreBackendConfig",
]
