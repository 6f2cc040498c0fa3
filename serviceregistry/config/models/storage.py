"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]


class StoreBackendConfig(BaseModel):
    """Configuration for a single store backend."""

    backend: BackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    connection_url: str | None = Field(
        default=None,
        description="Connection URL (from env var)",
    )
    pool_size: int = Field(
        default=10,
        gt=0,
        description="Connection pool size",
    )


class StorageConfig(BaseModel):
    """Storage configuration for the revision store."""

    revisions: StoreBackendConfig = Field(
        default_factory=StoreBackendConfig,
        description="Connection and revision storage",
    )
