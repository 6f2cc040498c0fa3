"""Root settings model for service registry configuration."""

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from serviceregistry.config.loader import connection_type_key
from serviceregistry.config.models.metadata import MetadataFieldsConfig
from serviceregistry.config.models.observability import ObservabilityConfig
from serviceregistry.config.models.storage import StorageConfig
from serviceregistry.config.proxy import ConfigProxy

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Module-level variable to store TOML config for settings source
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that reads from TOML configuration."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        """Get field value from TOML config."""
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        """Return the TOML config values."""
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object containing all nested configuration sections.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{SERVICEREGISTRY_ENV}.toml (environment overrides)
    4. SERVICEREGISTRY_* environment variables (runtime overrides)
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVICEREGISTRY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="serviceregistry", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel = Field(default="INFO", description="Logging level")

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Storage backend configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )
    metadatafields: MetadataFieldsConfig = Field(
        default_factory=dict,
        description="Metadata field definitions per connection type",
    )

    @field_validator("metadatafields", mode="before")
    @classmethod
    def normalize_connection_types(cls, value: Any) -> Any:
        """Store connection type sections under underscored names.

        Values from environment variables skip the TOML loader and may spell
        a section `saml20-idp`; lookups through ConfigProxy always use
        `saml20_idp`.
        """
        if not isinstance(value, dict):
            return value
        return {connection_type_key(str(key)): fields for key, fields in value.items()}

    def config_proxy(self) -> ConfigProxy:
        """Wrap these settings in a ConfigProxy for dotted-path lookups."""
        return ConfigProxy(self.model_dump())

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include TOML config.

        Priority order (highest to lowest):
        1. init_settings (constructor arguments)
        2. env_settings (SERVICEREGISTRY_* environment variables)
        3. toml_settings (config/*.toml files)
        4. (defaults from model)
        """
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
