"""Registry configuration files.

``default.toml`` holds the shipped configuration and
``{SERVICEREGISTRY_ENV}.toml`` the overrides of one deployment; both live
in the config directory and are deep-merged in that order.

Metadata field definitions are tables keyed by connection type:

    [metadatafields.saml20_sp]
    "coin:no_consent_required" = { type = "boolean", default = false }

Connection types are spelled with hyphens elsewhere (``saml20-sp``), and
either spelling is accepted here. Each file's tables are stored under the
underscored key before merging, so an override written as
``[metadatafields."saml20-sp"]`` lands in the same table as the default.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from serviceregistry.config.proxy import ConfigurationError

CONFIG_DIR_VAR = "SERVICEREGISTRY_CONFIG_DIR"
ENVIRONMENT_VAR = "SERVICEREGISTRY_ENV"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_FILE = "default.toml"
METADATAFIELDS = "metadatafields"


def connection_type_key(connection_type: str) -> str:
    """Key of a connection type's table under ``metadatafields``."""
    return connection_type.replace("-", "_")


def get_config_dir() -> Path:
    """Locate the config directory.

    ``SERVICEREGISTRY_CONFIG_DIR`` wins when set. Otherwise the nearest
    ``config/`` holding a ``default.toml``, searching upwards from the
    working directory.
    """
    override = os.environ.get(CONFIG_DIR_VAR)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"{CONFIG_DIR_VAR} points to a missing directory: {override}")
        return path

    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / "config"
        if (candidate / DEFAULT_FILE).is_file():
            return candidate
    return Path("config")


def get_environment() -> str:
    """Deployment name from ``SERVICEREGISTRY_ENV``, ``development`` by default."""
    return os.environ.get(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Read one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base; tables merge recursively, values replace.

    Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def normalize_metadatafields(config: dict[str, Any]) -> dict[str, Any]:
    """Re-key the ``metadatafields`` tables by underscored connection type.

    Two spellings of one connection type in the same file are merged.

    Raises:
        ConfigurationError: If ``metadatafields`` or one of its connection
            type entries is not a table
    """
    sections = config.get(METADATAFIELDS)
    if sections is None:
        return config
    if not isinstance(sections, dict):
        raise ConfigurationError(f"The option {METADATAFIELDS!r} must be a table.")

    normalized: dict[str, Any] = {}
    for connection_type, fields in sections.items():
        if not isinstance(fields, dict):
            raise ConfigurationError(
                f"The option '{METADATAFIELDS}.{connection_type}' must be a table "
                "of field definitions."
            )
        key = connection_type_key(connection_type)
        normalized[key] = deep_merge(normalized.get(key, {}), fields)
    return {**config, METADATAFIELDS: normalized}


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Load and merge ``default.toml`` and the environment's overrides.

    Args:
        config_dir: Directory to read from, see get_config_dir()
        environment: Override file to apply, see get_environment()

    Raises:
        FileNotFoundError: If the directory has no ``default.toml``
        ConfigurationError: If a ``metadatafields`` entry is malformed
    """
    config_dir = config_dir or get_config_dir()
    environment = environment or get_environment()

    default_path = config_dir / DEFAULT_FILE
    if not default_path.is_file():
        raise FileNotFoundError(
            f"No {DEFAULT_FILE} in {config_dir}. "
            f"Set {CONFIG_DIR_VAR} to the registry's config directory."
        )
    config = normalize_metadatafields(load_toml(default_path))

    environment_path = config_dir / f"{environment}.toml"
    if environment_path.is_file():
        config = deep_merge(config, normalize_metadatafields(load_toml(environment_path)))
    return config
