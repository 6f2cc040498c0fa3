"""Typed, dotted-path access to nested configuration mappings.

Metadata field definitions and other registry options live in nested
dictionaries (loaded from TOML or dumped from Settings). ConfigProxy
gives them a small typed lookup API:

    proxy = ConfigProxy({"metadatafields": {"saml20_idp": {...}}})
    fields = proxy.get_array("metadatafields.saml20-idp")
"""

from typing import Any


class ConfigurationError(Exception):
    """Raised when a configuration option is missing or has the wrong type."""


class _RequiredOption:
    """Sentinel marking an option as required."""

    def __repr__(self) -> str:
        return "REQUIRED_OPTION"


REQUIRED_OPTION: Any = _RequiredOption()


def _is_default(value: Any, default: Any) -> bool:
    return value is default or (type(value) is type(default) and value == default)


class ConfigProxy:
    """Read-only view over a nested configuration dictionary."""

    separator = "."

    def __init__(self, configuration: dict[str, Any]) -> None:
        self._configuration = configuration

    def get_value(self, name: str, default: Any = None) -> Any:
        """Retrieve an option by dotted path.

        Hyphens in the path are treated as underscores, since settings keys
        cannot contain hyphens.

        Args:
            name: Dotted path of the option, e.g. ``metadatafields.saml20-idp``
            default: Value returned when the option is missing. Pass
                REQUIRED_OPTION to raise instead.

        Raises:
            ConfigurationError: If the option is missing and required
        """
        name = name.replace("-", "_")
        value = self._get_nested_value(name)

        if value is not None:
            return value

        if default is REQUIRED_OPTION:
            raise ConfigurationError(f"Could not retrieve the required option {name!r}")

        return default

    def has_value(self, name: str) -> bool:
        """Check whether an option exists (and is not None)."""
        return self.get_value(name) is not None

    def get_string(self, name: str, default: Any = REQUIRED_OPTION) -> Any:
        """Retrieve a string option."""
        value = self.get_value(name, default)
        if _is_default(value, default):
            return value
        if not isinstance(value, str):
            raise ConfigurationError(f"The option {name!r} is not a valid string value.")
        return value

    def get_boolean(self, name: str, default: Any = REQUIRED_OPTION) -> Any:
        """Retrieve a boolean option."""
        value = self.get_value(name, default)
        if _is_default(value, default):
            return value
        if not isinstance(value, bool):
            raise ConfigurationError(f"The option {name!r} is not a valid boolean value.")
        return value

    def get_integer(self, name: str, default: Any = REQUIRED_OPTION) -> Any:
        """Retrieve an integer option. Booleans are rejected."""
        value = self.get_value(name, default)
        if _is_default(value, default):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"The option {name!r} is not a valid integer value.")
        return value

    def get_array(self, name: str, default: Any = REQUIRED_OPTION) -> Any:
        """Retrieve a list or mapping option."""
        value = self.get_value(name, default)
        if _is_default(value, default):
            return value
        if not isinstance(value, (list, dict)):
            raise ConfigurationError(f"The option {name!r} is not an array.")
        return value

    def _get_nested_value(self, path: str) -> Any:
        haystack: Any = self._configuration
        for part in path.split(self.separator):
            if not isinstance(haystack, dict) or part not in haystack:
                return None
            haystack = haystack[part]
        return haystack
