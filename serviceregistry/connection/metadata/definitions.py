"""Sources of declared metadata field types.

The casting assembler asks a TypeDefinitionSource for the type of each
metadata field of a connection type. The registry's own source reads the
``metadatafields`` section of the configuration, where indexed fields are
declared once with a ``#`` wildcard:

    [metadatafields.saml20_sp]
    "AssertionConsumerService:#:index" = { type = "integer" }
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from serviceregistry.config.proxy import ConfigProxy
from serviceregistry.connection.models.enums import TypeTag
from serviceregistry.connection.models.metadata import KEY_SEPARATOR

WILDCARD = "#"

# Field types used in configuration, mapped onto the tags the assembler casts to.
# Anything not listed (text, select, file, ...) is kept as a string.
CONFIG_TYPE_TAGS: dict[str, TypeTag] = {
    "string": TypeTag.STRING,
    "boolean": TypeTag.BOOLEAN,
    "integer": TypeTag.INTEGER,
    "number": TypeTag.INTEGER,
    "list": TypeTag.LIST,
    "multiselect": TypeTag.LIST,
}


@runtime_checkable
class TypeDefinitionSource(Protocol):
    """Lookup of declared metadata field types."""

    def get_field_type(self, connection_type: str, field_name: str) -> TypeTag | None:
        """Return the declared type of a field, or None when undeclared."""
        ...


class MetadataDefinitionHelper:
    """A TypeDefinitionSource bound to one connection type."""

    def __init__(self, connection_type: str, source: TypeDefinitionSource) -> None:
        self.connection_type = connection_type
        self._source = source

    def get_field_type(self, field_name: str) -> TypeTag | None:
        return self._source.get_field_type(self.connection_type, field_name)


def wildcard_name(field_name: str) -> str:
    """Replace numeric path segments with the ``#`` wildcard."""
    return KEY_SEPARATOR.join(
        WILDCARD if part.isdigit() else part for part in field_name.split(KEY_SEPARATOR)
    )


def _to_type_tag(declared: Any) -> TypeTag:
    if isinstance(declared, TypeTag):
        return declared
    return CONFIG_TYPE_TAGS.get(str(declared).lower(), TypeTag.STRING)


class ConfigTypeDefinitionSource:
    """Reads field types from ``metadatafields.<connection type>`` in configuration."""

    def __init__(self, config: ConfigProxy) -> None:
        self._config = config

    def get_field_type(self, connection_type: str, field_name: str) -> TypeTag | None:
        definitions = self._config.get_array(f"metadatafields.{connection_type}", {})

        definition = definitions.get(field_name)
        if definition is None:
            definition = definitions.get(wildcard_name(field_name))
        if definition is None:
            return None

        if isinstance(definition, Mapping):
            return _to_type_tag(definition.get("type", TypeTag.STRING))
        return _to_type_tag(definition)


class StaticTypeDefinitionSource:
    """Dict-backed source: connection type -> field name -> type.

    Field names may use the ``#`` wildcard like the configuration does.
    """

    def __init__(self, definitions: Mapping[str, Mapping[str, TypeTag | str]]) -> None:
        self._definitions = definitions

    def get_field_type(self, connection_type: str, field_name: str) -> TypeTag | None:
        fields = self._definitions.get(connection_type, {})
        declared = fields.get(field_name, fields.get(wildcard_name(field_name)))
        if declared is None:
            return None
        return _to_type_tag(declared)
