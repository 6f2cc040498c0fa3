"""Assemblers turning raw metadata fields into a MetadataDto.

Two strategies are available. SimpleAssembler keeps every stored string as
is. CastingAssembler looks up each field's declared type and converts the
stored string to it, leaving undeclared fields and values that do not
parse as strings.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from serviceregistry.connection.metadata.definitions import MetadataDefinitionHelper
from serviceregistry.connection.models.enums import TypeTag
from serviceregistry.connection.models.metadata import MetadataDto, MetadataField
from serviceregistry.observability.logging import get_logger

logger = get_logger(__name__)

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})
LIST_SEPARATOR = ","


class MetadataAssembler(ABC):
    """Converts raw metadata fields into the metadata part of a RevisionDto."""

    @abstractmethod
    def assemble(self, fields: Iterable[MetadataField]) -> MetadataDto:
        """Build a MetadataDto from raw fields, preserving their order."""
        pass


class SimpleAssembler(MetadataAssembler):
    """Keeps every value as its stored string."""

    def assemble(self, fields: Iterable[MetadataField]) -> MetadataDto:
        return MetadataDto.from_flat((field.name, field.value) for field in fields)


class CastingAssembler(MetadataAssembler):
    """Casts stored strings to the type declared for each field."""

    def __init__(self, definitions: MetadataDefinitionHelper) -> None:
        self._definitions = definitions

    def assemble(self, fields: Iterable[MetadataField]) -> MetadataDto:
        return MetadataDto.from_flat((field.name, self._cast(field)) for field in fields)

    def _cast(self, field: MetadataField) -> Any:
        type_tag = self._definitions.get_field_type(field.name)
        if type_tag is None or type_tag == TypeTag.STRING:
            return field.value

        try:
            return cast_value(field.value, type_tag)
        except ValueError:
            logger.warning(
                "metadata_cast_failed",
                connection_type=self._definitions.connection_type,
                field=field.name,
                declared_type=type_tag.value,
            )
            return field.value


def cast_value(value: str, type_tag: TypeTag) -> Any:
    """Convert a stored string to the given type.

    Raises:
        ValueError: If the string is not a valid value of that type
    """
    if type_tag == TypeTag.BOOLEAN:
        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
        raise ValueError(f"Not a boolean: {value!r}")

    if type_tag == TypeTag.INTEGER:
        return int(value.strip())

    if type_tag == TypeTag.LIST:
        return [item.strip() for item in value.split(LIST_SEPARATOR) if item.strip()]

    return value
