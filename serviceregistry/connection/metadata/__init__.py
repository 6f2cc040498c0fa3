"""Metadata assembly: raw metadata fields to typed or raw MetadataDto."""

from serviceregistry.connection.metadata.assembler import (
    CastingAssembler,
    MetadataAssembler,
    SimpleAssembler,
    cast_value,
)
from serviceregistry.connection.metadata.definitions import (
    ConfigTypeDefinitionSource,
    MetadataDefinitionHelper,
    StaticTypeDefinitionSource,
    TypeDefinitionSource,
)

__all__ = [
    "CastingAssembler",
    "ConfigTypeDefinitionSource",
    "MetadataAssembler",
    "MetadataDefinitionHelper",
    "SimpleAssembler",
    "StaticTypeDefinitionSource",
    "TypeDefinitionSource",
    "cast_value",
]
