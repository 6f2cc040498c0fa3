"""Metadata field definition models.

Field definitions are keyed per connection type (``saml20_idp``,
``saml20_sp``, ...) and then by metadata field name. Field names use
``:`` as a path separator and ``#`` as a wildcard for indexed segments,
e.g. ``contacts:#:emailAddress``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MetadataFieldDefinition(BaseModel):
    """Declared shape of a single metadata field."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="text", description="Declared field type")
    required: bool = Field(default=False, description="Field must be filled in")
    default: Any = Field(default=None, description="Value used for new connections")


MetadataFieldsConfig = dict[str, dict[str, MetadataFieldDefinition]]
