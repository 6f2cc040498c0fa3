"""Flat transfer object for editing and cloning revisions."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, IPvAnyAddress

from serviceregistry.connection.models.connection import User
from serviceregistry.connection.models.metadata import MetadataDto

ConnectionReference = dict[str, Any]


class RevisionDto(BaseModel):
    """Flat, serializable snapshot of a revision.

    Fields that do not apply are omitted rather than emptied: they are left
    out of ``model_fields_set`` and out of ``to_dict()``. Audit fields are
    only set for persisted revisions; metadata and relation lists only when
    the revision has them.
    """

    id: int | None = Field(default=None, description="Connection id")
    name: str | None = Field(default=None, description="Connection name")
    type: str | None = Field(default=None, description="Connection type")
    revision_nr: int | None = Field(default=None, description="Revision number")
    parent_revision_nr: int | None = Field(default=None, description="Parent revision number")
    revision_note: str | None = Field(default=None, description="Revision note")
    state: str | None = Field(default=None, description="Workflow state tag")
    expiration_date: datetime | None = Field(default=None, description="Expiry")
    metadata_url: str | None = Field(default=None, description="Remote metadata location")
    metadata_valid_until: datetime | None = Field(default=None)
    metadata_cache_until: datetime | None = Field(default=None)
    allow_all_entities: bool | None = Field(default=None)
    arp_attributes: dict[str, Any] | None = Field(default=None)
    manipulation_code: str | None = Field(default=None, description="Raw manipulation code")
    is_active: bool | None = Field(default=None)
    notes: str | None = Field(default=None)

    # Audit fields, persisted revisions only
    created_at_date: datetime | None = Field(default=None, description="Connection creation")
    updated_at_date: datetime | None = Field(default=None, description="Revision creation")
    updated_by_user: User | None = Field(default=None)
    updated_from_ip: IPvAnyAddress | None = Field(default=None)

    metadata: MetadataDto | None = Field(default=None, description="Assembled metadata")
    allowed_connections: list[ConnectionReference] | None = Field(default=None)
    blocked_connections: list[ConnectionReference] | None = Field(default=None)
    disable_consent_connections: list[ConnectionReference] | None = Field(default=None)

    def is_set(self, field_name: str) -> bool:
        """Whether the projection filled in this field."""
        return field_name in self.model_fields_set

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict of the fields that were set."""
        return self.model_dump(mode="json", exclude_unset=True)
