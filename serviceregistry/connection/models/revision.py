"""Revision entity: one immutable configuration snapshot of a connection.

Revisions form an append-only chain per connection. A change to a
connection is never written over an existing revision; instead a new
revision is constructed with the next revision number and the previous
number as its parent (see Revision.next_revision).
"""

from collections.abc import Iterable, Mapping
from copy import deepcopy
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    IPvAnyAddress,
    PrivateAttr,
    TypeAdapter,
    field_validator,
)

from serviceregistry.connection.errors import RevisionStateError
from serviceregistry.connection.lazy import LazyCollection, Loader
from serviceregistry.connection.models.connection import Connection, User
from serviceregistry.connection.models.enums import RelationKind, RevisionLifecycle
from serviceregistry.connection.models.metadata import MetadataField
from serviceregistry.connection.models.relation import Relation

if TYPE_CHECKING:
    from serviceregistry.connection.dto import RevisionDto
    from serviceregistry.connection.metadata.assembler import MetadataAssembler
    from serviceregistry.connection.metadata.definitions import TypeDefinitionSource

_DATETIME = TypeAdapter(datetime)
_USER = TypeAdapter(User)
_IP = TypeAdapter(IPvAnyAddress)
_OPTIONAL_STR = TypeAdapter(str | None)


def _empty_relations() -> dict[RelationKind, LazyCollection[Relation]]:
    return {kind: LazyCollection.loaded() for kind in RelationKind}


class Revision(BaseModel):
    """Immutable, numbered snapshot of a connection's configuration.

    Structural fields are fixed at construction. After construction only
    the three relation sets can grow (never shrink) and the audit fields
    can be filled in through their setters.

    ``name`` and ``type`` are copied from the connection when the revision
    is built, so renaming a connection later does not rewrite history.

    The manipulation code is kept private: readers only learn whether one
    is present, and it never appears in ``model_dump()``.
    """

    model_config = ConfigDict(frozen=True)

    connection: Connection = Field(..., description="Owning connection")
    name: str = Field(..., description="Connection name at construction time")
    type: str = Field(..., description="Connection type at construction time")
    revision_nr: int = Field(..., ge=0, description="Position in the connection's chain")
    parent_revision_nr: int | None = Field(
        default=None, ge=0, description="Revision this one supersedes"
    )
    revision_note: str = Field(..., description="Why this revision was made")
    state: str | None = Field(default=None, description="Workflow state tag")
    expiration_date: datetime | None = Field(default=None, description="Expiry of the entry")
    metadata_url: str | None = Field(default=None, description="Remote metadata location")
    metadata_valid_until: datetime | None = Field(
        default=None, description="Remote metadata validity"
    )
    metadata_cache_until: datetime | None = Field(
        default=None, description="Remote metadata cache expiry"
    )
    allow_all_entities: bool = Field(..., description="Allow every remote connection")
    arp_attributes: dict[str, Any] | None = Field(
        default=None, description="Attribute release policy"
    )
    is_active: bool = Field(..., description="Connection is active in this revision")
    notes: str | None = Field(default=None, description="Free text notes")

    _id: int | None = PrivateAttr(default=None)
    _lifecycle: RevisionLifecycle = PrivateAttr(default=RevisionLifecycle.DRAFT)
    _manipulation_code: str | None = PrivateAttr(default=None)
    _created_at_date: datetime | None = PrivateAttr(default=None)
    _updated_by_user: User | None = PrivateAttr(default=None)
    _updated_from_ip: Any = PrivateAttr(default=None)
    _metadata: LazyCollection[MetadataField] = PrivateAttr(
        default_factory=LazyCollection.absent
    )
    _relations: dict[RelationKind, LazyCollection[Relation]] = PrivateAttr(
        default_factory=_empty_relations
    )

    def __init__(
        self,
        *,
        connection: Connection,
        manipulation_code: str | None = None,
        allowed_connections: Iterable[Connection] = (),
        blocked_connections: Iterable[Connection] = (),
        disable_consent_connections: Iterable[Connection] = (),
        **data: Any,
    ) -> None:
        super().__init__(
            connection=connection,
            name=connection.name,
            type=connection.type,
            **data,
        )
        self._manipulation_code = _OPTIONAL_STR.validate_python(manipulation_code)

        for remote in allowed_connections:
            self.allow_connection(remote)
        for remote in blocked_connections:
            self.block_connection(remote)
        for remote in disable_consent_connections:
            self.disable_consent_for_connection(remote)

    @classmethod
    def restore(
        cls,
        record: Mapping[str, Any],
        *,
        revision_id: int,
        manipulation_code: str | None = None,
    ) -> "Revision":
        """Rebuild a stored revision.

        Unlike the constructor, ``name`` and ``type`` come from the record,
        not from the connection, since they were copied when the revision
        was first built. Records come from revisions that were validated
        when constructed, so they are not validated again. Relations and
        metadata are bound by the caller.
        """
        revision = cls.model_construct(**record)
        revision._manipulation_code = _OPTIONAL_STR.validate_python(manipulation_code)
        return revision.mark_persisted(revision_id)

    def model_copy(
        self,
        *,
        update: Mapping[str, Any] | None = None,  # noqa: ARG002
        deep: bool = False,  # noqa: ARG002
    ) -> "Revision":
        """Revisions are not copied; derive the superseding draft instead.

        Raises:
            RevisionStateError: Always; use next_revision()
        """
        raise RevisionStateError("Revisions cannot be copied, use next_revision()")

    def __copy__(self) -> "Revision":
        raise RevisionStateError("Revisions cannot be copied, use next_revision()")

    def __deepcopy__(self, memo: dict[int, Any] | None = None) -> "Revision":
        raise RevisionStateError("Revisions cannot be copied, use next_revision()")

    @field_validator("revision_note", mode="before")
    @classmethod
    def validate_revision_note(cls, v: Any) -> str:
        """Reject empty and non-string notes."""
        if not isinstance(v, str) or not v:
            raise ValueError(f"Invalid revision note {v!r}")
        return v

    # Identity and lifecycle
    @property
    def id(self) -> int | None:
        return self._id

    @property
    def lifecycle(self) -> RevisionLifecycle:
        return self._lifecycle

    @property
    def is_persisted(self) -> bool:
        return self._lifecycle == RevisionLifecycle.PERSISTED

    def mark_persisted(self, revision_id: int) -> "Revision":
        """Record that a store saved this revision under the given id."""
        if self.is_persisted:
            raise RevisionStateError(f"Revision {self._id} is already persisted")
        self._id = revision_id
        self._lifecycle = RevisionLifecycle.PERSISTED
        return self

    # Audit fields
    @property
    def created_at_date(self) -> datetime | None:
        return self._created_at_date

    @property
    def updated_by_user(self) -> User | None:
        return self._updated_by_user

    @property
    def updated_from_ip(self) -> Any:
        return self._updated_from_ip

    def set_created_at_date(self, created_at_date: datetime) -> "Revision":
        self._created_at_date = _DATETIME.validate_python(created_at_date)
        return self

    def set_updated_by_user(self, updated_by_user: User) -> "Revision":
        self._updated_by_user = _USER.validate_python(updated_by_user)
        return self

    def set_updated_from_ip(self, updated_from_ip: Any) -> "Revision":
        """Set the address the change came from (str or ipaddress object)."""
        self._updated_from_ip = _IP.validate_python(updated_from_ip)
        return self

    def is_manipulation_code_present(self) -> bool:
        return bool(self._manipulation_code)

    # Metadata
    @property
    def metadata(self) -> tuple[MetadataField, ...] | None:
        """Metadata fields, loaded from the store on first access.

        None when no metadata backs this revision.
        """
        if not self._metadata.is_present:
            return None
        return self._metadata.items()

    @property
    def metadata_collection(self) -> LazyCollection[MetadataField]:
        return self._metadata

    def bind_metadata(self, loader: Loader[MetadataField]) -> "Revision":
        """Back the metadata with a store loader, called on first access."""
        self._metadata = LazyCollection.deferred(loader)
        return self

    def attach_metadata(self, fields: Iterable[MetadataField]) -> "Revision":
        """Back the metadata with fields already in memory."""
        self._metadata = LazyCollection.loaded(fields)
        return self

    # Relations
    def add_relation(self, kind: RelationKind, remote_connection: Connection) -> "Revision":
        """Append a relation of the given kind. Duplicates are kept."""
        self._relations[kind].append(Relation(self, remote_connection, kind))
        return self

    def allow_connection(self, remote_connection: Connection) -> "Revision":
        return self.add_relation(RelationKind.ALLOW, remote_connection)

    def block_connection(self, remote_connection: Connection) -> "Revision":
        return self.add_relation(RelationKind.BLOCK, remote_connection)

    def disable_consent_for_connection(self, remote_connection: Connection) -> "Revision":
        return self.add_relation(RelationKind.DISABLE_CONSENT, remote_connection)

    def relations(self, kind: RelationKind) -> tuple[Relation, ...]:
        """Relations of one kind in the order they were added."""
        return self._relations[kind].items()

    def relation_collection(self, kind: RelationKind) -> LazyCollection[Relation]:
        return self._relations[kind]

    def bind_relations(self, kind: RelationKind, loader: Loader[Relation]) -> "Revision":
        """Back one relation set with a store loader, called on first access."""
        self._relations[kind] = LazyCollection.deferred(loader)
        return self

    def detach_relations(self, kind: RelationKind) -> "Revision":
        """Mark one relation set as not loaded for this instance."""
        self._relations[kind] = LazyCollection.absent()
        return self

    # Projections
    def to_dto(
        self,
        type_definitions: "TypeDefinitionSource | None" = None,
        *,
        assembler: "MetadataAssembler | None" = None,
    ) -> "RevisionDto":
        """Project this revision into a flat RevisionDto.

        See RevisionDtoProjector.to_dto for the rules.
        """
        from serviceregistry.connection.projector import RevisionDtoProjector

        return RevisionDtoProjector().to_dto(self, type_definitions, assembler=assembler)

    def compare_view(self) -> dict[str, Any]:
        """Fields used to diff two revisions of a connection.

        The manipulation code is reduced to a presence flag. Metadata and
        relation lists that are not backed by anything are left out.
        """
        view: dict[str, Any] = {
            "connection_id": self.connection.id,
            "name": self.name,
            "type": self.type,
            "state": self.state,
            "metadata_url": self.metadata_url,
            "allow_all_entities": self.allow_all_entities,
            "arp_attributes": self.arp_attributes,
            "manipulation_code_present": self.is_manipulation_code_present(),
            "notes": self.notes,
            "is_active": self.is_active,
        }
        if self._metadata.is_present:
            view["metadata"] = {field.name: field.value for field in self._metadata.items()}
        for kind, collection in self._relations.items():
            if collection.is_present:
                view[kind.dto_field] = [relation.to_reference() for relation in collection]
        return view

    def next_revision(self, revision_note: str, **changes: Any) -> "Revision":
        """Build the draft that supersedes this revision.

        Every structural field and relation list is carried over unless
        overridden in ``changes``. Passing ``metadata`` replaces the
        carried-over metadata fields.
        """
        metadata = changes.pop("metadata", None)
        if metadata is None and self._metadata.is_present:
            metadata = self._metadata.items()

        arguments: dict[str, Any] = {
            "connection": self.connection,
            "revision_nr": self.revision_nr + 1,
            "parent_revision_nr": self.revision_nr,
            "revision_note": revision_note,
            "state": self.state,
            "expiration_date": self.expiration_date,
            "metadata_url": self.metadata_url,
            "metadata_valid_until": self.metadata_valid_until,
            "metadata_cache_until": self.metadata_cache_until,
            "allow_all_entities": self.allow_all_entities,
            "arp_attributes": deepcopy(self.arp_attributes),
            "manipulation_code": self._manipulation_code,
            "is_active": self.is_active,
            "notes": self.notes,
            "allowed_connections": self._remote_connections(RelationKind.ALLOW),
            "blocked_connections": self._remote_connections(RelationKind.BLOCK),
            "disable_consent_connections": self._remote_connections(
                RelationKind.DISABLE_CONSENT
            ),
        }
        arguments.update(changes)

        revision = Revision(**arguments)
        if metadata is not None:
            revision.attach_metadata(metadata)
        return revision

    def _remote_connections(self, kind: RelationKind) -> list[Connection]:
        return [relation.remote_connection for relation in self._relations[kind]]

    def _scalar_fields(self) -> dict[str, Any]:
        """Scalar fields copied into transfer objects, raw code included."""
        return {
            "id": self.connection.id,
            "name": self.name,
            "type": self.type,
            "revision_nr": self.revision_nr,
            "parent_revision_nr": self.parent_revision_nr,
            "revision_note": self.revision_note,
            "state": self.state,
            "expiration_date": self.expiration_date,
            "metadata_url": self.metadata_url,
            "metadata_valid_until": self.metadata_valid_until,
            "metadata_cache_until": self.metadata_cache_until,
            "allow_all_entities": self.allow_all_entities,
            "arp_attributes": self.arp_attributes,
            "manipulation_code": self._manipulation_code,
            "is_active": self.is_active,
            "notes": self.notes,
        }
