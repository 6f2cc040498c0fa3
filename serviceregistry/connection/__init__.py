"""Connection revisions: versioned snapshots of federated service entries."""

from serviceregistry.connection.dto import RevisionDto
from serviceregistry.connection.errors import MetadataStructureError, RevisionStateError
from serviceregistry.connection.lazy import CollectionState, LazyCollection
from serviceregistry.connection.models import (
    Connection,
    MetadataDto,
    MetadataField,
    Relation,
    RelationKind,
    Revision,
    RevisionLifecycle,
    TypeTag,
    User,
)
from serviceregistry.connection.projector import RevisionDtoProjector

__all__ = [
    "CollectionState",
    "Connection",
    "LazyCollection",
    "MetadataDto",
    "MetadataField",
    "MetadataStructureError",
    "Relation",
    "RelationKind",
    "Revision",
    "RevisionDto",
    "RevisionDtoProjector",
    "RevisionLifecycle",
    "RevisionStateError",
    "TypeTag",
    "User",
]
