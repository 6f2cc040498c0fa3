"""In-memory implementation of RevisionStore."""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from serviceregistry.connection.errors import MetadataStructureError
from serviceregistry.connection.models import (
    Connection,
    MetadataDto,
    MetadataField,
    Relation,
    RelationKind,
    Revision,
)
from serviceregistry.db.errors import ConflictError, ValidationError
from serviceregistry.observability.logging import get_logger
from serviceregistry.stores.revision_store import RevisionStore

logger = get_logger(__name__)

# Audit fields are not part of the revision's model fields
_AUDIT_FIELDS = ("created_at_date", "updated_by_user", "updated_from_ip")


class InMemoryRevisionStore(RevisionStore):
    """In-memory implementation of RevisionStore for testing and development.

    Uses simple dict storage with linear scan for queries.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._connections: dict[int, Connection] = {}
        self._revisions: dict[int, dict[str, Any]] = {}
        self._revision_ids: dict[tuple[int, int], int] = {}
        self._metadata: dict[int, list[MetadataField]] = {}
        # revision id -> ordered (remote connection id, kind) records
        self._relations: dict[int, list[tuple[int, RelationKind]]] = {}
        self._next_connection_id = 1
        self._next_revision_id = 1

    # Connection operations
    async def save_connection(self, connection: Connection) -> int:
        """Save a connection, assigning its id and creation time when missing."""
        for existing in self._connections.values():
            if (
                existing.id != connection.id
                and existing.name == connection.name
                and existing.type == connection.type
            ):
                raise ConflictError(
                    f"Connection {connection.name!r} of type {connection.type!r} already exists"
                )

        if connection.id is None:
            connection.id = self._next_connection_id
            self._next_connection_id += 1
        if connection.created_at_date is None:
            connection.created_at_date = datetime.now(UTC)

        self._connections[connection.id] = connection
        return connection.id

    async def get_connection(self, connection_id: int) -> Connection | None:
        """Get a connection by ID."""
        return self._connections.get(connection_id)

    async def delete_connection(self, connection_id: int) -> bool:
        """Delete a connection with its revisions, metadata and relations."""
        if self._connections.pop(connection_id, None) is None:
            return False

        removed = [key for key in self._revision_ids if key[0] == connection_id]
        for key in removed:
            revision_id = self._revision_ids.pop(key)
            del self._revisions[revision_id]
            self._metadata.pop(revision_id, None)
            self._relations.pop(revision_id, None)

        # Relations pointing at the deleted connection go with it
        for revision_id, records in self._relations.items():
            self._relations[revision_id] = [
                record for record in records if record[0] != connection_id
            ]

        logger.info(
            "connection_deleted",
            connection_id=connection_id,
            revisions_removed=len(removed),
        )
        return True

    # Revision operations
    async def save_revision(
        self,
        revision: Revision,
        *,
        metadata: Iterable[MetadataField] | None = None,
    ) -> int:
        """Persist a draft revision with its relations and metadata."""
        if revision.is_persisted:
            raise ValidationError(f"Revision {revision.id} is already persisted")

        connection_id = revision.connection.id
        if connection_id is None or connection_id not in self._connections:
            raise ValidationError("Connection must be saved before its revisions")

        key = (connection_id, revision.revision_nr)
        if key in self._revision_ids:
            raise ConflictError(
                f"Revision {revision.revision_nr} already exists for connection {connection_id}"
            )

        records = [
            (self._remote_connection_id(relation), relation.kind)
            for kind in RelationKind
            for relation in revision.relations(kind)
        ]

        if metadata is not None:
            fields = list(metadata)
        else:
            fields = list(revision.metadata or ())
        _check_metadata(fields)

        revision_id = self._next_revision_id
        self._next_revision_id += 1

        record = revision.model_dump(exclude={"connection"})
        record["connection_id"] = connection_id
        record["manipulation_code"] = revision._scalar_fields()["manipulation_code"]
        for name in _AUDIT_FIELDS:
            record[name] = getattr(revision, name)

        self._revisions[revision_id] = record
        self._revision_ids[key] = revision_id
        self._metadata[revision_id] = fields
        self._relations[revision_id] = records

        revision.mark_persisted(revision_id)
        revision.attach_metadata(fields)
        for kind in RelationKind:
            revision.relation_collection(kind).mark_synced()

        logger.info(
            "revision_saved",
            connection_id=connection_id,
            revision_id=revision_id,
            revision_nr=revision.revision_nr,
            relations=len(records),
            metadata_fields=len(fields),
        )
        return revision_id

    async def append_relations(self, revision: Revision) -> int:
        """Write relations appended to a persisted revision since its last write."""
        if not revision.is_persisted or revision.id not in self._relations:
            raise ValidationError("Only stored revisions can have relations appended")

        stored = self._relations[revision.id]
        pending: dict[RelationKind, tuple[Relation, ...]] = {}
        for kind in RelationKind:
            collection = revision.relation_collection(kind)
            if not collection.is_loaded:
                # Nothing was appended to a collection that was never loaded
                continue
            stored_count = sum(1 for _, stored_kind in stored if stored_kind == kind)
            if stored_count != collection.synced_count:
                raise ConflictError(
                    f"{kind.value} relations of revision {revision.id} were written "
                    "by another instance since this one loaded them"
                )
            pending[kind] = collection.unsynced()

        records = [
            (self._remote_connection_id(relation), kind)
            for kind, relations in pending.items()
            for relation in relations
        ]
        stored.extend(records)
        for kind in pending:
            revision.relation_collection(kind).mark_synced()

        written = len(records)
        if written:
            logger.info(
                "relations_appended",
                revision_id=revision.id,
                relations=written,
            )
        return written

    async def get_revision(self, connection_id: int, revision_nr: int) -> Revision | None:
        """Get a revision with lazily loaded metadata and relations."""
        revision_id = self._revision_ids.get((connection_id, revision_nr))
        if revision_id is None:
            return None
        return self._hydrate(revision_id)

    async def get_latest_revision(self, connection_id: int) -> Revision | None:
        """Get the revision with the highest number for a connection."""
        numbers = [nr for cid, nr in self._revision_ids if cid == connection_id]
        if not numbers:
            return None
        return self._hydrate(self._revision_ids[(connection_id, max(numbers))])

    def _hydrate(self, revision_id: int) -> Revision:
        record = dict(self._revisions[revision_id])
        connection = self._connections[record.pop("connection_id")]
        manipulation_code = record.pop("manipulation_code")
        audit = {name: record.pop(name) for name in _AUDIT_FIELDS}

        revision = Revision.restore(
            {"connection": connection, **record},
            revision_id=revision_id,
            manipulation_code=manipulation_code,
        )
        if audit["created_at_date"] is not None:
            revision.set_created_at_date(audit["created_at_date"])
        if audit["updated_by_user"] is not None:
            revision.set_updated_by_user(audit["updated_by_user"])
        if audit["updated_from_ip"] is not None:
            revision.set_updated_from_ip(audit["updated_from_ip"])

        revision.bind_metadata(lambda: list(self._metadata[revision_id]))
        for kind in RelationKind:
            revision.bind_relations(kind, self._relation_loader(revision, kind))
        return revision

    def _relation_loader(
        self, revision: Revision, kind: RelationKind
    ) -> Callable[[], list[Relation]]:
        def load() -> list[Relation]:
            return [
                Relation(revision, self._connections[remote_id], kind)
                for remote_id, stored_kind in self._relations[revision.id]
                if stored_kind == kind
            ]

        return load

    def _remote_connection_id(self, relation: Relation) -> int:
        remote_id = relation.remote_connection.id
        if remote_id is None or remote_id not in self._connections:
            raise ValidationError(
                f"Remote connection {relation.remote_connection.name!r} must be saved first"
            )
        return remote_id


def _check_metadata(fields: list[MetadataField]) -> None:
    names = [field.name for field in fields]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate metadata fields: {', '.join(duplicates)}")
    try:
        MetadataDto.from_flat((field.name, field.value) for field in fields)
    except MetadataStructureError as exc:
        raise ValidationError(f"Invalid metadata: {exc}", cause=exc) from exc
