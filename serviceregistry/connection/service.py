"""Revision workflow: creating and cloning connection revisions."""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from serviceregistry.connection.models import Connection, MetadataField, Revision, User
from serviceregistry.db.errors import NotFoundError
from serviceregistry.observability.logging import get_logger
from serviceregistry.stores.revision_store import RevisionStore

logger = get_logger(__name__)

FIRST_REVISION_NR = 0


class RevisionService:
    """Appends revisions to a connection's chain.

    Every change to a connection becomes a new revision numbered one past
    the connection's latest revision, with that latest revision as its
    parent. Audit fields are stamped here, before the revision is saved.
    """

    def __init__(self, store: RevisionStore) -> None:
        """Initialize revision service.

        Args:
            store: Store holding connections and revisions
        """
        self._store = store

    async def create_revision(
        self,
        connection: Connection,
        revision_note: str,
        *,
        user: User | None = None,
        ip: Any = None,
        metadata: Iterable[MetadataField] | None = None,
        **fields: Any,
    ) -> Revision:
        """Build, stamp and save the next revision of a connection.

        The connection is saved first when it has no id yet.
        ``allow_all_entities`` and ``is_active`` default to True.

        Args:
            connection: Connection the revision belongs to
            revision_note: Why the change was made
            user: Administrator making the change
            ip: Address the change came from
            metadata: Metadata fields of the new revision
            **fields: Remaining Revision constructor arguments

        Returns:
            The persisted revision
        """
        connection_id = connection.id
        if connection_id is None:
            connection_id = await self._store.save_connection(connection)

        latest = await self._store.get_latest_revision(connection_id)
        fields.setdefault("allow_all_entities", True)
        fields.setdefault("is_active", True)

        revision = Revision(
            connection=connection,
            revision_nr=FIRST_REVISION_NR if latest is None else latest.revision_nr + 1,
            parent_revision_nr=None if latest is None else latest.revision_nr,
            revision_note=revision_note,
            **fields,
        )
        return await self._save(revision, user=user, ip=ip, metadata=metadata)

    async def clone_revision(
        self,
        connection_id: int,
        revision_nr: int,
        revision_note: str,
        *,
        user: User | None = None,
        ip: Any = None,
        **changes: Any,
    ) -> Revision:
        """Save a copy of a stored revision as the connection's newest revision.

        Cloning an older revision restores its configuration; the copy is
        still numbered after, and parented on, the latest revision.

        Raises:
            NotFoundError: If the source revision does not exist
        """
        source = await self._store.get_revision(connection_id, revision_nr)
        if source is None:
            raise NotFoundError(
                f"Revision {revision_nr} of connection {connection_id} not found"
            )

        latest = await self._store.get_latest_revision(connection_id)
        if latest is None:
            raise NotFoundError(f"Connection {connection_id} has no revisions")
        changes.setdefault("revision_nr", latest.revision_nr + 1)
        changes.setdefault("parent_revision_nr", latest.revision_nr)

        revision = source.next_revision(revision_note, **changes)
        return await self._save(revision, user=user, ip=ip, metadata=None)

    async def _save(
        self,
        revision: Revision,
        *,
        user: User | None,
        ip: Any,
        metadata: Iterable[MetadataField] | None,
    ) -> Revision:
        revision.set_created_at_date(datetime.now(UTC))
        if user is not None:
            revision.set_updated_by_user(user)
        if ip is not None:
            revision.set_updated_from_ip(ip)

        await self._store.save_revision(revision, metadata=metadata)

        logger.info(
            "revision_created",
            connection_id=revision.connection.id,
            revision_id=revision.id,
            revision_nr=revision.revision_nr,
            parent_revision_nr=revision.parent_revision_nr,
            user=user.username if user else None,
        )
        return revision
