"""RevisionStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from serviceregistry.connection.models import Connection, MetadataField, Revision


class RevisionStore(ABC):
    """Abstract interface for connection and revision storage.

    Revisions are written once and never updated in place; only their
    relation sets can be extended afterwards. Implementations must reject
    a second revision with the same (connection id, revision number).
    """

    # Connection operations
    @abstractmethod
    async def save_connection(self, connection: Connection) -> int:
        """Save a connection, assigning its id and creation time when missing."""
        pass

    @abstractmethod
    async def get_connection(self, connection_id: int) -> Connection | None:
        """Get a connection by ID."""
        pass

    @abstractmethod
    async def delete_connection(self, connection_id: int) -> bool:
        """Delete a connection with its revisions, metadata and relations."""
        pass

    # Revision operations
    @abstractmethod
    async def save_revision(
        self,
        revision: Revision,
        *,
        metadata: Iterable[MetadataField] | None = None,
    ) -> int:
        """Persist a draft revision with its relations and metadata.

        When ``metadata`` is None the revision's own metadata (if any) is
        stored. The revision is marked persisted.

        Raises:
            ConflictError: If the revision number is taken for the connection
            ValidationError: If the revision is already persisted, refers
                to unsaved connections, or its metadata has duplicate names
                or keys that are both a value and a parent
        """
        pass

    @abstractmethod
    async def append_relations(self, revision: Revision) -> int:
        """Write relations appended to a persisted revision since its last write.

        Each relation collection remembers how many of its items are in the
        store. Nothing is written when any kind was changed in the store by
        another instance since this one loaded or wrote it.

        Returns:
            Number of relation records written

        Raises:
            ConflictError: If the stored relations moved on without this instance
            ValidationError: If the revision is not stored
        """
        pass

    @abstractmethod
    async def get_revision(self, connection_id: int, revision_nr: int) -> Revision | None:
        """Get a revision with lazily loaded metadata and relations."""
        pass

    @abstractmethod
    async def get_latest_revision(self, connection_id: int) -> Revision | None:
        """Get the revision with the highest number for a connection."""
        pass
