"""Enums for the connection revision domain."""

from enum import Enum


class RelationKind(str, Enum):
    """Kind of access-control link from a revision to a remote connection.

    - ALLOW: remote connection is explicitly allowed
    - BLOCK: remote connection is explicitly blocked
    - DISABLE_CONSENT: no consent screen is shown for the remote connection
    """

    ALLOW = "allow"
    BLOCK = "block"
    DISABLE_CONSENT = "disable-consent"

    @property
    def dto_field(self) -> str:
        """Name of the RevisionDto list holding relations of this kind."""
        return _DTO_FIELDS[self]


_DTO_FIELDS = {
    RelationKind.ALLOW: "allowed_connections",
    RelationKind.BLOCK: "blocked_connections",
    RelationKind.DISABLE_CONSENT: "disable_consent_connections",
}


class RevisionLifecycle(str, Enum):
    """Persistence state of a revision.

    - DRAFT: constructed in memory, never saved
    - PERSISTED: saved by a store and assigned an id
    """

    DRAFT = "draft"
    PERSISTED = "persisted"


class TypeTag(str, Enum):
    """Declared type of a metadata field, used when casting stored strings."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    LIST = "list"
