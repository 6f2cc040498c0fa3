"""Relation between a revision and a remote connection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from serviceregistry.connection.models.connection import Connection
from serviceregistry.connection.models.enums import RelationKind

if TYPE_CHECKING:
    from serviceregistry.connection.models.revision import Revision


@dataclass(frozen=True)
class Relation:
    """Directed link from a revision to a remote connection.

    Relations have no identity of their own: two relations to the same
    remote connection of the same kind compare equal (and hash alike), and
    nothing stops a revision from holding both.
    """

    revision: Revision = field(repr=False, compare=False)
    remote_connection: Connection
    kind: RelationKind

    def __hash__(self) -> int:
        return hash((self.remote_connection.id, self.remote_connection.name, self.kind))

    def to_reference(self) -> dict[str, int | str | None]:
        """Return the {id, name} pair of the remote connection."""
        return self.remote_connection.to_reference()
