"""Revision stores: storage boundary for connections and their revisions."""

from serviceregistry.stores.inmemory import InMemoryRevisionStore
from serviceregistry.stores.revision_store import RevisionStore

__all__ = [
    "InMemoryRevisionStore",
    "RevisionStore",
]
