"""Connection revision domain models.

Contains the Pydantic models for the revision model:
- Connection and User as referenced by revisions
- Revision as the immutable configuration snapshot
- Relation for allow / block / disable-consent links
- MetadataField and MetadataDto for revision metadata
"""

from serviceregistry.connection.models.connection import Connection, User
from serviceregistry.connection.models.enums import RelationKind, RevisionLifecycle, TypeTag
from serviceregistry.connection.models.metadata import MetadataDto, MetadataField
from serviceregistry.connection.models.relation import Relation
from serviceregistry.connection.models.revision import Revision

__all__ = [
    # Aggregate root
    "Connection",
    "User",
    # Enums
    "RelationKind",
    "RevisionLifecycle",
    "TypeTag",
    # Metadata
    "MetadataDto",
    "MetadataField",
    # Revision
    "Relation",
    "Revision",
]
