"""Projection of revisions into RevisionDto."""

from typing import TYPE_CHECKING, Any

from serviceregistry.connection.dto import RevisionDto
from serviceregistry.connection.metadata.assembler import (
    CastingAssembler,
    MetadataAssembler,
    SimpleAssembler,
)
from serviceregistry.connection.metadata.definitions import (
    MetadataDefinitionHelper,
    TypeDefinitionSource,
)
from serviceregistry.connection.models.enums import RelationKind

if TYPE_CHECKING:
    from serviceregistry.connection.models.revision import Revision


class RevisionDtoProjector:
    """Builds the flat RevisionDto used by edit and clone workflows."""

    def to_dto(
        self,
        revision: "Revision",
        type_definitions: TypeDefinitionSource | None = None,
        *,
        assembler: MetadataAssembler | None = None,
    ) -> RevisionDto:
        """Project a revision.

        1. Scalar fields are copied as they are.
        2. Audit fields are only copied for persisted revisions. The
           connection supplies ``created_at_date``; the revision's own
           creation time becomes ``updated_at_date``.
        3. Present metadata is assembled with ``assembler`` when given,
           otherwise with a CastingAssembler when ``type_definitions`` is
           given, otherwise with a SimpleAssembler.
        4. Each present relation set becomes a list of {id, name} pairs.

        Loading metadata or relations may hit the store; its errors
        propagate unchanged.
        """
        fields: dict[str, Any] = revision._scalar_fields()

        if revision.is_persisted:
            fields["created_at_date"] = revision.connection.created_at_date
            fields["updated_at_date"] = revision.created_at_date
            fields["updated_by_user"] = revision.updated_by_user
            fields["updated_from_ip"] = revision.updated_from_ip

        metadata = revision.metadata_collection
        if metadata.is_present:
            chosen = assembler or self.select_assembler(revision.type, type_definitions)
            fields["metadata"] = chosen.assemble(metadata.items())

        for kind in RelationKind:
            relations = revision.relation_collection(kind)
            if relations.is_present:
                fields[kind.dto_field] = [relation.to_reference() for relation in relations]

        return RevisionDto(**fields)

    @staticmethod
    def select_assembler(
        connection_type: str,
        type_definitions: TypeDefinitionSource | None,
    ) -> MetadataAssembler:
        """Casting when a type source is available, simple otherwise."""
        if type_definitions is not None:
            return CastingAssembler(MetadataDefinitionHelper(connection_type, type_definitions))
        return SimpleAssembler()
