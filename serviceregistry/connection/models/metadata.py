"""Metadata field records and the assembled metadata structure."""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel

from serviceregistry.connection.errors import MetadataStructureError

KEY_SEPARATOR = ":"


class MetadataField(BaseModel):
    """A single raw metadata entry as kept by the metadata store."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Colon separated field path")
    value: str = Field(..., description="Stored string value")


class MetadataDto(RootModel[dict[str, Any]]):
    """Metadata of a revision as a nested structure.

    Flat keys are split on ``:``, so ``contacts:0:emailAddress`` ends up
    under ``values["contacts"]["0"]["emailAddress"]``. The model serializes
    to the nested dict itself.
    """

    root: dict[str, Any] = Field(default_factory=dict)

    @property
    def values(self) -> dict[str, Any]:
        return self.root

    @classmethod
    def from_flat(cls, items: Iterable[tuple[str, Any]]) -> "MetadataDto":
        """Build the nested structure from (flat key, value) pairs.

        Raises:
            MetadataStructureError: If a key is both a value and a parent
                of other keys
        """
        values: dict[str, Any] = {}
        for key, value in items:
            parts = key.split(KEY_SEPARATOR)
            node = values
            for part in parts[:-1]:
                child = node.setdefault(part, {})
                if not isinstance(child, dict):
                    raise MetadataStructureError(
                        f"Metadata key {key!r} conflicts with value at {part!r}"
                    )
                node = child
            leaf = parts[-1]
            if isinstance(node.get(leaf), dict):
                raise MetadataStructureError(
                    f"Metadata key {key!r} conflicts with nested keys below it"
                )
            node[leaf] = value
        return cls(values)

    def flatten(self) -> dict[str, Any]:
        """Return the metadata keyed by flat colon separated paths."""
        flat: dict[str, Any] = {}
        _flatten_into(flat, self.values, prefix="")
        return flat

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a value by its flat key."""
        node: Any = self.values
        for part in key.split(KEY_SEPARATOR):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node


def _flatten_into(flat: dict[str, Any], node: dict[str, Any], prefix: str) -> None:
    for key, value in node.items():
        path = f"{prefix}{KEY_SEPARATOR}{key}" if prefix else key
        if isinstance(value, dict):
            _flatten_into(flat, value, path)
        else:
            flat[path] = value
