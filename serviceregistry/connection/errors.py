"""Errors raised by the connection revision domain."""


class RevisionStateError(ValueError):
    """Raised when a revision is persisted twice or copied outside next_revision()."""


class MetadataStructureError(ValueError):
    """Raised when flat metadata keys cannot be nested consistently."""
