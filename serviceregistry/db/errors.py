"""Store error hierarchy for storage backends.

All store implementations must raise these errors for consistent error handling.
"""


class StoreError(Exception):
    """Base exception for all store errors.

    Store implementations wrap lower-level errors in one of the
    subclasses and keep the original as ``cause``.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class NotFoundError(StoreError):
    """Raised when requested entity is not found.

    This should be raised when a specific entity lookup fails,
    not for empty search results.
    """

    pass


class ConflictError(StoreError):
    """Raised when a write collides with what is already stored.

    Examples:
        - A second revision with the same connection and revision number
        - A second connection with the same name and type
        - Appending relations from an instance that is behind the store
    """

    pass


class ValidationError(StoreError):
    """Raised on invalid data.

    Examples:
        - Saving a revision for a connection that was never saved
        - Saving a revision that is already persisted
        - Saving metadata whose keys do not nest (``coin`` and ``coin:hidden``)
    """

    pass
