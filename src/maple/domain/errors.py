"""Exception hierarchy for Maple.

Not-found lookups return ``None`` rather than raising; constructor validation
raises ``ValueError``. Everything below signals a failed or refused operation.
"""


class MapleError(Exception):
    """Base class for all Maple errors."""


class PersistenceError(MapleError):
    """A store operation failed and was translated by the store."""


class OperationCancelledError(MapleError):
    """A save observed a cancellation request before committing."""


class RepositoryClosedError(MapleError):
    """The repository was used after ``close()``."""


class UnsupportedEntityError(MapleError, TypeError):
    """The object passed to a save has no registered persistence traits."""

    def __init__(self, entity: object) -> None:
        self.entity = entity
        super().__init__(
            f"No persistence traits registered for {type(entity).__name__}"
        )
