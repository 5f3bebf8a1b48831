"""Domain repository interfaces following Clean Architecture principles.

These interfaces define the contracts the repository facade consumes without
depending on infrastructure implementations, following the dependency
inversion principle.
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from maple.domain.entities import EntityKind


class StoreProtocol(Protocol):
    """Storage engine interface: identity-mapped records plus a unit of work.

    Records added, removed or modified are pending until ``commit()``.
    ``rollback()`` discards everything pending.
    """

    def find_by_id(self, kind: "EntityKind", record_id: int) -> Any | None:
        """Return the tracked record with this id, or None."""
        ...

    def find_all(self, kind: "EntityKind", **criteria: Any) -> list[Any]:
        """Return every record of a kind matching equality criteria.

        Results are ordered by sequence, then id.
        """
        ...

    def add(self, kind: "EntityKind", record: Any) -> None:
        """Stage a new record for insertion."""
        ...

    def remove(self, kind: "EntityKind", record: Any) -> None:
        """Stage a record for deletion."""
        ...

    def copy_current_values(self, target: Any, source: Any) -> None:
        """Copy every persisted column except identity from source onto target."""
        ...

    def commit(self) -> None:
        """Commit the pending unit of work."""
        ...

    def rollback(self) -> None:
        """Discard the pending unit of work."""
        ...

    def dispose(self) -> None:
        """Release the underlying connection resources."""
        ...


class ClockProtocol(Protocol):
    """Source of the current instant for audit stamps."""

    def utc_now(self) -> "datetime":
        """Return the current timezone-aware UTC time."""
        ...


class PrincipalResolverProtocol(Protocol):
    """Source of the identity written into audit fields."""

    def current_principal_id(self) -> str:
        """Return a non-blank principal identifier."""
        ...


class NotificationSinkProtocol(Protocol):
    """Operator-facing notification channel."""

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...
