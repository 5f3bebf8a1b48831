"""Database Unit of Work implementation for transaction boundary management.

This module provides the concrete store behind the media repository: a thin
wrapper around one SQLAlchemy session that tracks records by identity, stages
inserts and deletes, and commits or rolls back the pending unit of work.
"""

from typing import Any, Self

from sqlalchemy import inspect, select
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Session

from maple.config import get_logger
from maple.domain.entities import EntityKind
from maple.domain.errors import PersistenceError
from maple.infrastructure.persistence.database.db_models import (
    MODEL_BY_KIND,
    MapleDBBase,
)
from maple.infrastructure.persistence.repositories.repo_decorator import db_operation

logger = get_logger(__name__)

_WRITE_ONCE = frozenset({"created_by", "created_on"})


def _instance_state(record: Any) -> Any:
    try:
        return inspect(record)
    except NoInspectionAvailable as e:
        raise PersistenceError(
            f"{type(record).__name__} is not a mapped record"
        ) from e


class DatabaseUnitOfWork:
    """Database implementation of the store protocol.

    The session's identity map is the set of tracked records: ``find_by_id``
    returns the same object for the same id until the session is closed.
    Nothing is written until ``commit()``; a failed commit rolls the session
    back before re-raising so it stays usable.
    """

    def __init__(self, session: Session) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self._session = session

    def __enter__(self) -> Self:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit context manager: roll back on error, then dispose."""
        if exc_type is not None:
            self.rollback()
        self.dispose()

    @property
    def session(self) -> Session:
        return self._session

    @staticmethod
    def _model(kind: EntityKind) -> type[MapleDBBase]:
        try:
            return MODEL_BY_KIND[EntityKind(kind)]
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unknown entity kind: {kind!r}") from e

    @db_operation("find_by_id")
    def find_by_id(self, kind: EntityKind, record_id: int) -> Any | None:
        """Return the tracked record with this id, or None."""
        if not record_id:
            return None
        # Lookups must not flush half-built records staged by an ongoing save
        with self._session.no_autoflush:
            return self._session.get(self._model(kind), record_id)

    @db_operation("find_all")
    def find_all(self, kind: EntityKind, **criteria: Any) -> list[Any]:
        """Return all records of a kind matching equality criteria."""
        model = self._model(kind)
        stmt = select(model).filter_by(**criteria).order_by(model.sequence, model.id)
        return list(self._session.scalars(stmt))

    @db_operation("add")
    def add(self, kind: EntityKind, record: Any) -> None:
        """Stage a new record for insertion."""
        self._model(kind)
        _instance_state(record)
        self._session.add(record)

    @db_operation("remove")
    def remove(self, kind: EntityKind, record: Any) -> None:
        """Stage a record for deletion, whatever its session state."""
        model = self._model(kind)
        state = _instance_state(record)

        if state.pending:
            # Never flushed: just stop tracking it
            self._session.expunge(record)
        elif state.persistent:
            self._session.delete(record)
        elif record.id:
            tracked = self.find_by_id(kind, record.id)
            if tracked is not None:
                self._session.delete(tracked)
            else:
                logger.debug(
                    "Nothing to remove for {kind} {record_id}",
                    kind=str(kind),
                    record_id=record.id,
                )
        else:
            logger.debug("Ignoring removal of transient {model}", model=model.__name__)

    @db_operation("copy_current_values")
    def copy_current_values(self, target: Any, source: Any) -> None:
        """Copy column values from source onto target.

        The primary key and the creation audit columns are left alone: they are
        written once, when the record is first persisted.
        """
        if target is source:
            return
        _instance_state(source)
        mapper = _instance_state(target).mapper
        skipped = {column.key for column in mapper.primary_key} | _WRITE_ONCE
        for attr in mapper.column_attrs:
            if attr.key in skipped:
                continue
            setattr(target, attr.key, getattr(source, attr.key))

    @db_operation("commit")
    def commit(self) -> None:
        """Commit the current transaction, rolling back on failure."""
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    @db_operation("rollback")
    def rollback(self) -> None:
        """Explicitly rollback the current transaction."""
        self._session.rollback()

    @db_operation("dispose")
    def dispose(self) -> None:
        """Close the session and release its connection."""
        self._session.close()
