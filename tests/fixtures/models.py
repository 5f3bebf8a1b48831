"""Essential test doubles for the repository's collaborators."""

from datetime import UTC, datetime, timedelta

from maple.domain.entities import EntityKind


class FixedClock:
    """Clock returning a fixed instant until advanced."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 12, 0, tzinfo=UTC)

    def utc_now(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FixedPrincipal:
    def __init__(self, principal: str = "tester") -> None:
        self.principal = principal

    def current_principal_id(self) -> str:
        return self.principal


class RecordingSink:
    """Notification sink that keeps every message for assertions."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[tuple[str, BaseException | None]] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append((message, exc))


class FakeStore:
    """In-memory store with a pending unit of work.

    Added and removed records become visible only after ``commit()``, which
    also assigns ids. ``fail_commit_with`` makes the next commits raise.
    """

    def __init__(self) -> None:
        self.records: dict[EntityKind, dict[int, object]] = {
            kind: {} for kind in EntityKind
        }
        self.pending_adds: list[tuple[EntityKind, object]] = []
        self.pending_removes: list[tuple[EntityKind, object]] = []
        self.commit_count = 0
        self.rollback_count = 0
        self.disposed = 0
        self.fail_commit_with: Exception | None = None
        self._next_id = 1

    def find_by_id(self, kind, record_id):
        return self.records[kind].get(record_id)

    def find_all(self, kind, **criteria):
        matches = [
            record
            for record in self.records[kind].values()
            if all(getattr(record, key) == value for key, value in criteria.items())
        ]
        return sorted(matches, key=lambda record: (record.sequence or 0, record.id))

    def add(self, kind, record):
        self.pending_adds.append((kind, record))

    def remove(self, kind, record):
        self.pending_removes.append((kind, record))

    def copy_current_values(self, target, source):
        if target is source:
            return
        for column in type(target).__table__.columns:
            if column.key in ("id", "created_by", "created_on"):
                continue
            setattr(target, column.key, getattr(source, column.key))

    def commit(self):
        if self.fail_commit_with is not None:
            raise self.fail_commit_with
        for kind, record in self.pending_adds:
            if not record.id:
                record.id = self._next_id
                self._next_id += 1
            self.records[kind][record.id] = record
        for kind, record in self.pending_removes:
            self.records[kind].pop(record.id, None)
        self.pending_adds.clear()
        self.pending_removes.clear()
        self.commit_count += 1

    def rollback(self):
        self.pending_adds.clear()
        self.pending_removes.clear()
        self.rollback_count += 1

    def dispose(self):
        self.disposed += 1

    def seed(self, kind, record):
        """Persist a record directly, bypassing the unit of work."""
        record.id = self._next_id
        self._next_id += 1
        self.records[kind][record.id] = record
        return record
