"""Working instances: mutable in-memory wrappers around persisted records.

A working instance owns exactly one record and two lifecycle flags. The record
is whatever the store persists (a mapped row in production, any object with the
right attributes in tests); the wrapper never copies its values.
"""

from datetime import datetime
from typing import Any, Protocol, Self

from attrs import define, field

from .shared import ensure_utc, is_unset_id


class AuditedRecord(Protocol):
    """Attributes every persisted record carries."""

    id: int | None
    sequence: int | None
    created_by: str | None
    created_on: datetime | None
    updated_by: str | None
    updated_on: datetime | None


def record_field(name: str, doc: str | None = None) -> Any:
    """Expose ``record.<name>`` as a read/write property on a working instance."""

    def getter(self: "WorkingInstance") -> Any:
        return getattr(self.record, name)

    def setter(self: "WorkingInstance", value: Any) -> None:
        setattr(self.record, name, value)

    return property(getter, setter, doc=doc or f"Record field ``{name}``.")


@define(slots=True, eq=False)
class WorkingInstance:
    """Base for all working instances.

    Identity semantics (``eq=False``): two wrappers are equal only when they are
    the same object, which is what collection removal relies on.
    """

    record: Any = field()
    is_new: bool = field(default=False)
    is_deleted: bool = field(default=False)

    sequence = record_field("sequence")

    @classmethod
    def new(cls, record: Any, **kwargs: Any) -> Self:
        """Wrap a fresh, never-persisted record and flag it for creation."""
        if not is_unset_id(getattr(record, "id", None)):
            raise ValueError(
                f"Cannot create a new {cls.__name__} from a record that already has id {record.id}"
            )
        return cls(record, is_new=True, **kwargs)

    @property
    def id(self) -> int:
        """Store identifier, 0 until the record has been persisted."""
        return self.record.id or 0

    @property
    def created_by(self) -> str | None:
        return self.record.created_by

    @property
    def created_on(self) -> datetime | None:
        return ensure_utc(self.record.created_on)

    @property
    def updated_by(self) -> str | None:
        return self.record.updated_by

    @property
    def updated_on(self) -> datetime | None:
        return ensure_utc(self.record.updated_on)

    def mark_deleted(self) -> None:
        """Flag this instance for removal on the next save."""
        self.is_deleted = True
