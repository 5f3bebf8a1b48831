"""Batch commit control for collection saves.

Saving a large collection in a single transaction holds locks and memory for the
whole run; committing every item is slow. The controller commits at a fixed
interval and once more at the end.

Clean Architecture compliant - no infrastructure dependencies, collaborators
are injected as callables.
"""

from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any, Protocol, TypeVar

from attrs import define, field, validators

from maple.domain.errors import OperationCancelledError

T = TypeVar("T")


class Logger(Protocol):
    """Protocol for logging."""

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        ...


class BatchCommitPolicy(StrEnum):
    """Where the commit interval is anchored.

    LEADING commits after item 0, N, 2N... so the first item is durable
    immediately. TRAILING commits after item N-1, 2N-1... so every interval
    commit covers exactly N items.
    """

    LEADING = "leading"
    TRAILING = "trailing"

    def should_commit(self, index: int, threshold: int) -> bool:
        if self is BatchCommitPolicy.LEADING:
            return index % threshold == 0
        return (index + 1) % threshold == 0


@define(frozen=True, slots=True)
class BatchCommitResult:
    """Counts reported by a completed batch save."""

    processed_count: int
    commit_count: int


def _positive_int(instance: Any, attribute: Any, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{attribute.name} must be a positive integer, got {value!r}")


@define(slots=True)
class BatchCommitController:
    """Save items one by one, committing every ``threshold`` items.

    Each item is saved as a non-root save so it never commits on its own. After
    the loop a final commit runs when the call is a root call or when items are
    pending since the last interval commit. A non-root call therefore still
    commits its tail; nested collection saves rely on that.
    """

    commit: Callable[[], None]
    threshold: int = field(default=100, validator=_positive_int)
    policy: BatchCommitPolicy = field(
        default=BatchCommitPolicy.LEADING,
        converter=BatchCommitPolicy,
        validator=validators.instance_of(BatchCommitPolicy),
    )
    logger: Logger | None = field(default=None)

    def save_batch(
        self,
        items: Iterable[T],
        save_item: Callable[[T, bool], object],
        *,
        is_root: bool = True,
        should_cancel: Callable[[], bool] | None = None,
    ) -> BatchCommitResult:
        """Save ``items`` in order and commit on the configured interval.

        Raises:
            OperationCancelledError: ``should_cancel`` returned True before an item
                was saved or before the final commit. Items already committed
                stay committed.
        """
        processed = 0
        commits = 0
        pending = False

        for index, item in enumerate(items):
            if should_cancel is not None and should_cancel():
                raise OperationCancelledError(
                    f"Batch save cancelled after {processed} items"
                )

            save_item(item, False)
            processed += 1
            pending = True

            if self.policy.should_commit(index, self.threshold):
                self.commit()
                commits += 1
                pending = False
                if self.logger:
                    self.logger.debug(
                        "Batch commit at item {index}", index=index, commits=commits
                    )

        if is_root or pending:
            if should_cancel is not None and should_cancel():
                raise OperationCancelledError(
                    f"Batch save cancelled before final commit of {processed} items"
                )
            self.commit()
            commits += 1

        return BatchCommitResult(processed_count=processed, commit_count=commits)
