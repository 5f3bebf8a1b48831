"""Display-order sequence allocation."""

from collections.abc import Iterable
from typing import Protocol

from maple.config import get_logger

logger = get_logger(__name__)

MAX_SEQUENCE = 2**31 - 1


class HasSequence(Protocol):
    sequence: int | None


def next_free_sequence(items: Iterable[HasSequence]) -> int:
    """Return the smallest non-negative sequence not used by any item.

    Items with an unset sequence are ignored. Exhausting the range logs an error
    and returns ``MAX_SEQUENCE`` rather than raising.
    """
    used = {item.sequence for item in items if item.sequence is not None}

    candidate = 0
    while candidate in used:
        if candidate >= MAX_SEQUENCE:
            logger.error(
                "No free sequence below {max_sequence}", max_sequence=MAX_SEQUENCE
            )
            return MAX_SEQUENCE
        candidate += 1
    return candidate
