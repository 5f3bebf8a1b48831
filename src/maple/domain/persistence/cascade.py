"""Cascading saves from a root entity to its children."""

from collections.abc import Callable, Iterable
from typing import TypeVar

P = TypeVar("P")
C = TypeVar("C")


def cascade_children(
    root: P,
    children_of: Callable[[P], Iterable[C]],
    save_child: Callable[[C, bool], object],
) -> int:
    """Save every child of ``root`` as a non-root save, in iteration order.

    The first failure stops the walk and propagates; children after it are not
    visited. Returns the number of children dispatched.
    """
    count = 0
    for child in children_of(root):
        save_child(child, False)
        count += 1
    return count
