"""Persistence orchestration primitives.

Pure building blocks the repository facade composes: the busy guard, lifecycle
classification, audit stamping and child cascading.
"""

from .audit import stamp_create, stamp_update
from .busy import BusyGuard
from .cascade import cascade_children
from .lifecycle import EntityAction, classify

__all__ = [
    "BusyGuard",
    "EntityAction",
    "cascade_children",
    "classify",
    "stamp_create",
    "stamp_update",
]
