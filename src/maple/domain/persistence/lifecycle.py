"""Lifecycle classification of working instances."""

from enum import StrEnum
from typing import Protocol


class EntityAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class LifecycleFlags(Protocol):
    is_new: bool
    is_deleted: bool


def classify(instance: LifecycleFlags) -> EntityAction:
    """Decide which store action a save should take.

    ``is_new`` wins over ``is_deleted``: an instance that was never persisted
    and then marked deleted still classifies as CREATE. Callers that do not
    want it written must drop it before saving.
    """
    if instance.is_new:
        return EntityAction.CREATE
    if instance.is_deleted:
        return EntityAction.DELETE
    return EntityAction.UPDATE
