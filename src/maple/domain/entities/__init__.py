"""Core domain entities: working instances wrapping persisted media records."""

from .base import AuditedRecord, WorkingInstance, record_field
from .media import (
    AudioDevice,
    DeviceType,
    EntityKind,
    MediaItem,
    MediaPlayer,
    Playlist,
    RepeatMode,
)
from .sequence import MAX_SEQUENCE, next_free_sequence

# Shared utilities
from .shared import ensure_utc, is_unset_id

__all__ = [
    # Working instances
    "AudioDevice",
    "MediaItem",
    "MediaPlayer",
    "Playlist",
    "WorkingInstance",
    # Enumerations
    "DeviceType",
    "EntityKind",
    "RepeatMode",
    # Record contract
    "AuditedRecord",
    "record_field",
    # Sequencing
    "MAX_SEQUENCE",
    "next_free_sequence",
    # Shared utilities
    "ensure_utc",
    "is_unset_id",
]
