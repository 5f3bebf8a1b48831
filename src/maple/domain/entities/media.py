"""Media working instances: playlists, media items, players and audio devices."""

from collections.abc import Iterable
from enum import StrEnum

from attrs import define, field

from .base import WorkingInstance, record_field
from .sequence import next_free_sequence


class EntityKind(StrEnum):
    """Persisted entity kinds known to the store."""

    PLAYLIST = "playlist"
    MEDIA_ITEM = "media_item"
    MEDIA_PLAYER = "media_player"
    AUDIO_DEVICE = "audio_device"


class RepeatMode(StrEnum):
    NONE = "none"
    SINGLE = "single"
    ALL = "all"


class DeviceType(StrEnum):
    UNKNOWN = "unknown"
    WASAPI = "wasapi"
    DIRECT_SOUND = "direct_sound"
    ASIO = "asio"


@define(slots=True, eq=False)
class MediaItem(WorkingInstance):
    """A playable location (file or stream) belonging to one playlist."""

    title = record_field("title")
    location = record_field("location")
    duration_ms = record_field("duration_ms")
    playlist_id = record_field("playlist_id")


@define(slots=True, eq=False)
class Playlist(WorkingInstance):
    """An ordered collection of media items.

    ``items`` is the in-memory child collection; saving the playlist cascades to
    every item in it. Removing an item from the list does not delete it from the
    store, mark it deleted and save it for that.
    """

    items: list[MediaItem] = field(factory=list)

    title = record_field("title")
    description = record_field("description")
    repeat_mode = record_field("repeat_mode")
    is_shuffeling = record_field("is_shuffeling")

    def add(self, item: MediaItem) -> None:
        """Append an item, assigning the next free sequence if it has none."""
        if item.sequence is None:
            item.sequence = next_free_sequence(self.items)
        self.items.append(item)

    def add_range(self, items: Iterable[MediaItem]) -> None:
        for item in items:
            self.add(item)

    def remove(self, item: MediaItem) -> None:
        """Remove every occurrence of ``item``."""
        self.items[:] = [existing for existing in self.items if existing is not item]

    def clear(self) -> None:
        self.items.clear()


@define(slots=True, eq=False)
class MediaPlayer(WorkingInstance):
    """A player bound to one playlist and optionally one audio device."""

    playlist: Playlist | None = field(default=None)

    name = record_field("name")
    is_primary = record_field("is_primary")
    playlist_id = record_field("playlist_id")
    audio_device_id = record_field("audio_device_id")


@define(slots=True, eq=False)
class AudioDevice(WorkingInstance):
    """An output device as reported by the operating system."""

    os_id = record_field("os_id")
    name = record_field("name")
    device_type = record_field("device_type")
