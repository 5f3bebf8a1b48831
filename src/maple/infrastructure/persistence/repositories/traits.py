"""Per-kind persistence traits.

The repository saves every entity kind through one code path; what differs
between kinds is captured here: the store kind, the mapper, which working
instances cascade from a parent and how a child is attached to its parent
before it is saved.
"""

from collections.abc import Callable, Iterable
from typing import Any

from attrs import define, field

from maple.domain.entities import (
    AudioDevice,
    EntityKind,
    MediaItem,
    MediaPlayer,
    Playlist,
    WorkingInstance,
)
from maple.domain.errors import UnsupportedEntityError

from .mappers import (
    AudioDeviceMapper,
    BaseModelMapper,
    MediaItemMapper,
    MediaPlayerMapper,
    PlaylistMapper,
)


def _no_children(entity: Any) -> Iterable[WorkingInstance]:
    return ()


def _no_link(parent: Any, child: Any) -> None:
    return None


@define(frozen=True, slots=True)
class EntityTraits:
    """Everything the repository needs to know about one entity kind."""

    kind: EntityKind
    entity_type: type[WorkingInstance]
    mapper: type[BaseModelMapper]
    children: Callable[[Any], Iterable[WorkingInstance]] = field(default=_no_children)
    link: Callable[[Any, Any], None] = field(default=_no_link)


def _playlist_items(playlist: Playlist) -> Iterable[MediaItem]:
    return list(playlist.items)


def _link_item_to_playlist(playlist: Playlist, item: MediaItem) -> None:
    # A stored parent may be detached from this store's session, so link it
    # by key only; an unsaved parent gets its id on flush via the relationship
    if playlist.id:
        item.playlist_id = playlist.id
    else:
        item.record.playlist = playlist.record


def _player_playlist(player: MediaPlayer) -> Iterable[Playlist]:
    return [player.playlist] if player.playlist is not None else []


def _link_player_to_playlist(player: MediaPlayer, playlist: Playlist) -> None:
    if playlist.id:
        player.playlist_id = playlist.id
    else:
        player.record.playlist = playlist.record


PLAYLIST_TRAITS = EntityTraits(
    kind=EntityKind.PLAYLIST,
    entity_type=Playlist,
    mapper=PlaylistMapper,
    children=_playlist_items,
    link=_link_item_to_playlist,
)
MEDIA_ITEM_TRAITS = EntityTraits(
    kind=EntityKind.MEDIA_ITEM,
    entity_type=MediaItem,
    mapper=MediaItemMapper,
)
MEDIA_PLAYER_TRAITS = EntityTraits(
    kind=EntityKind.MEDIA_PLAYER,
    entity_type=MediaPlayer,
    mapper=MediaPlayerMapper,
    children=_player_playlist,
    link=_link_player_to_playlist,
)
AUDIO_DEVICE_TRAITS = EntityTraits(
    kind=EntityKind.AUDIO_DEVICE,
    entity_type=AudioDevice,
    mapper=AudioDeviceMapper,
)

TRAITS_BY_KIND: dict[EntityKind, EntityTraits] = {
    traits.kind: traits
    for traits in (
        PLAYLIST_TRAITS,
        MEDIA_ITEM_TRAITS,
        MEDIA_PLAYER_TRAITS,
        AUDIO_DEVICE_TRAITS,
    )
}


def traits_for(entity: object) -> EntityTraits:
    """Look up the traits for a working instance by its type.

    Raises:
        UnsupportedEntityError: ``entity`` is not a registered working instance
    """
    for traits in TRAITS_BY_KIND.values():
        if isinstance(entity, traits.entity_type):
            return traits
    raise UnsupportedEntityError(entity)
